"""Documents router — text extraction and completeness review of uploads."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from tar_validator.dependencies import get_document_processor
from tar_validator.services.document_processor import DocumentProcessor
from tar_validator.services.document_review import classify_document, review_document, risk_score
from tar_validator.services.document_source import SUPPORTED_MEDIA_TYPES

logger = logging.getLogger(__name__)

router = APIRouter()


def _read_upload(file: UploadFile, processor: DocumentProcessor) -> bytes:
    media_type = file.content_type or ""
    if media_type not in SUPPORTED_MEDIA_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file format. Please upload PDF or Word document",
        )
    content = file.file.read()
    if len(content) > processor.config.max_file_size:
        raise HTTPException(status_code=413, detail="File size exceeds maximum limit")
    return content


@router.post("/extract")
def extract_document(
    file: UploadFile = File(...),
    processor: DocumentProcessor = Depends(get_document_processor),
):
    """Extract TAR fields and an itinerary from an uploaded PDF or Word file."""
    content = _read_upload(file, processor)
    processed = processor.process_bytes(content, file.content_type, file.filename or "document")
    if not processed.success:
        raise HTTPException(status_code=422, detail=processed.error)
    return processed.to_dict()


@router.post("/review")
def review_upload(
    file: UploadFile = File(...),
    processor: DocumentProcessor = Depends(get_document_processor),
):
    """Classify an upload as TAR, RIP or invoice and score its completeness."""
    content = _read_upload(file, processor)
    text = processor.text_source.extract_text(content, file.content_type)
    if not text:
        raise HTTPException(status_code=422, detail="No text could be extracted from the document")

    filename = file.filename or ""
    doc_type = classify_document(text, filename)
    review = review_document(doc_type, text, filename)
    return {
        "documentType": doc_type,
        "review": review.to_dict(),
        "riskScore": risk_score(review),
    }
