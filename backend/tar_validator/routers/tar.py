"""TAR router — single, PDF-report and bulk CSV validation."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from tar_validator.dependencies import get_bulk_service, get_validation_service
from tar_validator.schemas.tar import (
    BulkValidationItem,
    TarValidationRequest,
    ValidationResultResponse,
)
from tar_validator.services.bulk_validation_service import BulkValidationService
from tar_validator.services.report_export_service import report_export_service
from tar_validator.services.tar_validation_service import TarValidationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/validate", response_model=ValidationResultResponse)
def validate_tar(
    req: TarValidationRequest,
    service: TarValidationService = Depends(get_validation_service),
):
    """Validate one TAR against per diem rates."""
    return service.validate(req.to_tar_data()).to_dict()


@router.post("/validate/pdf")
def validate_tar_pdf(
    req: TarValidationRequest,
    service: TarValidationService = Depends(get_validation_service),
):
    """Validate one TAR and download the report as PDF."""
    result = service.validate(req.to_tar_data())
    if result.report is None:
        return JSONResponse(status_code=422, content=result.to_dict())

    pdf_bytes = report_export_service.generate_validation_pdf(result)
    name = (result.report.authorization_number or "report").replace("/", "-").replace(" ", "_")
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=tar_validation_{name}.pdf"},
    )


@router.post("/bulk", response_model=list[BulkValidationItem])
def validate_bulk(
    file: UploadFile = File(...),
    service: BulkValidationService = Depends(get_bulk_service),
):
    """Validate every TAR in a CSV cost-line export."""
    raw = file.file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")
    if not text.strip():
        raise HTTPException(status_code=400, detail="CSV file is empty")

    results = service.validate_csv(text)
    logger.info(f"Bulk upload {file.filename}: {len(results)} TARs validated")
    return results
