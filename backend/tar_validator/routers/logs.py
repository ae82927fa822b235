"""Validation log router — audit export and reset."""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from tar_validator.dependencies import get_log_service
from tar_validator.services.validation_log_service import ValidationLogService

router = APIRouter()


@router.get("/export")
def export_logs(
    format: str = Query("json", pattern="^(csv|json)$"),
    service: ValidationLogService = Depends(get_log_service),
):
    """Export the validation log as CSV or JSON."""
    rows = service.export_rows()
    if not rows:
        raise HTTPException(status_code=404, detail="No validation logs found")

    if format == "json":
        return {"success": True, "count": len(rows), "data": rows}

    return StreamingResponse(
        iter([service.export_csv()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=tar_validation_logs.csv"},
    )


@router.delete("")
def clear_logs(service: ValidationLogService = Depends(get_log_service)):
    count = service.clear()
    return {"success": True, "message": "Validation logs cleared", "deleted": count}
