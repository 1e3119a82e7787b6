"""
AdCarbon — Reports Routes
Batch analysis of several banners exported as JSON or CSV.
"""
import csv
import io
import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse, StreamingResponse

from adcarbon.api.uploads import read_upload
from adcarbon.core.config import settings
from adcarbon.core.errors import InvalidArgumentError
from adcarbon.schemas.schemas import BatchReport
from adcarbon.services.pipeline import build_batch_report
from adcarbon.utils.carbon import format_co2_value, format_view_count

logger = logging.getLogger(__name__)
router = APIRouter()

CSV_HEADER = [
    "File Name", "Resolution", "File Size", "Format", "Tier",
    "AI Total CO2", "Traditional Total CO2", "Savings", "Confidence", "Error",
]


@router.post(
    "/{format}",
    summary="Export a batch report",
    description="Analyze several banners at one view count and export the results as JSON or CSV.",
)
async def export_report(
    format: str,
    files: List[UploadFile] = File(...),
    view_count: Optional[int] = Form(default=None),
):
    """Build and export a batch CO2 report."""
    if format not in ("json", "csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported format: {format}. Use json or csv.",
        )
    if len(files) > settings.REPORT_MAX_IMAGES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum {settings.REPORT_MAX_IMAGES} images per report",
        )
    if view_count is None:
        view_count = settings.DEFAULT_VIEW_COUNT

    uploads = [await read_upload(f) for f in files]
    try:
        report = await build_batch_report(
            uploads,
            view_count,
            config=settings.estimator_config(),
            max_size_mb=settings.MAX_UPLOAD_SIZE_MB,
        )
    except InvalidArgumentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(f"Report: {report.analyzed}/{report.total_images} banners analyzed at {view_count} views")

    if format == "json":
        return _export_json(report)
    return _export_csv(report)


def _export_json(report: BatchReport) -> JSONResponse:
    return JSONResponse(
        content={
            "report": report.model_dump(),
            "generated_by": settings.APP_NAME,
        },
        headers={"Content-Disposition": 'attachment; filename="adcarbon_report.json"'},
    )


def _co2_cell(value: Optional[float]) -> str:
    return "" if value is None else format_co2_value(value)


def _export_csv(report: BatchReport) -> StreamingResponse:
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(CSV_HEADER)
    for row in report.rows:
        writer.writerow([
            row.file_name,
            row.resolution or "",
            row.file_size or "",
            row.format or "",
            row.tier or "",
            _co2_cell(row.ai_total_co2),
            _co2_cell(row.traditional_total_co2),
            _co2_cell(row.savings_co2),
            row.confidence or "",
            row.error or "",
        ])

    # Summary
    writer.writerow([])
    writer.writerow(["Summary"])
    writer.writerow(["Views", format_view_count(report.view_count)])
    writer.writerow(["Images Analyzed", report.analyzed])
    writer.writerow(["Errors", report.errors])
    writer.writerow(["AI Total CO2", format_co2_value(report.ai_total_co2)])
    writer.writerow(["Traditional Total CO2", format_co2_value(report.traditional_total_co2)])
    writer.writerow(["Total Savings", report.total_savings_formatted])
    writer.writerow(["Generated by", settings.APP_NAME])

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="adcarbon_report.csv"'},
    )
