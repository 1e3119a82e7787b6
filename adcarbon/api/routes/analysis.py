"""
AdCarbon — Analysis Routes
Single banner analysis, view count options and ad-hoc totals.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from adcarbon.api.uploads import read_upload
from adcarbon.core.config import settings
from adcarbon.core.errors import FileValidationError, ImageDecodeError, InvalidArgumentError
from adcarbon.schemas.schemas import AnalysisResult, TotalsRequest, TotalsResponse, ViewCountOption
from adcarbon.services.pipeline import analyze_upload
from adcarbon.utils.carbon import (
    calculate_recovery_metrics,
    calculate_recovery_metrics_v2,
    calculate_total_co2,
    format_co2_value,
    view_count_options,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=AnalysisResult,
    summary="Analyze a banner",
    description="Upload a banner image to compare AI generation and traditional design CO2.",
)
async def analyze_banner(
    file: UploadFile = File(...),
    view_count: Optional[int] = Form(default=None),
):
    """Estimate the footprint of one uploaded banner."""
    upload = await read_upload(file)
    if view_count is None:
        view_count = settings.DEFAULT_VIEW_COUNT

    try:
        return await analyze_upload(
            upload,
            view_count,
            config=settings.estimator_config(),
            max_size_mb=settings.MAX_UPLOAD_SIZE_MB,
        )
    except FileValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidArgumentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ImageDecodeError as e:
        logger.warning(f"Could not decode {upload.filename!r}: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{e}. Please upload a valid image.",
        )


@router.get(
    "/view-counts",
    response_model=List[ViewCountOption],
    summary="List view count presets",
)
async def list_view_counts():
    return view_count_options()


@router.post(
    "/totals",
    response_model=TotalsResponse,
    summary="Aggregate CO2 over views",
    description="Combine generation and per-view transmission CO2 and derive offsets.",
)
async def compute_totals(payload: TotalsRequest):
    try:
        total = calculate_total_co2(
            payload.generation_co2, payload.transmission_co2_per_view, payload.view_count
        )
        return TotalsResponse(
            total_co2=total,
            total_co2_formatted=format_co2_value(total),
            recovery=calculate_recovery_metrics(total / 1000),
            offsets=calculate_recovery_metrics_v2(total / 1000),
        )
    except InvalidArgumentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
