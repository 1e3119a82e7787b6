"""
AdCarbon — Analysis Pipeline
Runs one upload through validation, metadata extraction, both emission
estimators and the aggregation math. Stateless per call.
"""
import logging
import random
from typing import List, Optional, Sequence

from adcarbon.core.config import EstimatorConfig
from adcarbon.core.errors import AdCarbonError, InvalidArgumentError
from adcarbon.schemas.schemas import (
    AnalysisResult,
    BatchReport,
    ImageUpload,
    PathImpact,
    ReportRow,
)
from adcarbon.services.ad_comparison import generate_comparison
from adcarbon.services.co2_estimator import estimate_co2_emissions, estimate_traditional_co2_emissions
from adcarbon.services.image_processing import (
    DEFAULT_MAX_SIZE_MB,
    ensure_valid_image_file,
    extract_image_metadata,
    format_byte_size_four_ladder,
)
from adcarbon.services.openai_client import EstimationService
from adcarbon.utils.carbon import (
    calculate_recovery_metrics,
    calculate_recovery_metrics_v2,
    calculate_total_co2,
    co2_share_percentages,
    format_co2_value,
    format_view_count,
)
from adcarbon.utils.comparisons import select_comparisons

logger = logging.getLogger(__name__)


def build_path_impact(creation_co2: float, transmission_co2_per_view: float, view_count: int) -> PathImpact:
    """Totals, shares and recovery metrics for one pathway."""
    total_co2 = calculate_total_co2(creation_co2, transmission_co2_per_view, view_count)
    transmission_co2 = transmission_co2_per_view * view_count
    creation_pct, transmission_pct = co2_share_percentages(creation_co2, transmission_co2)

    return PathImpact(
        creation_co2=creation_co2,
        transmission_co2=transmission_co2,
        total_co2=total_co2,
        total_co2_formatted=format_co2_value(total_co2),
        creation_percentage=creation_pct,
        transmission_percentage=transmission_pct,
        recovery=calculate_recovery_metrics(total_co2 / 1000),
    )


async def analyze_upload(
    upload: ImageUpload,
    view_count: int,
    *,
    config: EstimatorConfig,
    service: Optional[EstimationService] = None,
    max_size_mb: float = DEFAULT_MAX_SIZE_MB,
    rng: Optional[random.Random] = None,
) -> AnalysisResult:
    """
    Full analysis of one uploaded banner.

    Raises FileValidationError or ImageDecodeError when the upload is unusable
    and InvalidArgumentError for a negative view count. Estimation problems
    never surface here, they degrade to the fallback formulas.
    """
    if view_count < 0:
        raise InvalidArgumentError("View count must be non-negative")

    ensure_valid_image_file(upload, max_size_mb)
    metadata = await extract_image_metadata(upload)

    co2 = await estimate_co2_emissions(metadata, config=config, service=service)
    traditional = await estimate_traditional_co2_emissions(metadata, config=config, service=service)

    ai_impact = build_path_impact(co2.generation_co2, co2.transmission_co2_per_view, view_count)
    # Both pathways deliver the same file, so transmission is shared
    traditional_impact = build_path_impact(traditional.design_co2, co2.transmission_co2_per_view, view_count)

    logger.info(
        f"Analyzed {metadata.file_name!r} ({metadata.resolution}) at {view_count} views: "
        f"AI {ai_impact.total_co2_formatted} vs traditional {traditional_impact.total_co2_formatted}"
    )

    return AnalysisResult(
        metadata=metadata,
        view_count=view_count,
        view_count_label=format_view_count(view_count),
        co2=co2,
        traditional=traditional,
        comparison=generate_comparison(metadata, co2.generation_co2),
        ai_impact=ai_impact,
        traditional_impact=traditional_impact,
        offsets=calculate_recovery_metrics_v2(ai_impact.total_co2 / 1000),
        comparisons=select_comparisons(rng),
    )


async def build_batch_report(
    uploads: Sequence[ImageUpload],
    view_count: int,
    *,
    config: EstimatorConfig,
    service: Optional[EstimationService] = None,
    max_size_mb: float = DEFAULT_MAX_SIZE_MB,
) -> BatchReport:
    """Analyze several banners one after another. Bad files become error rows."""
    if view_count < 0:
        raise InvalidArgumentError("View count must be non-negative")

    rows: List[ReportRow] = []
    ai_total = 0.0
    traditional_total = 0.0
    errors = 0

    for idx, upload in enumerate(uploads):
        file_name = upload.filename or f"image_{idx}"
        try:
            result = await analyze_upload(
                upload, view_count, config=config, service=service, max_size_mb=max_size_mb
            )
        except AdCarbonError as e:
            logger.warning(f"Report item {idx} ({file_name}) skipped: {e}")
            errors += 1
            rows.append(ReportRow(file_name=file_name, error=str(e)))
            continue

        ai_total += result.ai_impact.total_co2
        traditional_total += result.traditional_impact.total_co2
        rows.append(ReportRow(
            file_name=file_name,
            resolution=result.metadata.resolution,
            file_size=format_byte_size_four_ladder(result.metadata.file_size),
            format=result.metadata.format,
            tier=result.comparison.tier.name,
            ai_total_co2=result.ai_impact.total_co2,
            traditional_total_co2=result.traditional_impact.total_co2,
            savings_co2=result.traditional_impact.total_co2 - result.ai_impact.total_co2,
            confidence=result.co2.confidence,
        ))

    savings = traditional_total - ai_total
    return BatchReport(
        view_count=view_count,
        total_images=len(uploads),
        analyzed=len(uploads) - errors,
        errors=errors,
        ai_total_co2=ai_total,
        traditional_total_co2=traditional_total,
        total_savings_co2=savings,
        total_savings_formatted=format_co2_value(savings),
        rows=rows,
    )
