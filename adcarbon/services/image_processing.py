"""
AdCarbon — Image Processing Service
Upload validation and container-level metadata extraction.
Pixel content is never inspected, only dimensions, byte size and format.
"""
import asyncio
import io
import logging
from typing import Tuple

from PIL import Image as PILImage

from adcarbon.core.errors import FileValidationError, ImageDecodeError
from adcarbon.schemas.schemas import ImageMetadata, ImageUpload, ValidationResult

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ("image/png", "image/jpg", "image/jpeg", "image/webp", "image/gif")
ALLOWED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".gif")
DEFAULT_MAX_SIZE_MB = 10

_FOUR_LADDER_UNITS = ("Bytes", "KB", "MB", "GB")


# ── Validation ───────────────────────────────────────────────────────────────
def validate_image_file(upload: ImageUpload, max_size_mb: float = DEFAULT_MAX_SIZE_MB) -> ValidationResult:
    """
    Check an upload for type and size constraints.

    Either the MIME type or the file extension is enough to accept the type,
    so uploads with an empty MIME type still pass on their extension.
    """
    content_type = (upload.content_type or "").lower()
    file_name = (upload.filename or "").lower()
    has_valid_type = content_type in ALLOWED_CONTENT_TYPES
    has_valid_extension = file_name.endswith(ALLOWED_EXTENSIONS)

    if not has_valid_type and not has_valid_extension:
        return ValidationResult(
            is_valid=False,
            error="Invalid file type. Please upload a PNG, JPG, JPEG, WebP, or GIF image.",
        )

    max_size_bytes = max_size_mb * 1024 * 1024
    if upload.size > max_size_bytes:
        return ValidationResult(
            is_valid=False,
            error=f"File size exceeds {max_size_mb:g}MB limit. Please upload a smaller image.",
        )

    if upload.size == 0:
        return ValidationResult(
            is_valid=False,
            error="File is empty. Please upload a valid image.",
        )

    return ValidationResult(is_valid=True)


def ensure_valid_image_file(upload: ImageUpload, max_size_mb: float = DEFAULT_MAX_SIZE_MB) -> None:
    """Raise FileValidationError instead of returning a result."""
    result = validate_image_file(upload, max_size_mb)
    if not result.is_valid:
        raise FileValidationError(result.error)


# ── Size Formatting ──────────────────────────────────────────────────────────
def format_byte_size_two_ladder(num_bytes: int) -> str:
    """Bytes / KB / MB with one decimal. Used for ImageMetadata and prompts."""
    if num_bytes == 0:
        return "0 Bytes"

    k = 1024
    mb = k * k
    if num_bytes >= mb:
        return f"{num_bytes / mb:.1f} MB"
    if num_bytes >= k:
        return f"{num_bytes / k:.1f} KB"
    return f"{num_bytes} Bytes"


def format_byte_size_four_ladder(num_bytes: int) -> str:
    """Bytes / KB / MB / GB with up to two decimals. Used by report exports."""
    if num_bytes <= 0:
        return "0 Bytes"

    k = 1024
    i = 0
    # integer steps so exact powers of 1024 land on the larger unit
    while i < len(_FOUR_LADDER_UNITS) - 1 and num_bytes >= k ** (i + 1):
        i += 1
    value = f"{num_bytes / k ** i:.2f}".rstrip("0").rstrip(".")
    return f"{value} {_FOUR_LADDER_UNITS[i]}"


# ── Metadata Extraction ──────────────────────────────────────────────────────
def normalize_format(content_type: str, file_name: str) -> str:
    """MIME subtype, else file extension, else UNKNOWN. JPEG is reported as JPG."""
    fmt = ""
    if content_type and "/" in content_type:
        fmt = content_type.split("/", 1)[1]
    if not fmt and file_name and "." in file_name:
        fmt = file_name.rsplit(".", 1)[1]
    fmt = fmt.strip().upper() or "UNKNOWN"
    return "JPG" if fmt == "JPEG" else fmt


def _read_dimensions(data: bytes) -> Tuple[int, int]:
    try:
        with PILImage.open(io.BytesIO(data)) as img:
            width, height = img.size
            img.verify()
    except Exception as e:
        raise ImageDecodeError("Failed to load image") from e

    if width <= 0 or height <= 0:
        raise ImageDecodeError("Failed to load image")
    return width, height


async def extract_image_metadata(upload: ImageUpload) -> ImageMetadata:
    """Decode enough of the upload to learn its dimensions and build metadata."""
    width, height = await asyncio.to_thread(_read_dimensions, upload.data)

    metadata = ImageMetadata(
        width=width,
        height=height,
        resolution=f"{width}x{height}",
        file_size=upload.size,
        file_size_formatted=format_byte_size_two_ladder(upload.size),
        format=normalize_format(upload.content_type, upload.filename),
        file_name=upload.filename,
    )
    logger.debug(f"Extracted metadata for {upload.filename!r}: {metadata.resolution}, {metadata.format}")
    return metadata
