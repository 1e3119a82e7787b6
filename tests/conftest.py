import asyncio
import io
import json
from typing import Any, Dict, List, Optional, Union

import pytest
from PIL import Image as PILImage

from adcarbon.core.config import EstimatorConfig
from adcarbon.core.errors import EstimationServiceError
from adcarbon.schemas.schemas import ImageMetadata, ImageUpload
from adcarbon.services.openai_client import EstimationService


def make_image_bytes(width: int = 64, height: int = 32, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    PILImage.new("RGB", (width, height), color=(30, 120, 200)).save(buffer, format=fmt)
    return buffer.getvalue()


def make_metadata(width: int = 1920, height: int = 1080, file_size: int = 2_500_000, fmt: str = "PNG") -> ImageMetadata:
    return ImageMetadata(
        width=width,
        height=height,
        resolution=f"{width}x{height}",
        file_size=file_size,
        file_size_formatted="2.4 MB",
        format=fmt,
        file_name=f"banner.{fmt.lower()}",
    )


class FakeEstimationService(EstimationService):
    """Answers by request model; a value that is an exception gets raised."""

    name = "fake"

    def __init__(self, replies: Dict[str, Union[str, Exception]], delay: float = 0.0):
        self.replies = replies
        self.delay = delay
        self.requests: List[Dict[str, Any]] = []

    async def complete(self, request: Dict[str, Any]) -> str:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies.get(request["model"], EstimationServiceError("no reply configured"))
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def config() -> EstimatorConfig:
    return EstimatorConfig(api_key="sk-test", model="gpt-test", traditional_model="gpt-test-mini", timeout_seconds=2.0)


@pytest.fixture
def offline_config() -> EstimatorConfig:
    return EstimatorConfig(api_key="")


@pytest.fixture
def metadata() -> ImageMetadata:
    return make_metadata()


@pytest.fixture
def png_upload() -> ImageUpload:
    return ImageUpload(filename="banner.png", content_type="image/png", data=make_image_bytes(1920, 1080))


@pytest.fixture
def ai_reply() -> str:
    return json.dumps({
        "generationCO2": 500,
        "transmissionCO2PerView": 0.15,
        "confidence": "high",
        "modelInfo": {"imageGen": "GPT-o3", "location": "Tokyo"},
    })


@pytest.fixture
def traditional_reply() -> str:
    return json.dumps({
        "designCO2": 4800,
        "designTime": 6,
        "revisions": 3,
        "stockPhotos": 2,
        "photoshoot": True,
        "complexity": "Premium",
        "confidence": "high",
    })


@pytest.fixture
def fake_service(ai_reply: str, traditional_reply: str) -> FakeEstimationService:
    return FakeEstimationService({"gpt-test": ai_reply, "gpt-test-mini": traditional_reply})
