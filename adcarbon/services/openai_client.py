"""
AdCarbon — Estimation Service Client
Port for the external reasoning service plus the OpenAI-compatible
chat-completions adapter used in production.
"""
import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Dict, Optional, TypeVar

import httpx

from adcarbon.core.config import EstimatorConfig
from adcarbon.core.errors import EstimationServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


class EstimationService(ABC):
    """Anything that can answer a chat-completion request with message text."""

    name: str = "abstract"

    @abstractmethod
    async def complete(self, request: Dict[str, Any]) -> str:
        """
        Send a chat-completion request.

        Returns the assistant message content. Raises EstimationServiceError
        on any transport or protocol failure.
        """


class OpenAIChatService(EstimationService):
    name = "openai"

    def __init__(self, config: EstimatorConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self._config.base_url}/chat/completions"

    async def complete(self, request: Dict[str, Any]) -> str:
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds, transport=self._transport
        ) as client:
            try:
                response = await client.post(self.endpoint, headers=headers, json=request)
            except httpx.HTTPError as e:
                raise EstimationServiceError(f"Network error: {e}") from e

        if response.status_code == 429:
            raise EstimationServiceError("API rate limit exceeded")
        if response.status_code == 401:
            raise EstimationServiceError("Invalid API key")
        if not response.is_success:
            raise EstimationServiceError(
                f"API request failed with status {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise EstimationServiceError("Malformed response body") from e

        return extract_message_content(data)


def extract_message_content(data: Any) -> str:
    """Pull choices[0].message.content out of a chat-completion body."""
    if not isinstance(data, dict):
        raise EstimationServiceError("Invalid API response: body is not an object")
    choices = data.get("choices")
    if not choices or not isinstance(choices, list):
        raise EstimationServiceError("Invalid API response: no choices returned")
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise EstimationServiceError("Invalid API response: message content missing")
    return content


def strip_code_fences(content: str) -> str:
    """Remove a ```json ... ``` or ``` ... ``` wrapper if present."""
    content = content.strip()
    if content.startswith("```"):
        content = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", content))
    return content


def parse_json_content(content: str) -> Dict[str, Any]:
    """Parse the JSON object embedded in a model reply."""
    try:
        parsed = json.loads(strip_code_fences(content))
    except ValueError as e:
        raise EstimationServiceError(f"Response is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise EstimationServiceError("Response JSON is not an object")
    return parsed


def _discard_outcome(task: "asyncio.Task[Any]") -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"Ignoring late failure from abandoned request: {task.exception()}")


async def race_with_timeout(awaitable: Awaitable[T], timeout: float) -> T:
    """
    Race an awaitable against a timer.

    The loser is not cancelled: if the timer wins, the request keeps running
    in the background and whatever it eventually produces is discarded.
    """
    task = asyncio.ensure_future(awaitable)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task not in done:
        task.add_done_callback(_discard_outcome)
        raise EstimationServiceError("Request timeout")
    return task.result()
