"""Tests for the chat-completions adapter and timeout race (no network)."""
import asyncio
import json

import httpx
import pytest

from adcarbon.core.errors import EstimationServiceError
from adcarbon.services.openai_client import (
    OpenAIChatService,
    extract_message_content,
    parse_json_content,
    race_with_timeout,
    strip_code_fences,
)


def _service(config, handler):
    return OpenAIChatService(config, transport=httpx.MockTransport(handler))


def _completion(content):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


@pytest.mark.asyncio
async def test_successful_completion(config):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion('{"generationCO2": 1}'))

    content = await _service(config, handler).complete({"model": "gpt-test", "messages": []})

    assert content == '{"generationCO2": 1}'
    assert seen["url"] == "https://api.openai.com/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-test"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code, message", [
    (429, "rate limit"),
    (401, "Invalid API key"),
    (500, "status 500"),
])
async def test_error_status(config, status_code, message):
    service = _service(config, lambda request: httpx.Response(status_code, text="nope"))
    with pytest.raises(EstimationServiceError, match=message):
        await service.complete({"model": "gpt-test"})


@pytest.mark.asyncio
async def test_malformed_body(config):
    service = _service(config, lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(EstimationServiceError, match="Malformed"):
        await service.complete({"model": "gpt-test"})


@pytest.mark.asyncio
async def test_network_error(config):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EstimationServiceError, match="Network error"):
        await _service(config, handler).complete({"model": "gpt-test"})


@pytest.mark.parametrize("body", [
    {},
    {"choices": []},
    {"choices": [{"message": {}}]},
    {"choices": ["text"]},
    [],
])
def test_extract_message_content_rejects_bad_shapes(body):
    with pytest.raises(EstimationServiceError):
        extract_message_content(body)


@pytest.mark.parametrize("raw, expected", [
    ('{"a": 1}', '{"a": 1}'),
    ('  {"a": 1}\n', '{"a": 1}'),
    ('```json\n{"a": 1}\n```', '{"a": 1}'),
    ('```JSON {"a": 1} ```', '{"a": 1}'),
    ('```\n{"a": 1}\n```', '{"a": 1}'),
])
def test_strip_code_fences(raw, expected):
    assert strip_code_fences(raw) == expected


def test_parse_json_content():
    assert parse_json_content('```json\n{"a": 1}\n```') == {"a": 1}
    with pytest.raises(EstimationServiceError):
        parse_json_content("not json")
    with pytest.raises(EstimationServiceError):
        parse_json_content('"just a string"')


@pytest.mark.asyncio
async def test_race_returns_fast_result():
    async def quick():
        return 42

    assert await race_with_timeout(quick(), timeout=1) == 42


@pytest.mark.asyncio
async def test_race_abandons_slow_call_without_cancelling():
    finished = asyncio.Event()

    async def slow():
        await asyncio.sleep(0.1)
        finished.set()
        raise RuntimeError("late failure is ignored")

    with pytest.raises(EstimationServiceError, match="timeout"):
        await race_with_timeout(slow(), timeout=0.01)

    await asyncio.wait_for(finished.wait(), timeout=1)
    await asyncio.sleep(0)
