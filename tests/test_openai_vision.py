from __future__ import annotations

import asyncio
import time

import httpx
import pytest

from domain.exceptions import InvalidFormatError, ProviderError, ProviderTimeoutError
from domain.models import RetryPolicy
from infrastructure.vision.openai_vision import OpenAIVisionDetector

from .fakes import OPENAI_URL, FakeHttp, http_response, openai_reply, request_json


def make_detector(http, policy, **kwargs) -> OpenAIVisionDetector:
    return OpenAIVisionDetector("sk-test", retry_policy=policy, client=http.client, **kwargs)


def test_request_shape(image, no_wait):
    http = FakeHttp(lambda url, req: openai_reply('["tomatoes"]'))
    detector = make_detector(http, no_wait, model="gpt-4o", max_tokens=500, temperature=0.1)

    assert asyncio.run(detector.detect(image)) == ["tomatoes"]

    [(url, request)] = http.calls
    assert url == OPENAI_URL
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert request.extensions["timeout"]["read"] == 30.0
    payload = request_json(request)
    assert payload["model"] == "gpt-4o"
    assert payload["max_tokens"] == 500
    assert payload["temperature"] == 0.1
    user_parts = payload["messages"][-1]["content"]
    assert user_parts[0]["type"] == "text"
    assert "JSON array" in user_parts[0]["text"]
    assert user_parts[1]["image_url"]["url"] == image.to_data_uri()
    assert user_parts[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")


def test_prose_wrapped_array_is_returned_raw(image, no_wait):
    http = FakeHttp(
        lambda url, req: openai_reply('Here are the items: ["Red Onions", "garlic", "garlic"]')
    )
    result = asyncio.run(make_detector(http, no_wait).detect(image))
    # Normalization is the orchestrator's job.
    assert result == ["Red Onions", "garlic", "garlic"]


def test_transient_errors_are_retried(image, no_wait):
    replies = [
        http_response(503, text="overloaded"),
        httpx.ConnectError("reset"),
        openai_reply('["okra"]'),
    ]
    http = FakeHttp(lambda url, req: replies.pop(0))

    assert asyncio.run(make_detector(http, no_wait).detect(image)) == ["okra"]
    assert len(http.calls) == 3


def test_http_error_after_all_attempts(image, no_wait):
    http = FakeHttp(lambda url, req: http_response(401, text="invalid api key"))

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(make_detector(http, no_wait).detect(image))

    assert excinfo.value.status_code == 401
    assert len(http.calls) == 3


def test_empty_content_is_a_provider_error(image, no_wait):
    http = FakeHttp(lambda url, req: openai_reply("   "))
    with pytest.raises(ProviderError):
        asyncio.run(make_detector(http, no_wait).detect(image))
    assert len(http.calls) == 3


@pytest.mark.parametrize("content", ['{"ingredients": "egg"}', "42", '"just a string"'])
def test_invalid_format_is_not_retried(image, no_wait, content):
    http = FakeHttp(lambda url, req: openai_reply(content))

    with pytest.raises(InvalidFormatError):
        asyncio.run(make_detector(http, no_wait).detect(image))

    assert len(http.calls) == 1


def test_array_nested_in_object_is_taken_as_list(image, no_wait):
    # The bracket match finds the inner array.
    http = FakeHttp(lambda url, req: openai_reply('{"ingredients": ["egg"]}'))
    assert asyncio.run(make_detector(http, no_wait).detect(image)) == ["egg"]


def test_transport_timeout_becomes_provider_timeout(image):
    http = FakeHttp(lambda url, req: httpx.ReadTimeout("read timed out"))
    detector = make_detector(http, RetryPolicy(max_attempts=2, base_delay_ms=0))

    with pytest.raises(ProviderTimeoutError):
        asyncio.run(detector.detect(image))
    assert len(http.calls) == 2


def test_deadline_cancels_in_flight_request(image):
    events: list[str] = []

    async def hang(url, req):
        events.append("started")
        try:
            await asyncio.sleep(2)
        except asyncio.CancelledError:
            events.append("cancelled")
            raise
        events.append("finished")
        return openai_reply('["late"]')

    http = FakeHttp(hang)
    detector = make_detector(http, RetryPolicy(max_attempts=1, base_delay_ms=0), timeout=0.05)

    started = time.monotonic()
    with pytest.raises(ProviderTimeoutError):
        asyncio.run(detector.detect(image))

    assert time.monotonic() - started < 1.0
    assert events == ["started", "cancelled"]
