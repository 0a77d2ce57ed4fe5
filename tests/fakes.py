"""Fake HTTP layer: an httpx.AsyncClient backed by httpx.MockTransport."""

from __future__ import annotations

import inspect
import json
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ROBOFLOW_BASE = "https://detect.roboflow.com"


def http_response(status_code: int = 200, body: Any = None, text: Optional[str] = None) -> httpx.Response:
    if text is not None:
        return httpx.Response(status_code, text=text)
    if body is not None:
        return httpx.Response(status_code, json=body)
    return httpx.Response(status_code)


Reply = Union[httpx.Response, Exception]
Handler = Callable[[str, httpx.Request], Union[Reply, Awaitable[Reply]]]


class FakeHttp:
    """Records every request and answers from a handler.

    The handler gets (url without query string, request) and returns an
    httpx.Response, or an exception instance to raise. It may be async.
    """

    def __init__(self, handler: Handler):
        self._handler = handler
        self.calls: list[tuple[str, httpx.Request]] = []
        self.client = httpx.AsyncClient(transport=httpx.MockTransport(self._dispatch))

    async def _dispatch(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url).split("?", 1)[0]
        self.calls.append((url, request))
        reply = self._handler(url, request)
        if inspect.isawaitable(reply):
            reply = await reply
        if isinstance(reply, Exception):
            raise reply
        return reply

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]

    def calls_to(self, prefix: str) -> int:
        return sum(1 for url in self.urls() if url.startswith(prefix))


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


def openai_reply(content: str) -> httpx.Response:
    return http_response(200, {"choices": [{"message": {"role": "assistant", "content": content}}]})


def roboflow_reply(*labels: str, field: str = "class") -> httpx.Response:
    return http_response(200, {"predictions": [{field: label, "confidence": 0.9} for label in labels]})


def routed(
    openai: Optional[Callable[[], Reply]] = None,
    roboflow: Optional[dict[str, Callable[[], Reply]]] = None,
    roboflow_default: Optional[Callable[[], Reply]] = None,
) -> Handler:
    """Build a handler that dispatches by URL to per-provider reply factories."""
    roboflow = roboflow or {}

    def handler(url: str, request: httpx.Request) -> Reply:
        if url.startswith(OPENAI_URL):
            if openai is None:
                raise AssertionError("unexpected OpenAI call")
            return openai()
        if url.startswith(ROBOFLOW_BASE):
            endpoint = url[len(ROBOFLOW_BASE) + 1:]
            if endpoint in roboflow:
                return roboflow[endpoint]()
            if roboflow_default is not None:
                return roboflow_default()
            return http_response(404, text="model not found")
        raise AssertionError(f"unexpected URL {url}")

    return handler
