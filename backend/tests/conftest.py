from __future__ import annotations

import json
from typing import Callable, Dict, List

import httpx
import pytest

from nova_search.config import Settings
from nova_search.orchestrator.catalog import ModelCatalog

GATEWAY_URL = "https://gateway.test/v1/chat/completions"
DIRECT_URL = "https://direct.test/api/v1/chat/completions"
SEARCH_URL = "https://search.test/search"


def completion(content, **message_extra) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content, **message_extra}}]}


class FakeUpstream:
    """Routes outbound calls by host and records every request body."""

    def __init__(self) -> None:
        self.handlers: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def on(self, host: str, handler: Callable[[httpx.Request], httpx.Response]) -> "FakeUpstream":
        self.handlers[host] = handler
        return self

    def calls_to(self, host: str) -> List[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.host == host]

    def headers_for(self, host: str) -> List[httpx.Headers]:
        return [r.headers for r in self.requests if r.url.host == host]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.handlers.get(request.url.host)
        if handler is None:
            return httpx.Response(599, text=f"unexpected call to {request.url}")
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        gateway_api_key="gw-key",
        direct_provider_api_key=None,
        search_api_key=None,
        gateway_url=GATEWAY_URL,
        direct_provider_url=DIRECT_URL,
        search_url=SEARCH_URL,
        extra_gateway_models=[],
        extra_direct_models=[],
    )


@pytest.fixture
def catalog(settings) -> ModelCatalog:
    return ModelCatalog.from_settings(settings)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
