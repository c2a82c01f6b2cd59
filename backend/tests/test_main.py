from __future__ import annotations

import importlib

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import completion
from nova_search.orchestrator.orchestrator import Orchestrator

main = importlib.import_module("nova_search.main")
app = main.app


@pytest.fixture
def client_for(settings, upstream):
    def _make(**client_kwargs) -> TestClient:
        orch = Orchestrator(settings, transport=upstream.transport)
        app.dependency_overrides[main.get_orchestrator] = lambda: orch
        return TestClient(app, **client_kwargs)

    yield _make
    app.dependency_overrides.clear()


def test_health_and_root():
    client = TestClient(app)
    assert client.get("/health").json() == {"ok": True}
    assert "/search" in client.get("/").json()["try"]
    paths = {r["path"] for r in client.get("/routes").json()}
    assert {"/search", "/extract", "/models"} <= paths


def test_plain_query_scenario(client_for, upstream):
    upstream.on("gateway.test", lambda r: httpx.Response(200, json=completion("Quantum computing uses qubits.")))
    upstream.on(
        "search.test",
        lambda r: httpx.Response(
            200,
            json={
                "results": [
                    {"title": f"r{i}", "url": f"https://site{i}.test/", "content": "c"} for i in range(5)
                ],
                "images": [],
            },
        ),
    )
    client = client_for()

    response = client.post(
        "/search", json={"query": "What is quantum computing?", "apiKeys": {"secondary": "tv-key"}}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["summary"] == "Quantum computing uses qubits."
    assert payload["query"] == "What is quantum computing?"
    assert payload["meta"] == {"model": "google/gemini-2.5-flash", "fallbackUsed": False, "isAutoMode": False}
    assert len(payload["sources"]) <= 3
    assert payload["sources"][0] == {"title": "r0", "url": "https://site0.test/", "snippet": "c", "domain": "site0.test"}


def test_image_generation_scenario(client_for, upstream):
    upstream.on("gateway.test", lambda r: httpx.Response(200, json=completion(None)))
    client = client_for()

    response = client.post("/search", json={"query": "generate image of a futuristic city"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["images"] == []
    assert payload["meta"]["generatedImages"] is True
    assert "sources" not in payload


def test_auto_mode_meta(client_for, upstream):
    upstream.on("gateway.test", lambda r: httpx.Response(200, json=completion("ok")))
    client = client_for()

    payload = client.post("/search", json={"query": "compare tea and coffee", "model": "auto-lovable"}).json()

    assert payload["meta"]["isAutoMode"] is True
    assert payload["meta"]["model"] == "openai/gpt-5"


@pytest.mark.parametrize(
    "body",
    [
        {"query": "x" * 6000},
        {"query": ""},
        {},
        {"query": "ok", "maxTokens": 50},
        {"query": "ok", "temperature": 3},
        {"query": "ok", "attachments": [{"name": "a", "type": "text/plain"}] * 11},
        {"query": "ok", "attachments": [{"name": "a" * 300, "type": "text/plain"}]},
    ],
)
def test_invalid_requests_are_rejected(client_for, upstream, body):
    client = client_for()

    response = client.post("/search", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request parameters"}
    assert upstream.requests == []


def test_malformed_json_is_rejected(client_for):
    client = client_for()
    response = client.post("/search", content=b"{not json", headers={"content-type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request parameters"}


def test_upstream_401_is_propagated(client_for, upstream):
    upstream.on("gateway.test", lambda r: httpx.Response(401, text="invalid token"))
    client = client_for()

    response = client.post("/search", json={"query": "hello"})

    assert response.status_code == 401
    assert "Invalid API key" in response.json()["error"]


def test_search_failure_still_returns_summary(client_for, upstream):
    upstream.on("gateway.test", lambda r: httpx.Response(200, json=completion("answer")))
    upstream.on("search.test", lambda r: httpx.Response(500, text="search exploded"))
    client = client_for()

    response = client.post("/search", json={"query": "hello", "apiKeys": {"tavily": "tv-key"}})

    assert response.status_code == 200
    payload = response.json()
    assert payload["summary"] == "answer"
    assert not payload.get("sources")


def test_missing_gateway_key_returns_500(client_for, settings):
    settings.gateway_api_key = None
    client = client_for()

    response = client.post("/search", json={"query": "hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "GATEWAY_API_KEY is not configured"}


def test_unexpected_error_returns_500(client_for, upstream):
    upstream.on("gateway.test", lambda r: httpx.Response(200, text="<html>not json</html>"))
    client = client_for(raise_server_exceptions=False)

    response = client.post("/search", json={"query": "hello"})

    assert response.status_code == 500
    assert "error" in response.json()


@pytest.mark.parametrize(
    "upstream_response, status",
    [
        (lambda r: httpx.Response(200, text="<html>not json</html>"), 500),
        (lambda r: httpx.Response(401, text="invalid token"), 401),
    ],
)
def test_error_responses_carry_cors_headers(client_for, upstream, upstream_response, status):
    upstream.on("gateway.test", upstream_response)
    client = client_for(raise_server_exceptions=False)

    response = client.post("/search", json={"query": "hello"}, headers={"Origin": "https://app.example"})

    assert response.status_code == status
    assert response.headers["access-control-allow-origin"] == "*"
    assert "error" in response.json()


def test_cors_preflight_allows_any_origin():
    client = TestClient(app)
    response = client.options(
        "/search",
        headers={
            "Origin": "https://somewhere.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, apikey",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_models_catalog(client_for):
    client = client_for()

    payload = client.get("/models").json()

    assert "auto-gateway" in payload["autoModes"]
    assert payload["defaults"]["vision"] == "google/gemini-2.5-pro"
    gateway = {m["id"]: m for m in payload["gateway"]}
    assert gateway["google/gemini-2.5-flash-image-preview"]["imageGeneration"] is True
    assert gateway["google/gemini-2.5-pro"]["multimodal"] is True
    direct = {m["id"]: m for m in payload["direct"]}
    assert direct["deepseek/deepseek-chat-v3.1:free"]["isFree"] is True


def test_extract_text_upload(client_for):
    client = client_for()

    response = client.post("/extract", files={"file": ("notes.md", b"# Title\nbody", "text/markdown")})

    assert response.status_code == 200
    assert response.json() == {"name": "notes.md", "type": "text/markdown", "contentText": "# Title\nbody"}
