from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from gemini_relay.common.errors import AuthError, ProviderError, QuotaError
from gemini_relay.relay.fastapi_app import create_app


@pytest.fixture
def client(settings, provider) -> TestClient:
    return TestClient(create_app(settings, provider=provider))


def _parse(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


def test_health_ok(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "OK"
    assert data["environment"] == "test"
    assert data["version"] == "1.0.0"
    assert _parse(data["timestamp"]).tzinfo is not None


def test_generate_success(client: TestClient, provider) -> None:
    arrival = datetime.now(timezone.utc)
    arrival = arrival.replace(microsecond=arrival.microsecond // 1000 * 1000)
    r = client.post("/api/gemini", json={"prompt": "Hello"})
    assert r.status_code == 200
    data = r.json()
    assert data["text"] == "Hello test"
    assert data["model"] == "gemini-2.0-flash"
    assert _parse(data["timestamp"]) >= arrival
    assert provider.calls == ["Hello"]


def test_missing_prompt(client: TestClient, provider) -> None:
    r = client.post("/api/gemini", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "Falta el prompt", "message": "El campo 'prompt' es requerido"}
    assert provider.calls == []


@pytest.mark.parametrize("body", [{"prompt": ""}, {"prompt": None}, [1, 2]])
def test_empty_or_null_prompt_counts_as_missing(client: TestClient, body) -> None:
    r = client.post("/api/gemini", json=body)
    assert r.status_code == 400
    assert r.json()["error"] == "Falta el prompt"


def test_malformed_json_counts_as_missing(client: TestClient) -> None:
    r = client.post("/api/gemini", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Falta el prompt"


@pytest.mark.parametrize("value", [12345, {"text": "hi"}, ["hi"], True])
def test_non_string_prompt(client: TestClient, provider, value) -> None:
    r = client.post("/api/gemini", json={"prompt": value})
    assert r.status_code == 400
    assert r.json()["error"] == "Prompt inválido"
    assert provider.calls == []


def test_prompt_too_long(client: TestClient, provider) -> None:
    r = client.post("/api/gemini", json={"prompt": "x" * 10_001})
    assert r.status_code == 400
    assert r.json()["error"] == "Prompt demasiado largo"
    assert provider.calls == []


def test_prompt_at_limit_is_accepted(client: TestClient) -> None:
    r = client.post("/api/gemini", json={"prompt": "x" * 10_000})
    assert r.status_code == 200


def test_body_over_limit(settings, provider) -> None:
    small = settings.model_copy(update={"max_body_bytes": 64})
    client = TestClient(create_app(small, provider=provider))
    r = client.post("/api/gemini", json={"prompt": "y" * 200})
    assert r.status_code == 413
    assert r.json()["error"] == "Cuerpo demasiado grande"
    assert provider.calls == []


def test_oversized_stream_is_cut_off_early(settings, provider) -> None:
    small = settings.model_copy(update={"max_body_bytes": 64})
    app = create_app(small, provider=provider)
    reads = {"chunks": 0}
    sent: list[dict[str, Any]] = []

    async def receive() -> dict[str, Any]:
        if reads["chunks"] < 200:
            reads["chunks"] += 1
            return {"type": "http.request", "body": b"x" * 65536, "more_body": True}
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message: dict[str, Any]) -> None:
        sent.append(message)

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/api/gemini",
        "raw_path": b"/api/gemini",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"testserver"), (b"content-type", b"application/json")],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    asyncio.run(app(scope, receive, send))

    start = next(m for m in sent if m["type"] == "http.response.start")
    assert start["status"] == 413
    assert reads["chunks"] == 1
    assert provider.calls == []


def test_non_json_content_type_counts_as_missing(client: TestClient, provider) -> None:
    r = client.post("/api/gemini", content=b'{"prompt": "hi"}', headers={"Content-Type": "text/plain"})
    assert r.status_code == 400
    assert r.json()["error"] == "Falta el prompt"
    assert provider.calls == []


def test_json_media_type_with_charset_is_parsed(client: TestClient) -> None:
    r = client.post(
        "/api/gemini",
        content=b'{"prompt": "hi"}',
        headers={"Content-Type": "application/json; charset=utf-8"},
    )
    assert r.status_code == 200


@pytest.mark.parametrize(
    "exc, status, error",
    [
        (AuthError("API key not valid"), 401, "Error de autenticación"),
        (QuotaError("You exceeded your current quota"), 429, "Cuota excedida"),
        (ProviderError("upstream exploded"), 500, "Error interno del servidor"),
        (RuntimeError("unexpected"), 500, "Error interno del servidor"),
    ],
)
def test_provider_failures_are_mapped(client: TestClient, provider, exc, status, error) -> None:
    provider.exc = exc
    r = client.post("/api/gemini", json={"prompt": "Hello"})
    assert r.status_code == status
    data = r.json()
    assert data["error"] == error
    assert "Hello" not in data["message"]


def test_empty_provider_text_is_internal_error(client: TestClient, provider) -> None:
    provider.text = ""
    r = client.post("/api/gemini", json={"prompt": "Hello"})
    assert r.status_code == 500
    assert r.json() == {"error": "Error interno del servidor", "message": "Ocurrió un error inesperado"}


@pytest.mark.parametrize(
    "method, path",
    [("GET", "/nope"), ("POST", "/api/other"), ("GET", "/api/gemini"), ("DELETE", "/health")],
)
def test_unknown_routes_are_404(client: TestClient, method: str, path: str) -> None:
    r = client.request(method, path)
    assert r.status_code == 404
    assert r.json() == {"error": "Endpoint no encontrado", "message": "La ruta solicitada no existe"}
