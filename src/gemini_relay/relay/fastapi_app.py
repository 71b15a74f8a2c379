"""FastAPI relay in front of the Gemini generateContent API.

Endpoints:
- GET /health
- POST /api/gemini  { "prompt": "..." }
"""
from __future__ import annotations
import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gemini_relay import __version__
from gemini_relay.common.errors import NOT_FOUND_BODY, PayloadTooLargeError, RelayError
from gemini_relay.common.schema import ErrorOut, GenerationResponse, HealthOut, utc_timestamp
from gemini_relay.common.settings import Settings
from gemini_relay.relay.cors import OriginGuardMiddleware
from gemini_relay.relay.gemini_client import GeminiClient, TextProvider
from gemini_relay.relay.handler import relay_prompt

LOGGER = logging.getLogger("gemini_relay.relay.app")


def _is_json(content_type: str | None) -> bool:
    """Only JSON bodies are parsed; anything else reads as a body without a prompt."""
    if not content_type:
        return False
    media = content_type.split(";", 1)[0].strip().lower()
    return media == "application/json" or media.endswith("+json")


async def read_limited_body(request: Request, limit: int) -> bytes:
    """
    Read the request body, stopping as soon as it exceeds `limit` bytes.

    Args:
        request: Incoming request.
        limit: Maximum body size in bytes.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(f"Declared body of {declared} bytes over limit")

    chunks: list[bytes] = []
    total = 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > limit:
            raise PayloadTooLargeError(f"Body over {limit} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


def create_app(settings: Settings, provider: TextProvider | None = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Immutable process configuration.
        provider: Text generation backend; defaults to a GeminiClient built
            from settings.
    """
    if provider is None:
        provider = GeminiClient(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            timeout=settings.provider_timeout,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        LOGGER.info("Gemini relay started on port %s", settings.port)
        LOGGER.info("Environment: %s", settings.environment)
        LOGGER.info("Health check available at http://localhost:%s/health", settings.port)
        yield
        LOGGER.info("Shutting down Gemini relay")

    app = FastAPI(title="Gemini Relay", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.provider = provider

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    # Added last so it wraps CORSMiddleware and runs first.
    app.add_middleware(OriginGuardMiddleware, allowed_origins=settings.allowed_origins_list)

    @app.get("/health", response_model=HealthOut)
    async def health() -> HealthOut:
        return HealthOut(
            status="OK",
            timestamp=utc_timestamp(),
            environment=settings.environment,
            version=__version__,
        )

    @app.post(
        "/api/gemini",
        response_model=GenerationResponse,
        responses={code: {"model": ErrorOut} for code in (400, 401, 413, 429, 500)},
    )
    async def gemini(request: Request) -> GenerationResponse:
        payload = None
        if _is_json(request.headers.get("content-type")):
            body = await read_limited_body(request, settings.max_body_bytes)
            try:
                payload = json.loads(body) if body else None
            except ValueError:
                payload = None
        return await relay_prompt(payload, request.app.state.provider)

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown paths and unsupported methods both read as a missing endpoint.
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content=NOT_FOUND_BODY)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Never exposes internal error details to clients."""
        LOGGER.error(
            "Unhandled exception: %s on %s %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc_info=True,
        )
        return JSONResponse(status_code=500, content=RelayError().to_body())

    return app
