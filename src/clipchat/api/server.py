"""FastAPI HTTP server exposing the chat relay."""

from __future__ import annotations

import ipaddress
import logging

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from clipchat import __version__
from clipchat.core.models import ErrorKind
from clipchat.relay import Relay, RelayResult

log = logging.getLogger(__name__)

# The relay has lived at all three paths.
RELAY_PATHS = ("/relay", "/api/ask", "/api/chat")

# Every method is routed so non-POST calls get the structured 405 body.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _is_localhost(client_host: str) -> bool:
    """Check if the request comes from localhost."""
    try:
        addr = ipaddress.ip_address(client_host)
        return addr.is_loopback
    except ValueError:
        return client_host in ("localhost", "127.0.0.1", "::1")


def _json(result: RelayResult) -> JSONResponse:
    return JSONResponse(status_code=result.status, content=result.response.to_dict())


def create_app(
    relay: Relay,
    api_key: str | None = None,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        relay: Relay bound to the active upstream provider.
        api_key: Optional API key for remote access. None = no auth needed.
        cors_origins: List of allowed CORS origins.
    """
    app = FastAPI(
        title="ClipChat Relay",
        description="Chat relay to an upstream model provider",
        version=__version__,
    )
    app.state.relay = relay

    if not relay.has_credentials:
        log.error(
            "Provider %s has no API key; relay calls will fail with missing_credentials",
            relay.provider,
        )

    # CORS
    if cors_origins:
        from fastapi.middleware.cors import CORSMiddleware

        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _authorized(request: Request) -> bool:
        """Check API key for non-localhost requests."""
        if not api_key:
            return True
        client = request.client.host if request.client else "127.0.0.1"
        if _is_localhost(client):
            return True
        return request.headers.get("authorization", "") == f"Bearer {api_key}"

    @app.get("/api/health")
    def health(request: Request):
        if not _authorized(request):
            return _json(RelayResult.error(ErrorKind.UNAUTHORIZED))
        return {
            "status": "ok",
            "version": __version__,
            "provider": relay.provider,
            "credentials": relay.has_credentials,
        }

    async def relay_endpoint(request: Request):
        if not _authorized(request):
            return _json(RelayResult.error(ErrorKind.UNAUTHORIZED, detail="Invalid or missing API key"))

        body = None
        if request.method.upper() == "POST":
            try:
                body = await request.json()
            except ValueError:
                body = None

        result = await run_in_threadpool(relay.handle, request.method, body)
        return _json(result)

    for path in RELAY_PATHS:
        app.add_api_route(path, relay_endpoint, methods=_ALL_METHODS, include_in_schema=path == "/relay")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        log.error("Unhandled error: %s", exc, exc_info=True)
        return _json(RelayResult.error(ErrorKind.INTERNAL_ERROR, detail="Internal server error"))

    return app
