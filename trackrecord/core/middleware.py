"""Admission pipeline middleware: recover -> CORS -> rate limit -> router."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from trackrecord.core.ratelimit import ClientRateTracker

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "the server encountered a problem and could not process your request"
RATE_LIMIT_MESSAGE = "rate limit exceeded"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def log_error(request: Request, exc: BaseException) -> None:
    logger.error("%s %s: %s", request.method, request.url.path, exc, exc_info=exc)


def server_error_response(request: Request, exc: BaseException) -> JSONResponse:
    log_error(request, exc)
    return JSONResponse(status_code=500, content={"error": SERVER_ERROR_MESSAGE})


class RecoverMiddleware(BaseHTTPMiddleware):
    """Last line of defence: any unhandled exception becomes a 500 and the connection is closed."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            response = server_error_response(request, exc)
            response.headers["Connection"] = "close"
            return response


class CORSMiddleware(BaseHTTPMiddleware):
    """Wildcard CORS. OPTIONS requests are answered here and never reach the router."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, tracker: ClientRateTracker, enabled: bool = True) -> None:
        super().__init__(app)
        self.tracker = tracker
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.enabled:
            return await call_next(request)
        if request.client is None or not request.client.host:
            return server_error_response(request, RuntimeError("unable to determine client address"))
        if not self.tracker.allow(request.client.host):
            return JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE})
        return await call_next(request)
