"""Exception handlers that render every failure as an ``{"error": ...}`` envelope."""

from __future__ import annotations

import jwt
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from trackrecord.api.helpers import NOT_FOUND_MESSAGE
from trackrecord.core.middleware import server_error_response


def error_response(status_code: int, message, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _bad_request_message(exc: RequestValidationError) -> str:
    """Mirror the wording of a hand-written JSON decoder rather than pydantic's error list."""
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ())]
    field = ".".join(loc[1:])
    kind = first.get("type", "")
    if kind == "json_invalid":
        return "body contains badly-formed JSON"
    if kind == "missing" and loc == ["body"]:
        return "body must not be empty"
    if kind == "extra_forbidden":
        return f'body contains unknown key "{field}"'
    if loc and loc[0] == "body":
        if not field:
            return "body must contain a single JSON object"
        return f'body contains incorrect JSON type for field "{field}"'
    return f'invalid value for "{loc[-1] if loc else "request"}"'


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = NOT_FOUND_MESSAGE
    elif exc.status_code == 405:
        message = f"the {request.method} method is not supported for this resource"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, _bad_request_message(exc))


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return server_error_response(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    # Data-layer failures (including deadline expiry) and token-verification
    # infrastructure errors: generic 500, details only in the log
    app.add_exception_handler(SQLAlchemyError, server_error_handler)
    app.add_exception_handler(TimeoutError, server_error_handler)
    app.add_exception_handler(jwt.PyJWTError, server_error_handler)
