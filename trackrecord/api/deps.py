"""FastAPI dependencies: settings, repositories and the authentication guard."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt
from fastapi import Header, HTTPException, Request

from trackrecord.core.config import Settings
from trackrecord.core.constants import MAX_DB_INT
from trackrecord.core.security import decode_access_token
from trackrecord.repositories import Models

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "invalid or missing authentication token"


@dataclass(frozen=True)
class RequestContext:
    """Per-request identity established by the authentication guard. Read-only downstream."""

    user_id: int


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_models(request: Request) -> Models:
    return request.app.state.models


def invalid_authentication_token() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=INVALID_TOKEN_MESSAGE,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_authenticated_user(
    request: Request,
    authorization: str | None = Header(None),
) -> RequestContext:
    """
    Accept only ``Authorization: Bearer <token>`` with a valid, unexpired
    HS256 token whose ``sub`` is a user id.

    Every token problem gets the same 401 so callers cannot tell which
    check failed. A jwt error that is not about the token itself
    (e.g. an unusable key) is left to propagate as a server error.
    """
    if not authorization:
        raise invalid_authentication_token()

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise invalid_authentication_token()

    settings: Settings = request.app.state.settings
    try:
        claims = decode_access_token(parts[1], settings.jwt_secret)
    except jwt.InvalidTokenError as e:
        logger.debug("rejected bearer token: %s", e)
        raise invalid_authentication_token()

    subject = claims.get("sub")
    if not (isinstance(subject, str) and subject.isascii() and subject.isdigit()):
        raise invalid_authentication_token()
    if not 1 <= int(subject) <= MAX_DB_INT:
        raise invalid_authentication_token()

    context = RequestContext(user_id=int(subject))
    request.state.context = context
    return context
