"""User registration and login (token issuance)."""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from trackrecord.api.deps import get_models, get_settings
from trackrecord.api.helpers import failed_validation
from trackrecord.core.config import Settings
from trackrecord.core.security import create_access_token, hash_password, verify_password
from trackrecord.core.validator import EMAIL_RX, Validator, matches
from trackrecord.repositories import DuplicateEmailError, Models, RecordNotFoundError
from trackrecord.schemas.user import (
    AuthenticationTokenEnvelope,
    LoginRequest,
    UserCreate,
    UserEnvelope,
    UserRead,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def validate_email(v: Validator, email: str) -> None:
    v.check(email != "", "email", "must be provided")
    v.check(matches(email, EMAIL_RX), "email", "must be a valid email address")


def validate_password_plaintext(v: Validator, password: str) -> None:
    v.check(password != "", "password", "must be provided")
    v.check(len(password.encode()) >= 8, "password", "must be at least 8 bytes long")
    # bcrypt only looks at the first 72 bytes
    v.check(len(password.encode()) <= 72, "password", "must not be more than 72 bytes long")


@router.post("/users", response_model=UserEnvelope, status_code=201)
async def register_user(
    payload: UserCreate,
    models: Models = Depends(get_models),
):
    v = Validator()
    v.check(payload.name != "", "name", "must be provided")
    v.check(len(payload.name.encode()) <= 500, "name", "must not be more than 500 bytes long")
    validate_email(v, payload.email)
    validate_password_plaintext(v, payload.password)
    if not v.valid:
        raise failed_validation(v.errors)

    # bcrypt is CPU bound; keep it off the event loop
    password_hash = await run_in_threadpool(hash_password, payload.password)
    try:
        user = await models.users.insert(payload.name, payload.email, password_hash)
    except DuplicateEmailError:
        v.add_error("email", "a user with this email address already exists")
        raise failed_validation(v.errors)

    logger.info("registered user %s", user.id)
    return {"user": UserRead.model_validate(user)}


@router.post("/auth/login", response_model=AuthenticationTokenEnvelope, status_code=201)
async def login_user(
    payload: LoginRequest,
    models: Models = Depends(get_models),
    settings: Settings = Depends(get_settings),
):
    """Exchange email + password for a signed bearer token whose subject is the user id."""
    v = Validator()
    validate_email(v, payload.email)
    v.check(payload.password != "", "password", "must be provided")
    if not v.valid:
        raise failed_validation(v.errors)

    try:
        user = await models.users.get_by_email(payload.email)
    except RecordNotFoundError:
        user = None
    if user is None or not user.activated:
        raise HTTPException(status_code=401, detail="invalid authentication credentials")
    if not await run_in_threadpool(verify_password, payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="invalid authentication credentials")

    token, expiry = create_access_token(
        str(user.id), settings.jwt_secret, timedelta(hours=settings.jwt_expiry_hours)
    )
    return {"authentication_token": {"token": token, "expiry": expiry}}
