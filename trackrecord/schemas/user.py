"""User registration and login schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = ""
    email: str = ""
    password: str = ""


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    activated: bool
    created_at: datetime


class UserEnvelope(BaseModel):
    user: UserRead


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = ""
    password: str = ""


class AuthenticationToken(BaseModel):
    token: str
    expiry: datetime


class AuthenticationTokenEnvelope(BaseModel):
    authentication_token: AuthenticationToken
