"""Pydantic schemas for users and authentication.

Learn: Pydantic v2 models validate request/response data. Separate
input schemas from "Read" schemas (output) — UserRead never carries the
password hash.
"""

from pydantic import BaseModel, Field


# ─── Authentication ─────────────────────────────────────

class Credentials(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


# ─── Users ──────────────────────────────────────────────

class UserCreate(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Full replacement — email, name and password are all required."""
    email: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    is_admin: bool

    model_config = {"from_attributes": True}
