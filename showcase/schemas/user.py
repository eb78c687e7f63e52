"""
Showcase Backend — Auth Request/Response Schemas
==================================================

What:  Pydantic models for the login/logout API contract.
Why:   The public user view is a separate model so the password hash can
       never be serialized by accident.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from showcase.config import MIN_PASSWORD_LENGTH


class UserPublic(BaseModel):
    """What a client may see about a user: id, email and role. Never the hash."""
    id: int = Field(description="User identifier")
    email: str = Field(description="Login email")
    role: str = Field(description="Role name, e.g. 'admin'")

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    """
    Body of POST /login.

    `remember` is accepted for client compatibility; token lifetime is
    governed by settings.token_ttl_minutes alone.
    """
    email: str = Field(min_length=1, description="Account email")
    password: str = Field(
        min_length=MIN_PASSWORD_LENGTH,
        description=f"Account password (at least {MIN_PASSWORD_LENGTH} characters)",
    )
    remember: Optional[bool] = Field(default=False, description="Keep me signed in")

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("The email field is required.")
        return stripped


class LoginResponse(BaseModel):
    """Returned by POST /login: the public user and the plain-text bearer token."""
    user: UserPublic
    token: str = Field(description="Bearer token; send as 'Authorization: Bearer <token>'")


class MessageResponse(BaseModel):
    message: str
