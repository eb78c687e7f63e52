"""
Showcase Backend — Auth Route Handlers
========================================

What:  POST /login (issue a bearer token) and POST /logout (revoke it).
How:   Thin handlers; AuthService does the work and raises the errors that
       the global handlers turn into 422 / 401 responses.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.database import get_db_session
from showcase.middleware.role_gate import AuthContext, get_auth_context
from showcase.schemas.common import ErrorResponse
from showcase.schemas.user import LoginRequest, LoginResponse, MessageResponse
from showcase.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        200: {"description": "Logged in", "model": LoginResponse},
        422: {"description": "Invalid credentials or malformed body", "model": ErrorResponse},
    },
    summary="Login by email and password",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """
    Exchange credentials for a bearer token.

    Unknown email and wrong password produce the same 422 response.
    """
    return await auth_service.login(
        db=db,
        email=body.email,
        password=body.password,
        remember=bool(body.remember),
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={
        200: {"description": "Token revoked", "model": MessageResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Logout the authorized user",
)
async def logout(
    context: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """Revoke the token used for this request; other sessions stay signed in."""
    await auth_service.logout(db, context.token)
    return MessageResponse(message="Logged out.")
