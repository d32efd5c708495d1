"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from cityhunt.auth.schemas import ChangePasswordRequest, LoginRequest, RegisterRequest, ResetPasswordRequest
from cityhunt.auth.service import AuthService
from cityhunt.dependencies import get_auth_service
from cityhunt.schemas import ok

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> dict[str, Any]:
    """Create an account from a username and password digest."""
    return ok(await auth.register(body.payload()))


@router.post("/login")
async def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> dict[str, Any]:
    """Check credentials; no token is issued."""
    return ok(await auth.authenticate(body.username, body.password))


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> dict[str, Any]:
    await auth.change_password(body.user_id, body.current_password, body.new_password)
    return {"success": True, "message": "Password updated successfully"}


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> dict[str, Any]:
    """Administrative password reset."""
    await auth.reset_password(body.user_id, body.new_password)
    return {"success": True, "message": "Password reset successfully"}


@router.get("/stats")
async def login_stats(auth: AuthService = Depends(get_auth_service)) -> dict[str, Any]:  # noqa: B008
    return ok(await auth.get_login_stats())
