"""Authentication API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_auth_service, get_bearer_token
from src.models.auth import (
    AuthResponse,
    CheckSessionResponse,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    RegisterRequest,
    SessionListResponse,
)
from src.services.auth_service import AuthService

router = APIRouter(tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Create an account and start a session.

    Raises:
        ValidationError 400: Missing fields or short password
        ConflictError 400: Email already registered
    """
    return await auth_service.register(
        name=request.name,
        email=request.email,
        password=request.password,
    )


@router.post("/login")
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login with email and password.

    Raises:
        ValidationError 400: Missing email or password
        AuthenticationError 401: Unknown email or wrong password
    """
    return await auth_service.login(email=request.email, password=request.password)


@router.post("/logout")
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """End the caller's session. Safe to call more than once."""
    return await auth_service.logout(token)


@router.get("/profile")
async def profile(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    """Get the current user's record and session metadata."""
    return await auth_service.get_profile(token)


@router.get("/check-session", response_model_exclude_none=True)
async def check_session(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> CheckSessionResponse:
    """Report whether the caller's token maps to a live session.

    Always 200; the frontend polls this on load and branches on ``valid``.
    """
    return await auth_service.check_session(token)


@router.get("/sessions")
async def list_sessions(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionListResponse:
    """List all active sessions. Requires a live session."""
    return await auth_service.list_sessions(token)
