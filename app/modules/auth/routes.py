from fastapi import APIRouter, Depends
from app.database.supabase_client import get_auth_supabase
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    PasswordResetRequest, MessageResponse
)
from app.modules.auth.service import AuthService
from app.core.dependencies import get_admin_store, get_bearer_token
from app.core.exceptions import Unauthorized
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(
    supabase: Client = Depends(get_auth_supabase),
    admin_supabase: Optional[Client] = Depends(get_admin_store),
) -> AuthService:
    return AuthService(supabase, admin_supabase)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    if not token:
        raise Unauthorized("Authentication required", anonymous=True)
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.post("/password-reset", response_model=MessageResponse)
async def password_reset(
    body: PasswordResetRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Send a password reset e-mail"""
    service.request_password_reset(body.email)
    return {"message": "If the account exists, a reset link has been sent"}
