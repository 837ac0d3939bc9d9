from supabase import Client
from app.config.settings import settings
from app.core.dependencies import PROFILES_TABLE
from app.core.exceptions import StoreFailure, Unauthorized, ValidationError
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """Thin pass-through to Supabase Auth; credentials are never handled beyond forwarding them."""

    def __init__(self, supabase: Client, admin_supabase: Optional[Client] = None):
        self.supabase = supabase
        self.admin_supabase = admin_supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            user_metadata = {}
            if register_data.name:
                user_metadata["name"] = register_data.name

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise ValidationError("Failed to register user")
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ValidationError("User already exists")
            raise StoreFailure(f"Registration failed: {error_message}")

        user = auth_response.user
        if register_data.name:
            self._touch_profile(user.id, {"name": register_data.name})
        return RegisterResponse(
            user_id=user.id,
            email=user.email or register_data.email,
            message="User registered successfully"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise Unauthorized("Invalid email or password", anonymous=True)
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise Unauthorized("Invalid email or password", anonymous=True)
            raise StoreFailure(f"Login failed: {error_message}")

        user = auth_response.user
        self._touch_profile(user.id, {"last_login": datetime.now(timezone.utc).isoformat()})
        return TokenResponse(
            access_token=auth_response.session.access_token,
            refresh_token=auth_response.session.refresh_token,
            token_type="bearer",
            user_id=user.id,
            email=user.email or login_data.email
        )

    def logout(self, token: str) -> bool:
        """Revoke the caller's own session (refresh tokens) by its JWT"""
        try:
            self.supabase.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning("Sign out failed: %s", e)
            return False

    def request_password_reset(self, email: str) -> None:
        try:
            options = {"redirect_to": settings.password_reset_redirect_url} if settings.password_reset_redirect_url else {}
            self.supabase.auth.reset_password_for_email(email, options)
        except Exception as e:
            logger.error("Password reset request failed: %s", e)
            raise StoreFailure(f"Password reset failed: {e}")

    def _touch_profile(self, user_id: str, updates: dict) -> None:
        """Best-effort profile bookkeeping after an auth event."""
        client = self.admin_supabase or self.supabase
        try:
            client.table(PROFILES_TABLE).update(updates).eq("id", user_id).execute()
        except Exception as e:
            logger.warning("Failed to update profile %s after auth event: %s", user_id, e)
