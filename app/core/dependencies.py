"""
Core dependencies: identity resolution and the admin authorization gate.

Resolution and authorization are deliberately separate. ``resolve_identity``
never raises and never grants anything: on any failure the context simply
carries no profile. ``require_admin`` is the only place a role is checked,
and it consults nothing but the context it is given.
"""

from dataclasses import dataclass
from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.exceptions import Unauthorized
from app.database.supabase_client import SupabaseClient
from app.modules.users.schemas import Profile
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

PROFILES_TABLE = "profiles"


@dataclass
class RequestContext:
    store: Client
    admin_store: Optional[Client] = None
    profile: Optional[Profile] = None

    @property
    def db(self) -> Client:
        """Privileged client when the deployment holds a service key, caller client otherwise."""
        return self.admin_store or self.store

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role == "admin"


def resolve_identity(token: Optional[str], store: Client, admin_store: Optional[Client] = None) -> RequestContext:
    """Build the request context for a bearer token. Any failure degrades to an anonymous context."""
    context = RequestContext(store=store, admin_store=admin_store)
    if not token:
        return context
    try:
        user_response = store.auth.get_user(token)
        user = user_response.user if user_response else None
        if not user:
            return context
        lookup = admin_store or store
        result = lookup.table(PROFILES_TABLE)\
            .select("*")\
            .eq("id", user.id)\
            .maybe_single()\
            .execute()
        if result and result.data:
            context.profile = Profile(**result.data)
        else:
            logger.info("No profile row for authenticated user %s", user.id)
    except Exception as e:
        logger.warning("Identity resolution failed, continuing as anonymous: %s", e)
        context.profile = None
    return context


def require_admin(context: RequestContext) -> Profile:
    """Return the caller's profile or raise Unauthorized unless the caller is an admin."""
    profile = context.profile
    if profile is None:
        raise Unauthorized("Unauthorized: Admin access required", anonymous=True)
    if profile.role != "admin":
        raise Unauthorized("Unauthorized: Admin access required")
    return profile


def require_profile(context: RequestContext) -> Profile:
    """Any signed-in caller with a profile row."""
    if context.profile is None:
        raise Unauthorized("Authentication required", anonymous=True)
    return context.profile


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    """Extract JWT token from Authorization header, None for anonymous callers"""
    return credentials.credentials if credentials else None


def get_caller_store(token: Optional[str] = Depends(get_bearer_token)) -> Client:
    return SupabaseClient.get_scoped_client(token)


def get_admin_store() -> Optional[Client]:
    return SupabaseClient.get_service_client()


def get_request_context(
    token: Optional[str] = Depends(get_bearer_token),
    store: Client = Depends(get_caller_store),
    admin_store: Optional[Client] = Depends(get_admin_store),
) -> RequestContext:
    return resolve_identity(token, store, admin_store)
