from typing import Optional
from supabase import create_client, Client, ClientOptions
from app.config.settings import settings


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(
                settings.supabase_url,
                settings.supabase_key,
                options=ClientOptions(auto_refresh_token=False, persist_session=False),
            )
        return cls._client

    @classmethod
    def get_service_client(cls) -> Optional[Client]:
        """Client with service_role key; bypasses RLS. None when no service key is configured."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url,
                settings.supabase_service_role_key,
                options=ClientOptions(auto_refresh_token=False, persist_session=False),
            )
        return cls._service_client

    @classmethod
    def get_scoped_client(cls, token: Optional[str]) -> Client:
        """Anon-key client that forwards the caller's JWT so RLS sees the caller."""
        if not token:
            return cls.get_client()
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(
                headers={"Authorization": f"Bearer {token}"},
                auto_refresh_token=False,
                persist_session=False,
            ),
        )

    @classmethod
    def create_auth_client(cls) -> Client:
        """Fresh anon client for a single sign-in/sign-up flow. Its session never reaches the shared clients."""
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_auth_supabase() -> Client:
    return SupabaseClient.create_auth_client()


def get_service_supabase() -> Client:
    """Service client when configured, anon client otherwise. Use in scripts."""
    return SupabaseClient.get_service_client() or SupabaseClient.get_client()
