"""
Supabase Service

Supabase client used by the API layer for authentication
(Supabase Auth). The monitoring loop talks to the database through
services.storage instead.
"""

from typing import Optional

from supabase import Client, create_client

from led_manager.common.config import get_settings


class SupabaseService:
    """
    Supabase client wrapper.

    The client is created lazily on first use.
    """

    def __init__(self):
        self._client: Optional[Client] = None

    @property
    def client(self) -> Client:
        """Get or create Supabase client."""
        if self._client is None:
            settings = get_settings()
            settings.require_supabase()
            self._client = create_client(
                settings.supabase_url,
                settings.supabase_key
            )
        return self._client


# Singleton instance
supabase_service = SupabaseService()


def get_supabase() -> Client:
    """
    Dependency for getting Supabase client in routes.

    Usage:
        @router.get("/")
        async def my_route(db: Client = Depends(get_supabase)):
            ...
    """
    return supabase_service.client
