"""Supabase-backed display and schedule stores."""

from .supabase_store import (
    SupabaseDisplayStore,
    SupabaseRest,
    SupabaseScheduleStore,
)

__all__ = ["SupabaseRest", "SupabaseDisplayStore", "SupabaseScheduleStore"]
