"""Job record storage."""

from .supabase import SupabaseJobStore

__all__ = ["SupabaseJobStore"]
