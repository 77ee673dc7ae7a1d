"""Database helpers."""

from .supabase import get_supabase_client, supabase_configured

__all__ = ["get_supabase_client", "supabase_configured"]
