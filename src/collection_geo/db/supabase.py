"""Supabase access for customers, captured locations and stored routes."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


def supabase_configured() -> bool:
    return bool(settings.supabase_url and settings.supabase_key)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Shared client, or None when COLLECTION_GEO_SUPABASE_URL/KEY are unset.

    Creating the client does not open a connection; queries can still fail.
    """
    if not supabase_configured():
        logger.warning("Supabase credentials not configured; using file-based customer and route data")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None
