"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings
from ...db.supabase import get_supabase_client, supabase_configured

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check Supabase connectivity and the configured route storage backend."""
    if not supabase_configured():
        return {
            "configured": False,
            "route_storage": settings.route_storage,
            "message": "Supabase not configured. Set COLLECTION_GEO_SUPABASE_URL and COLLECTION_GEO_SUPABASE_KEY environment variables.",
        }

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": True,
            "connected": False,
            "route_storage": settings.route_storage,
            "message": "Supabase client could not be created; check the configured URL and key.",
        }

    try:
        supabase.table(settings.customers_table).select("id", count="exact").limit(1).execute()
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "route_storage": settings.route_storage,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "configured": True,
        "connected": True,
        "route_storage": settings.route_storage,
        "message": "Database connected.",
    }
