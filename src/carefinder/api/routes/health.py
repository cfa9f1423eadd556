"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_routing_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.geoapify_client import check_health as routing_health_check
    return routing_health_check


@router.get("/health/routing", status_code=status.HTTP_200_OK)
async def health_routing() -> dict:
    """Check routing service health; an unhealthy service only means estimated routes."""
    if not settings.geoapify_api_key:
        return {"service": "geoapify", "configured": False, "healthy": False, "mode": "estimated"}
    healthy = await _get_routing_health_check()()
    return {
        "service": "geoapify",
        "configured": True,
        "healthy": healthy,
        "mode": "routed" if healthy else "estimated",
    }


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and practitioner source status."""
    from ...db.supabase import get_supabase_client
    from ...data.practitioners_repository import load_practitioners

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set CAREFINDER_SUPABASE_URL and CAREFINDER_SUPABASE_KEY environment variables.",
            "practitioners_file": str(settings.practitioners_file),
        }

    try:
        test_query = supabase.table(settings.practitioners_table).select("id", count="exact").limit(1).execute()
        count = test_query.count or 0
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "configured": True,
        "connected": True,
        "practitioners_count": count,
        "cached_practitioners": load_practitioners.cache_info().currsize > 0,
        "message": f"Database connected. Found {count} practitioners.",
    }
