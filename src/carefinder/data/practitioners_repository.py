"""Practitioner loader with database-first approach, falling back to a JSON file."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Coordinate, Practitioner

logger = logging.getLogger(__name__)

PRACTITIONER_COLUMNS = (
    "id, specialty, city, experience_years, languages, location, verified_badge, created_at, "
    "user:users!user_id ( id, name, phone )"
)


def _parse_location(value: Any) -> Optional[Coordinate]:
    """Accept ``{lat, lng}`` (as stored) or ``{latitude, longitude}`` objects."""
    if not value:
        return None
    try:
        if isinstance(value, str):
            value = json.loads(value)
        lat = value.get("lat", value.get("latitude"))
        lng = value.get("lng", value.get("longitude"))
        if lat is None or lng is None:
            return None
        return Coordinate(latitude=float(lat), longitude=float(lng))
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Ignoring unusable practitioner location {value!r}: {e}")
        return None


def practitioner_from_row(row: dict) -> Practitioner:
    """Build a practitioner from a database or file row.

    Raises KeyError/ValueError/TypeError for rows that cannot be used.
    """
    user = row.get("user") or {}
    languages = row.get("languages") or ()
    return Practitioner(
        practitioner_id=str(row["id"]),
        specialty=str(row.get("specialty") or "").strip(),
        city=str(row.get("city") or "").strip(),
        experience_years=max(int(row.get("experience_years") or 0), 0),
        languages=tuple(str(language) for language in languages),
        location=_parse_location(row.get("location")),
        verified=bool(row.get("verified_badge", False)),
        name=user.get("name") or row.get("name"),
        phone=user.get("phone") or row.get("phone"),
    )


def _from_rows(rows: Iterable[dict], source: str) -> tuple[Practitioner, ...]:
    practitioners: list[Practitioner] = []
    for row in rows:
        try:
            practitioners.append(practitioner_from_row(row))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping invalid practitioner row from {source}: {e}")
    return tuple(practitioners)


def _load_practitioners_from_database() -> tuple[Practitioner, ...] | None:
    """Load verified practitioners from Supabase. Returns None if the database is not available."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        response = (
            supabase.table(settings.practitioners_table)
            .select(PRACTITIONER_COLUMNS)
            .eq("verified_badge", True)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.warning(f"Practitioner query failed, falling back to file: {e}")
        return None
    if not response.data:
        return None
    return _from_rows(response.data, source="database")


def _load_practitioners_from_file(source: Path | None = None) -> tuple[Practitioner, ...]:
    """Load verified practitioners from a JSON array file."""
    path = source or settings.practitioners_file
    if not path.exists():
        raise FileNotFoundError(f"Practitioner file not found: {path}")

    with path.open(mode="r", encoding="utf-8") as handle:
        rows = json.load(handle)
    if not isinstance(rows, list):
        raise ValueError(f"Practitioner file '{path}' must contain a JSON array.")
    verified_rows = [row for row in rows if isinstance(row, dict) and row.get("verified_badge", False)]
    return _from_rows(verified_rows, source=path.name)


@functools.lru_cache(maxsize=1)
def load_practitioners(source: Optional[Path] = None) -> tuple[Practitioner, ...]:
    """Get practitioners from the database first, falling back to the JSON file."""
    db_practitioners = _load_practitioners_from_database()
    if db_practitioners:
        return db_practitioners
    return _load_practitioners_from_file(source)


def get_practitioner(practitioner_id: str) -> Practitioner:
    for practitioner in load_practitioners():
        if practitioner.practitioner_id == practitioner_id:
            return practitioner
    raise LookupError(f"Practitioner '{practitioner_id}' not found")
