"""Shared router dependencies."""

from __future__ import annotations

from fastapi import Header

from ..services.presentation import DEFAULT_SESSION_ID, MapSession, registry


async def session_id(x_session_id: str | None = Header(default=None)) -> str:
    return x_session_id or DEFAULT_SESSION_ID


async def map_session(x_session_id: str | None = Header(default=None)) -> MapSession:
    return registry.get(x_session_id or DEFAULT_SESSION_ID)
