"""In-memory registry of map sessions keyed by client session id."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from ...config import settings
from ..location import LocationAcquirer, ReportedPositionProvider
from ..routing.geoapify_client import GeoapifyClient
from ..routing.resolver import RouteResolver
from .map_session import MapSession

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


@dataclass(slots=True)
class _Entry:
    session: MapSession
    provider: Optional[ReportedPositionProvider]
    last_used: float


class SessionRegistry:
    """Holds one map session per client id.

    Sessions idle for longer than ``settings.session_idle_seconds`` are
    discarded, and the least recently used one goes first once
    ``settings.max_sessions`` is reached.
    """

    def __init__(
        self,
        provider_factory: Optional[Callable[[], Optional[ReportedPositionProvider]]] = ReportedPositionProvider,
        client_factory: Callable[[], GeoapifyClient] = GeoapifyClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider_factory = provider_factory
        self._client_factory = client_factory
        self._clock = clock
        self._sessions: OrderedDict[str, _Entry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def _create(self, session_id: str, now: float) -> _Entry:
        provider = self._provider_factory() if self._provider_factory else None
        session = MapSession(
            acquirer=LocationAcquirer(provider),
            resolver=RouteResolver(self._client_factory()),
        )
        logger.info(f"Created map session '{session_id}'")
        return _Entry(session=session, provider=provider, last_used=now)

    def _evict(self, now: float) -> None:
        cutoff = now - settings.session_idle_seconds
        # Entries are kept in access order, so idle ones sit at the front.
        while self._sessions:
            session_id, entry = next(iter(self._sessions.items()))
            if entry.last_used > cutoff:
                break
            del self._sessions[session_id]
            logger.debug(f"Discarded idle map session '{session_id}'")
        while len(self._sessions) >= settings.max_sessions:
            session_id, _ = self._sessions.popitem(last=False)
            logger.warning(f"Session limit {settings.max_sessions} reached, discarded map session '{session_id}'")

    def _entry(self, session_id: str) -> _Entry:
        now = self._clock()
        entry = self._sessions.get(session_id)
        if entry is None:
            self._evict(now)
            entry = self._sessions[session_id] = self._create(session_id, now)
        else:
            entry.last_used = now
            self._sessions.move_to_end(session_id)
        return entry

    def get(self, session_id: str = DEFAULT_SESSION_ID) -> MapSession:
        return self._entry(session_id).session

    def provider(self, session_id: str = DEFAULT_SESSION_ID) -> Optional[ReportedPositionProvider]:
        return self._entry(session_id).provider

    def clear(self) -> None:
        self._sessions.clear()


registry = SessionRegistry()
