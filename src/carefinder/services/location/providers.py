"""Positioning capabilities consumed by the location acquirer."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from ...models.domain import PositionFix
from .errors import LocationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PositionOptions:
    enable_high_accuracy: bool
    timeout_seconds: float
    maximum_age_seconds: float


class PositionProvider(Protocol):
    """Anything with a ``getCurrentPosition``-style contract."""

    async def get_current_position(self, options: PositionOptions) -> PositionFix:
        ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class ReportedPositionProvider:
    """Positioning backed by fixes the user's device reports to the API.

    A request is answered immediately by the latest fix when it is no older
    than ``options.maximum_age_seconds``; otherwise it waits for the next
    report (or reported error). A maximum age of zero never reuses a fix.
    The caller bounds the wait.

    Reports must arrive on the event loop that owns the waiting requests.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._latest: PositionFix | None = None
        self._waiters: list[tuple[PositionOptions, asyncio.Future]] = []

    def pending(self) -> PositionOptions | None:
        """Options of the outstanding request the device should answer, if any."""
        if not self._waiters:
            return None
        wants_high_accuracy = any(options.enable_high_accuracy for options, _ in self._waiters)
        options = self._waiters[0][0]
        return PositionOptions(
            enable_high_accuracy=wants_high_accuracy,
            timeout_seconds=options.timeout_seconds,
            maximum_age_seconds=options.maximum_age_seconds,
        )

    def report(self, fix: PositionFix) -> None:
        self._latest = fix
        waiters, self._waiters = self._waiters, []
        for _, future in waiters:
            if not future.done():
                future.set_result(fix)

    def report_error(self, error: LocationError) -> None:
        waiters, self._waiters = self._waiters, []
        if not waiters:
            logger.info(f"Dropping device location error with no pending request: {error.code}")
            return
        for _, future in waiters:
            if not future.done():
                future.set_exception(error)

    async def get_current_position(self, options: PositionOptions) -> PositionFix:
        fix = self._latest
        if fix is not None and options.maximum_age_seconds > 0:
            age_ms = self._clock() - fix.timestamp
            # A fix stamped ahead of our clock has no trustworthy age.
            if 0 <= age_ms <= options.maximum_age_seconds * 1000:
                return fix

        future = asyncio.get_running_loop().create_future()
        entry = (options, future)
        self._waiters.append(entry)
        try:
            return await future
        finally:
            if entry in self._waiters:
                self._waiters.remove(entry)
