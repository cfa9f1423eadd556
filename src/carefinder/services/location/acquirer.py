"""Single-flight acquisition of the user's position."""

from __future__ import annotations

import asyncio
import logging

from ...config import settings
from ...models.domain import Coordinate, PositionFix, PositionSample
from .errors import LocationUnsupported, PositionTimeout, PositionUnavailable
from .providers import PositionOptions, PositionProvider

logger = logging.getLogger(__name__)


class LocationAcquirer:
    """Owns the active ``PositionSample`` and the single in-flight sensor request."""

    def __init__(self, provider: PositionProvider | None) -> None:
        self._provider = provider
        self._current: PositionSample | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def current(self) -> PositionSample | None:
        return self._current

    @property
    def in_progress(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def acquire(self, force_fresh: bool = False) -> PositionSample:
        """Return a fresh position sample, joining a request that is already running.

        Raises one of the ``LocationError`` kinds when no position can be had.
        """
        if self.in_progress:
            logger.debug("Location request already in progress, awaiting its outcome")
            return await asyncio.shield(self._inflight)

        self._inflight = asyncio.ensure_future(self._acquire(force_fresh))
        return await asyncio.shield(self._inflight)

    async def _acquire(self, force_fresh: bool) -> PositionSample:
        primary = PositionOptions(
            enable_high_accuracy=True,
            timeout_seconds=settings.location_timeout_seconds,
            maximum_age_seconds=0.0 if force_fresh else settings.location_max_age_seconds,
        )
        logger.info(f"Requesting position ({'force refresh' if force_fresh else 'cache allowed'})")
        try:
            fix = await self._read(primary)
        except PositionTimeout:
            logger.warning("High-accuracy position timed out, retrying with network accuracy")
            fallback = PositionOptions(
                enable_high_accuracy=False,
                timeout_seconds=settings.location_fallback_timeout_seconds,
                maximum_age_seconds=settings.location_fallback_max_age_seconds,
            )
            fix = await self._read(fallback)

        try:
            coordinate = Coordinate(latitude=fix.latitude, longitude=fix.longitude)
        except ValueError as exc:
            raise PositionUnavailable(str(exc)) from exc

        sample = PositionSample(
            coordinate=coordinate,
            accuracy_meters=float(fix.accuracy),
            captured_at_epoch_ms=int(fix.timestamp),
            low_accuracy_threshold_meters=settings.low_accuracy_threshold_meters,
            poor_accuracy_threshold_meters=settings.poor_accuracy_threshold_meters,
        )
        if sample.precision_warning:
            logger.warning(f"Low accuracy position ({round(sample.accuracy_meters)}m), location may not be precise")
        self._current = sample
        return sample

    async def _read(self, options: PositionOptions) -> PositionFix:
        if self._provider is None:
            raise LocationUnsupported("No positioning capability is available")
        try:
            return await asyncio.wait_for(
                self._provider.get_current_position(options),
                timeout=options.timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise PositionTimeout(f"No position within {options.timeout_seconds:g}s") from None
