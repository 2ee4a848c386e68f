"""Watchdog — a fire-once shutdown deadline."""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 180.0  # 3 minutes


class Watchdog:
    """Calls `on_expire` once, `duration` seconds after `arm()`.

    There is nothing to cancel in production: the callback exits the process,
    and if the process exits first the callback never runs.
    """

    def __init__(self, duration: float, on_expire: Callable[[], None]) -> None:
        if duration <= 0:
            raise ValueError(f"duration must be positive, got {duration}")
        self._duration = duration
        self._on_expire = on_expire
        self._task: asyncio.Task | None = None
        self._fired = False

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def armed(self) -> bool:
        return self._task is not None

    @property
    def fired(self) -> bool:
        return self._fired

    def arm(self) -> asyncio.Task:
        """Start the countdown on the running event loop."""
        if self._task is not None:
            raise RuntimeError("Watchdog already armed")
        self._task = asyncio.ensure_future(self._run())
        logger.debug("Watchdog armed for %.1fs", self._duration)
        return self._task

    def disarm(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _run(self) -> None:
        await asyncio.sleep(self._duration)
        self._fired = True
        logger.warning("Shutdown still running after %.1fs", self._duration)
        self._on_expire()
