"""Process exit codes and the single exit path shared by all supervisor tasks."""

import asyncio
import logging
import os
import sys
import threading
from collections.abc import Callable
from enum import IntEnum

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Exit codes the supervisor produces on its own.

    Codes reported by the instance after it stopped are passed through as-is.
    """

    OK = 0
    FAILURE = 1
    CREATE_FAILED = 2
    COMMAND_LINE_FAILED = 3


def hard_exit(code: int) -> None:
    """Flush the standard streams and terminate the process immediately."""
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError):
            pass  # nothing left to flush into
    os._exit(code)


class ExitGate:
    """First-caller-wins exit path.

    Any task may call `request()`; only the first code is kept. With the
    default `terminate` the process ends inside `request()`. Passing
    `terminate=None` turns the gate into a plain latch, which is what tests
    and embedding callers use.
    """

    def __init__(self, terminate: Callable[[int], None] | None = hard_exit) -> None:
        self._terminate = terminate
        self._lock = threading.Lock()
        self._code: int | None = None
        self._reason = ""
        self._event = asyncio.Event()

    @property
    def code(self) -> int | None:
        return self._code

    @property
    def reason(self) -> str:
        return self._reason

    @property
    def closed(self) -> bool:
        return self._code is not None

    def request(self, code: int, reason: str = "") -> bool:
        """Request process exit. Returns False if another exit already won."""
        with self._lock:
            if self._code is not None:
                logger.debug("Exit %d (%s) ignored, already exiting with %d", code, reason, self._code)
                return False
            self._code = int(code)
            self._reason = reason

        logger.debug("Exiting with code %d: %s", code, reason)
        self._event.set()
        if self._terminate is not None:
            self._terminate(int(code))
        return True

    async def wait(self) -> int:
        """Block until an exit has been requested and return its code."""
        await self._event.wait()
        assert self._code is not None
        return self._code
