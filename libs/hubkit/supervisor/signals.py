"""Signal listener — OS signals delivered as a FIFO stream of events."""

import asyncio
import logging
import signal
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class SignalKind(StrEnum):
    """What the supervisor should do about a received signal."""

    INTERRUPT = "interrupt"
    HANGUP = "hangup"
    TERMINATE = "terminate"
    QUIT = "quit"
    DIAGNOSTIC = "diagnostic"


SIGNAL_KINDS: dict[int, SignalKind] = {
    signal.SIGINT: SignalKind.INTERRUPT,
    signal.SIGHUP: SignalKind.HANGUP,
    signal.SIGTERM: SignalKind.TERMINATE,
    signal.SIGQUIT: SignalKind.QUIT,
    signal.SIGUSR1: SignalKind.DIAGNOSTIC,
}

DEFAULT_SIGNALS: tuple[int, ...] = tuple(SIGNAL_KINDS)


@dataclass(frozen=True)
class SignalEvent:
    """One received signal."""

    kind: SignalKind
    signum: int

    @property
    def is_termination(self) -> bool:
        return self.kind != SignalKind.DIAGNOSTIC

    @classmethod
    def from_signum(cls, signum: int) -> "SignalEvent":
        kind = SIGNAL_KINDS.get(signum)
        if kind is None:
            raise ValueError(f"Unsupported signal: {signum}")
        return cls(kind=kind, signum=signum)


class SignalListener:
    """Buffers signals in an unbounded queue until the supervisor asks for them.

    Call `register()` before the first `next()`; signals arriving in between
    are queued, not lost.
    """

    def __init__(self, signals: tuple[int, ...] = DEFAULT_SIGNALS) -> None:
        for signum in signals:
            if signum not in SIGNAL_KINDS:
                raise ValueError(f"Unsupported signal: {signum}")
        self._signals = signals
        self._queue: asyncio.Queue[SignalEvent] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def registered(self) -> bool:
        return self._loop is not None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def register(self) -> None:
        """Install handlers for all signals on the running loop."""
        if self._loop is not None:
            return
        loop = asyncio.get_running_loop()
        for signum in self._signals:
            loop.add_signal_handler(signum, self.dispatch, signum)
        self._loop = loop
        logger.debug("Listening for signals: %s", ", ".join(signal.Signals(s).name for s in self._signals))

    def unregister(self) -> None:
        if self._loop is None:
            return
        for signum in self._signals:
            self._loop.remove_signal_handler(signum)
        self._loop = None

    def dispatch(self, signum: int) -> None:
        """Queue an event for `signum`. Called from the loop's signal handler."""
        event = SignalEvent.from_signum(signum)
        logger.debug("Received %s (%s)", signal.Signals(signum).name, event.kind)
        self._queue.put_nowait(event)

    async def next(self) -> SignalEvent:
        """Return the oldest undelivered signal event, waiting if none is queued."""
        return await self._queue.get()
