"""Process-wide logging with an explicit start/shutdown lifecycle."""

import logging

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


class LogSystem:
    """Configures root logging on `start()` and flushes it on `shutdown()`."""

    def __init__(self, level: int | str = logging.WARNING) -> None:
        self._level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
        if not isinstance(self._level, int):
            raise ValueError(f"Unknown log level: {level!r}")
        self._started = False
        self._shut_down = False

    @property
    def level(self) -> int:
        return self._level

    @property
    def started(self) -> bool:
        return self._started

    @property
    def shut_down(self) -> bool:
        return self._shut_down

    def start(self) -> None:
        if self._started:
            return
        logging.basicConfig(level=self._level, format=LOG_FORMAT)
        logging.getLogger().setLevel(self._level)
        self._started = True

    def shutdown(self) -> None:
        if not self._started or self._shut_down:
            return
        logging.shutdown()
        self._shut_down = True
