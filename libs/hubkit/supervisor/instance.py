"""The contract between the supervisor and the service it runs."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol


class Instance(Protocol):
    """A long-running service unit.

    `stopped` is set once the instance has fully stopped, whether or not
    `stop()` was called; `exit_code` is only meaningful after that.
    """

    command_line_operation: Callable[[], Awaitable[None]] | None

    @property
    def stopped(self) -> asyncio.Event: ...

    @property
    def exit_code(self) -> int: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...


class CommandLineOperationRequested(Exception):
    """Raised by an instance factory when the process should run a one-shot
    operation instead of the service. Carries the created instance."""

    def __init__(self, instance: Instance, operation: str = "") -> None:
        message = "command line operation requested"
        super().__init__(f"{message}: {operation}" if operation else message)
        self.instance = instance
        self.operation = operation
