"""Supervisor — runs an instance until a signal or its own stop, then shuts it down.

Lifecycle:

    create ──► (one-shot operation) ──► exit 0 / 3
       │
       ▼
    start logging, listen for signals, start instance (background)
       │
       ▼
    wait ──► diagnostic signal: dump, keep waiting
       │ ──► instance stopped on its own: exit with its code
       ▼
    termination signal: shutdown phase
       ├─ escalation task: N more termination signals force exit 1
       ├─ watchdog: shutdown taking too long forces exit 1
       └─ stop instance, exit with its code

Every exit goes through one ExitGate; the first code requested wins.
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TextIO

from hubkit.supervisor.diagnostics import dump_tasks
from hubkit.supervisor.escalation import DEFAULT_FORCE_BUDGET, EscalationCounter
from hubkit.supervisor.exit import ExitCode, ExitGate
from hubkit.supervisor.instance import CommandLineOperationRequested, Instance
from hubkit.supervisor.signals import SignalEvent, SignalListener
from hubkit.supervisor.watchdog import DEFAULT_SHUTDOWN_TIMEOUT, Watchdog

logger = logging.getLogger(__name__)

DUMP_ON_REQUEST = "PRINTING STACK ON REQUEST"
DUMP_ON_FORCED_EXIT = "PRINTING STACK ON FORCED EXIT"
DUMP_ON_SLOW_SHUTDOWN = "PRINTING STACK - TAKING TOO LONG FOR SHUTDOWN"


class Logs(Protocol):
    def start(self) -> None: ...

    def shutdown(self) -> None: ...


class Supervisor:
    """Owns one instance for the lifetime of the process.

    `run()` returns the exit code decided by the gate. With the default gate
    the process has already terminated by then.
    """

    def __init__(
        self,
        create: Callable[[], Instance],
        logs: Logs,
        *,
        listener: SignalListener | None = None,
        gate: ExitGate | None = None,
        force_exit_signals: int = DEFAULT_FORCE_BUDGET,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self._create = create
        self._logs = logs
        self._listener = listener if listener is not None else SignalListener()
        self._gate = gate if gate is not None else ExitGate()
        self._force_exit_signals = force_exit_signals
        self._shutdown_timeout = shutdown_timeout
        self._out = out
        self._err = err
        self._instance: Instance | None = None
        self._shutting_down = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def instance(self) -> Instance | None:
        return self._instance

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    @property
    def gate(self) -> ExitGate:
        return self._gate

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    async def run(self) -> int:
        """Run the full lifecycle and return the process exit code."""
        self._spawn(self._lifecycle(), "supervisor")
        try:
            return await self._gate.wait()
        finally:
            self._teardown()

    # --- Lifecycle ---

    async def _lifecycle(self) -> None:
        try:
            instance = self._create()
        except CommandLineOperationRequested as e:
            self._instance = e.instance
            await self._run_command_line_operation(e.instance)
            return
        except Exception as e:
            print(f"error creating an instance: {e}", file=self.err)
            self._exit(ExitCode.CREATE_FAILED, "instance creation failed")
            return

        self._instance = instance
        self._logs.start()
        self._listener.register()
        self._spawn(self._start_instance(instance), "instance-start")

        event = await self._wait_for_trigger(instance)
        if event is None:
            self._logs.shutdown()
            self._exit(instance.exit_code, "instance stopped on its own")
            return

        await self._shutdown(instance)

    async def _run_command_line_operation(self, instance: Instance) -> None:
        operation: Callable[[], Awaitable[None]] | None = getattr(instance, "command_line_operation", None)
        if operation is None:
            print("command line operation execution requested, but not set", file=self.err)
            self._exit(ExitCode.COMMAND_LINE_FAILED, "command line operation missing")
            return

        try:
            await operation()
        except Exception as e:
            print(f"command line operation failed: {e}", file=self.err)
            self._exit(ExitCode.COMMAND_LINE_FAILED, "command line operation failed")
            return
        self._exit(ExitCode.OK, "command line operation completed")

    async def _start_instance(self, instance: Instance) -> None:
        try:
            await instance.start()
        except Exception as e:
            print(f"instance start failed: {e}", file=self.err)
            self._fail("instance start failed")

    async def _wait_for_trigger(self, instance: Instance) -> SignalEvent | None:
        """Wait for a termination signal or the instance stopping on its own.

        Returns the termination event, or None if the instance stopped first.
        Diagnostic signals are handled here and never end the wait.
        """
        stopped = asyncio.ensure_future(instance.stopped.wait())
        next_signal: asyncio.Future | None = None
        try:
            while True:
                next_signal = asyncio.ensure_future(self._listener.next())
                done, _ = await asyncio.wait({stopped, next_signal}, return_when=asyncio.FIRST_COMPLETED)
                if stopped in done:
                    return None

                event: SignalEvent = next_signal.result()
                next_signal = None
                if event.is_termination:
                    print(" <INTERRUPT>", file=self.out, flush=True)
                    logger.warning("program was interrupted, stopping")
                    return event
                self._dump(DUMP_ON_REQUEST)
        finally:
            stopped.cancel()
            if next_signal is not None:
                next_signal.cancel()

    async def _shutdown(self, instance: Instance) -> None:
        self._shutting_down = True

        counter = EscalationCounter(self._force_exit_signals)
        self._spawn(self._escalate(counter), "shutdown-escalation")

        watchdog = Watchdog(self._shutdown_timeout, self._on_watchdog_expired)
        self._spawn(watchdog.arm(), "shutdown-watchdog")

        try:
            await instance.stop()
        except Exception as e:
            logger.error("failed to stop: %s", e)

        self._logs.shutdown()
        self._exit(instance.exit_code, "instance stopped")

    async def _escalate(self, counter: EscalationCounter) -> None:
        while True:
            event = await self._listener.next()
            if not event.is_termination:
                self._dump(DUMP_ON_REQUEST)
                continue

            remaining = counter.on_termination_signal()
            if remaining > 0:
                print(
                    f" <INTERRUPT> again, but already shutting down - {remaining} more to force",
                    file=self.out,
                    flush=True,
                )
            else:
                self._force_exit(DUMP_ON_FORCED_EXIT)
                return

    def _on_watchdog_expired(self) -> None:
        self._force_exit(DUMP_ON_SLOW_SHUTDOWN)

    # --- Exit paths ---

    def _force_exit(self, label: str) -> None:
        self._dump(label)
        self._fail(label)

    def _fail(self, reason: str) -> None:
        self._logs.shutdown()
        self._exit(ExitCode.FAILURE, reason)

    def _dump(self, label: str) -> None:
        dump_tasks(self.err, label)

    def _exit(self, code: int, reason: str) -> None:
        self._gate.request(code, reason)

    # --- Task bookkeeping ---

    def _spawn(self, aw: Awaitable[Any], name: str) -> asyncio.Task:
        task = asyncio.ensure_future(aw)
        task.set_name(name)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Supervisor task %s crashed", task.get_name(), exc_info=exc)
            self._fail(f"{task.get_name()} crashed")

    def _teardown(self) -> None:
        """Release signal handlers and cancel leftover tasks.

        Only reached when the gate did not terminate the process itself.
        """
        self._listener.unregister()
        for task in list(self._tasks):
            task.cancel()
