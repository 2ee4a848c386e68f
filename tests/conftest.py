"""Shared test fixtures."""

import asyncio
import io
import os
from typing import Any

import pytest
from hubkit import Envelope, ExitGate, HubBusClient, SignalListener, Supervisor


@pytest.fixture
def nats_url() -> str:
    return os.environ.get("NATS_URL", "nats://localhost:4222")


@pytest.fixture
async def bus_client(nats_url: str) -> HubBusClient:
    """Provide a connected HubBusClient, cleaned up after use."""
    client = HubBusClient(nats_url)
    await client.connect()
    yield client  # type: ignore[misc]
    await client.close()


# --- Fakes ---


class FakeBus:
    """In-memory stand-in for HubBusClient."""

    def __init__(self) -> None:
        self.connected = False
        self.closed = False
        self.published: list[tuple[str, Envelope]] = []
        self.handlers: dict[str, Any] = {}
        self.hold_connect: asyncio.Event | None = None

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def connect(self) -> None:
        if self.hold_connect is not None:
            await self.hold_connect.wait()
        self.connected = True

    async def publish(self, topic: str, envelope: Envelope) -> None:
        if not self.connected:
            raise RuntimeError("Not connected. Call connect() first.")
        self.published.append((topic, envelope))

    async def subscribe(self, topic: str, handler) -> None:
        self.handlers[topic] = handler

    async def close(self) -> None:
        self.connected = False
        self.closed = True
        self.handlers.clear()

    async def deliver(self, topic: str, envelope: Envelope) -> None:
        await self.handlers[topic](envelope)


class FakeInstance:
    """Scriptable Instance for supervisor tests."""

    def __init__(
        self,
        *,
        exit_code: int = 0,
        start_error: Exception | None = None,
        stop_error: Exception | None = None,
        stop_blocks: bool = False,
    ) -> None:
        self.stopped = asyncio.Event()
        self.exit_code = exit_code
        self.command_line_operation = None
        self.start_error = start_error
        self.stop_error = stop_error
        self.stop_blocks = stop_blocks
        self.release = asyncio.Event()
        self.start_calls = 0
        self.stop_calls = 0

    async def start(self) -> None:
        self.start_calls += 1
        if self.start_error is not None:
            raise self.start_error

    async def stop(self) -> None:
        self.stop_calls += 1
        if self.stop_blocks:
            await self.release.wait()
        self.stopped.set()
        if self.stop_error is not None:
            raise self.stop_error

    def stop_on_own(self, exit_code: int) -> None:
        self.exit_code = exit_code
        self.stopped.set()


class FakeLogs:
    def __init__(self) -> None:
        self.starts = 0
        self.shutdowns = 0

    @property
    def started(self) -> bool:
        return self.starts > 0

    def start(self) -> None:
        self.starts += 1

    def shutdown(self) -> None:
        self.shutdowns += 1


class QueueListener(SignalListener):
    """SignalListener that never touches real OS signal handlers."""

    def __init__(self) -> None:
        super().__init__()
        self.register_calls = 0

    @property
    def registered(self) -> bool:
        return self.register_calls > 0

    def register(self) -> None:
        self.register_calls += 1

    def unregister(self) -> None:
        pass


class Harness:
    """A supervisor wired to fakes, with captured output streams."""

    def __init__(self, create, **kwargs: Any) -> None:
        self.logs = FakeLogs()
        self.listener = QueueListener()
        self.gate = ExitGate(terminate=None)
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.supervisor = Supervisor(
            create,
            self.logs,
            listener=self.listener,
            gate=self.gate,
            out=self.out,
            err=self.err,
            **kwargs,
        )
        self.task: asyncio.Task | None = None

    def start(self) -> asyncio.Task:
        self.task = asyncio.ensure_future(self.supervisor.run())
        return self.task

    async def result(self, timeout: float = 2.0) -> int:
        assert self.task is not None
        return await asyncio.wait_for(self.task, timeout)

    def signal(self, signum: int) -> None:
        self.listener.dispatch(signum)

    @staticmethod
    async def settle(rounds: int = 20) -> None:
        """Let every ready task run a few steps."""
        for _ in range(rounds):
            await asyncio.sleep(0)

    @staticmethod
    async def wait_until(predicate, timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not reached in time")
            await asyncio.sleep(0.001)


@pytest.fixture
def fake_bus() -> FakeBus:
    return FakeBus()


@pytest.fixture
def make_instance() -> type[FakeInstance]:
    return FakeInstance


@pytest.fixture
def make_harness() -> type[Harness]:
    return Harness
