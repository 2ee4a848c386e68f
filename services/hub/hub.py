"""HubInstance — the SPN hub service run by the supervisor."""

import argparse
import asyncio
import logging
import platform
import time
from collections.abc import Awaitable, Callable, Sequence

from hubkit import (
    CommandLineOperationRequested,
    Control,
    ControlAction,
    Envelope,
    HubBusClient,
    HubInfo,
    HubSettings,
    HubState,
    MessageType,
    Module,
    ModuleEvent,
    ModuleManager,
    OptionRegistry,
    Status,
    Topics,
    create_message,
)
from hubkit.modules import CONFIG_CHANGE_EVENT, CONFIG_MODULE

from services.hub.filter import FilterModule
from services.hub.state import VerdictCache

logger = logging.getLogger(__name__)

RESTART_EXIT_CODE = 23
OPERATIONS = ("version", "show-config")


def user_agent(name: str) -> str:
    return f"{name} ({platform.system().lower()} {platform.machine().lower()})"


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse hub arguments: an optional one-shot operation and hub flags.

    Raises:
        ValueError: On an unknown operation or argument.
    """
    parser = argparse.ArgumentParser(prog="spn-hub", add_help=False)
    parser.add_argument("operation", nargs="?")
    parser.add_argument("--reboot-on-restart", action="store_true", help="reboot server on auto-upgrade")
    args, unknown = parser.parse_known_args(list(argv))
    if unknown:
        raise ValueError(f"unrecognized arguments: {' '.join(unknown)}")
    if args.operation is not None and args.operation not in OPERATIONS:
        raise ValueError(f"unknown operation {args.operation!r} (choose from {', '.join(OPERATIONS)})")
    return args


class CoreModule(Module):
    """Base module every other hub module depends on."""

    def __init__(self, info: HubInfo) -> None:
        super().__init__("core")
        self._info = info

    async def start(self) -> None:
        logger.info(
            "%s %s (%s), public hub: %s",
            self._info.name,
            self._info.version,
            self._info.license,
            self._info.public_hub,
        )


class HubInstance:
    """A network hub: modules wired to the control bus.

    The hub stops either through `stop()` or on its own when a control
    message asks it to; in both cases `stopped` is set afterwards.
    """

    def __init__(self, settings: HubSettings, bus: HubBusClient | None = None) -> None:
        self._settings = settings
        self._bus = bus if bus is not None else HubBusClient(settings.nats_url, name=settings.hub_id)
        self.info = HubInfo(
            name=settings.name,
            version=settings.version,
            user_agent=user_agent(settings.name),
            public_hub=settings.public_hub,
            reboot_on_restart=settings.reboot_on_restart,
        )
        self.modules = ModuleManager()
        self.options = OptionRegistry(self.modules)
        self.verdicts = VerdictCache()
        self.modules.register(CoreModule(self.info))
        self.filter = self.modules.register(FilterModule(self.options, self.verdicts))
        self.command_line_operation: Callable[[], Awaitable[None]] | None = None

        self._stopped = asyncio.Event()
        self._exit_code = 0
        self._stopping = False
        self._started_at: float | None = None
        self._background: set[asyncio.Task] = set()

    @classmethod
    def create(
        cls,
        settings: HubSettings,
        argv: Sequence[str] = (),
        bus: HubBusClient | None = None,
    ) -> "HubInstance":
        """Create a hub from settings and command-line arguments.

        Raises:
            CommandLineOperationRequested: If `argv` names a one-shot operation.
            ValueError: On invalid arguments.
        """
        args = parse_args(argv)
        if args.reboot_on_restart:
            settings = settings.model_copy(update={"reboot_on_restart": True})
        instance = cls(settings, bus)
        if args.operation is not None:
            instance.command_line_operation = instance._operation(args.operation)
            raise CommandLineOperationRequested(instance, args.operation)
        return instance

    @property
    def settings(self) -> HubSettings:
        return self._settings

    @property
    def stopped(self) -> asyncio.Event:
        return self._stopped

    @property
    def exit_code(self) -> int:
        return self._exit_code

    @property
    def uptime(self) -> float:
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    async def start(self) -> None:
        """Connect to the bus, start all modules and begin reporting status."""
        self._started_at = time.monotonic()
        await self._bus.connect()
        if await self._stopped_during_start():
            return
        await self._publish_status(HubState.STARTING)

        await self.modules.prep_all()
        await self.modules.start_all()
        if await self._stopped_during_start():
            return

        await self._bus.subscribe(Topics.EVENTS, self._on_event)
        await self._bus.subscribe(Topics.CONTROL, self._on_control)
        if await self._stopped_during_start():
            return

        await self._publish_status(HubState.RUNNING)
        self._spawn(self._status_loop())
        logger.info("%s running as %s", self.info.name, self._settings.hub_id)

    async def _stopped_during_start(self) -> bool:
        """Undo a partial start if the hub was stopped while `start()` awaited."""
        if not self._stopping:
            return False
        await self._stopped.wait()
        logger.info("%s stopped while starting", self.info.name)
        await self.modules.stop_all()
        await self._bus.close()
        return True

    async def stop(self) -> None:
        await self._teardown(None)

    # --- One-shot operations ---

    def _operation(self, name: str) -> Callable[[], Awaitable[None]]:
        async def version() -> None:
            print(f"{self.info.name} {self.info.version} ({self.info.license})")
            print(self.info.user_agent)

        async def show_config() -> None:
            print(self._settings.model_dump_json(indent=2))
            for key, value in self.options.as_dict().items():
                print(f"{key} = {value!r}")

        return {"version": version, "show-config": show_config}[name]

    # --- Bus handlers ---

    async def _on_event(self, envelope: Envelope) -> None:
        if envelope.type != MessageType.EVENT:
            return
        event = ModuleEvent.model_validate(envelope.payload)

        if event.module == CONFIG_MODULE and event.event == CONFIG_CHANGE_EVENT and "key" in event.data:
            await self.options.set(event.data["key"], event.data.get("value"))
            return

        ran = await self.modules.trigger(event.module, event.event, event.data)
        logger.debug("Event %s/%s from %s ran %d hooks", event.module, event.event, envelope.from_hub, ran)

    async def _on_control(self, envelope: Envelope) -> None:
        if envelope.type != MessageType.CONTROL:
            return
        control = Control.model_validate(envelope.payload)
        if control.action == ControlAction.RESTART:
            code = RESTART_EXIT_CODE
        else:
            code = control.exit_code if control.exit_code is not None else 0
        logger.warning("%s requested by %s", control.action, envelope.from_hub)
        # teardown closes the bus, so it cannot run inside the bus callback
        self._spawn(self._teardown(code))

    # --- Internals ---

    async def _teardown(self, exit_code: int | None) -> None:
        if self._stopping:
            await self._stopped.wait()
            return
        self._stopping = True
        if exit_code is not None:
            self._exit_code = exit_code

        current = asyncio.current_task()
        for task in list(self._background):
            if task is not current:
                task.cancel()

        try:
            await self._publish_status(HubState.STOPPING)
            await self.modules.stop_all()
        finally:
            await self._publish_status(HubState.STOPPED)
            await self._bus.close()
            self._stopped.set()
            logger.info("%s stopped with exit code %d", self.info.name, self._exit_code)

    async def _publish_status(self, state: HubState) -> None:
        if not self._bus.is_connected:
            logger.debug("Not reporting %s status, bus not connected", state)
            return
        msg = create_message(
            from_hub=self._settings.hub_id,
            payload=Status(
                hub_id=self._settings.hub_id,
                name=self.info.name,
                version=self.info.version,
                state=state,
                uptime=self.uptime,
            ),
        )
        try:
            await self._bus.publish(Topics.STATUS, msg)
        except Exception as e:
            logger.warning("Failed to publish %s status: %s", state, e)

    async def _status_loop(self) -> None:
        while True:
            await asyncio.sleep(self._settings.status_interval)
            await self._publish_status(HubState.RUNNING)

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task
