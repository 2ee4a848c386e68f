"""Module lifecycle and event hooks."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

HookFn = Callable[[dict[str, Any]], Awaitable[None]]


@dataclass(frozen=True)
class EventHook:
    """A callback run whenever `module` emits `event`."""

    owner: str
    module: str
    event: str
    description: str
    fn: HookFn


class Module:
    """A unit of hub functionality with a prep/start/stop lifecycle.

    Subclasses override the lifecycle coroutines they need. Modules start
    after everything in `depends_on` and stop before it.
    """

    def __init__(self, name: str, depends_on: tuple[str, ...] = ()) -> None:
        self.name = name
        self.depends_on = depends_on
        self._manager: "ModuleManager | None" = None

    @property
    def manager(self) -> "ModuleManager":
        if self._manager is None:
            raise RuntimeError(f"Module {self.name!r} is not registered")
        return self._manager

    def register_event_hook(self, module: str, event: str, description: str, fn: HookFn) -> None:
        """Run `fn` whenever `module` emits `event`."""
        self.manager.add_hook(
            EventHook(owner=self.name, module=module, event=event, description=description, fn=fn)
        )

    async def prep(self) -> None:
        pass

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass


class ModuleManager:
    """Registers modules, runs their lifecycle in dependency order, dispatches events."""

    def __init__(self) -> None:
        self._modules: dict[str, Module] = {}
        self._hooks: list[EventHook] = []
        self._started: list[Module] = []

    @property
    def modules(self) -> list[Module]:
        return list(self._modules.values())

    @property
    def started(self) -> list[str]:
        return [m.name for m in self._started]

    def register(self, module: Module) -> Module:
        if module.name in self._modules:
            raise ValueError(f"Module {module.name!r} already registered")
        module._manager = self
        self._modules[module.name] = module
        return module

    def get(self, name: str) -> Module | None:
        return self._modules.get(name)

    def add_hook(self, hook: EventHook) -> None:
        self._hooks.append(hook)
        logger.debug("%s: registered hook %r on %s/%s", hook.owner, hook.description, hook.module, hook.event)

    def hooks(self, module: str, event: str) -> list[EventHook]:
        return [h for h in self._hooks if h.module == module and h.event == event]

    def start_order(self) -> list[Module]:
        """Return modules so that every module comes after its dependencies.

        Raises:
            ValueError: On an unknown dependency or a dependency cycle.
        """
        order: list[Module] = []
        state: dict[str, str] = {}  # name → "visiting" | "done"

        def visit(module: Module, path: tuple[str, ...]) -> None:
            mark = state.get(module.name)
            if mark == "done":
                return
            if mark == "visiting":
                cycle = " -> ".join(path + (module.name,))
                raise ValueError(f"Module dependency cycle: {cycle}")
            state[module.name] = "visiting"
            for dep in module.depends_on:
                dep_module = self._modules.get(dep)
                if dep_module is None:
                    raise ValueError(f"Module {module.name!r} depends on unknown module {dep!r}")
                visit(dep_module, path + (module.name,))
            state[module.name] = "done"
            order.append(module)

        for module in self._modules.values():
            visit(module, ())
        return order

    async def prep_all(self) -> None:
        for module in self.start_order():
            await module.prep()
            logger.debug("Module %s prepped", module.name)

    async def start_all(self) -> None:
        for module in self.start_order():
            await module.start()
            self._started.append(module)
            logger.info("Module %s started", module.name)

    async def stop_all(self) -> None:
        """Stop started modules in reverse order.

        Every module gets its stop call; the first error is re-raised afterwards.
        """
        errors: list[Exception] = []
        while self._started:
            module = self._started.pop()
            try:
                await module.stop()
                logger.info("Module %s stopped", module.name)
            except Exception as e:
                logger.error("Module %s failed to stop: %s", module.name, e)
                errors.append(e)
        if errors:
            raise errors[0]

    async def trigger(self, module: str, event: str, data: dict[str, Any] | None = None) -> int:
        """Run all hooks for `module`/`event`. Returns how many succeeded."""
        data = data or {}
        succeeded = 0
        for hook in self.hooks(module, event):
            try:
                await hook.fn(data)
                succeeded += 1
            except Exception:
                logger.exception("%s: hook %r on %s/%s failed", hook.owner, hook.description, module, event)
        return succeeded
