"""FilterModule — the privacy filter's configuration and verdict-reset wiring."""

import logging
from typing import Any

from hubkit.modules import (
    CATEGORY_ANNOTATION,
    CONFIG_CHANGE_EVENT,
    CONFIG_MODULE,
    ConfigOption,
    ExpertiseLevel,
    Module,
    OptionRegistry,
    OptType,
    ReleaseLevel,
)

from services.hub.state import VerdictCache

logger = logging.getLogger(__name__)

CFG_OPTION_ENABLE_FILTER_KEY = "filter/enable"

PROFILES_MODULE = "profiles"
PROFILE_CONFIG_CHANGE_EVENT = "profile config change"
CAPTAIN_MODULE = "captain"
SPN_CONNECT_EVENT = "spn connect"

ENABLE_FILTER_OPTION = ConfigOption(
    name="Privacy Filter Module",
    key=CFG_OPTION_ENABLE_FILTER_KEY,
    description=(
        "Start the Privacy Filter module. If turned off, all privacy filter "
        "protections are fully disabled on this device."
    ),
    opt_type=OptType.BOOL,
    expertise_level=ExpertiseLevel.DEVELOPER,
    release_level=ReleaseLevel.STABLE,
    default_value=True,
    annotations={CATEGORY_ANNOTATION: "General"},
)


class FilterModule(Module):
    """Keeps cached connection verdicts in line with the current configuration.

    Any configuration change, profile change or SPN connect invalidates all
    cached verdicts.
    """

    def __init__(self, options: OptionRegistry, verdicts: VerdictCache) -> None:
        super().__init__("filter", depends_on=("core",))
        self._options = options
        self._verdicts = verdicts
        self._active = False
        options.register(ENABLE_FILTER_OPTION)

    @property
    def active(self) -> bool:
        return self._active

    @property
    def verdicts(self) -> VerdictCache:
        return self._verdicts

    async def prep(self) -> None:
        self.register_event_hook(
            CONFIG_MODULE, CONFIG_CHANGE_EVENT, "reset connection verdicts", self._on_config_change
        )
        self.register_event_hook(
            PROFILES_MODULE, PROFILE_CONFIG_CHANGE_EVENT, "reset connection verdicts", self._reset_verdicts
        )
        # connecting takes longer than the config change that enables the SPN
        self.register_event_hook(
            CAPTAIN_MODULE, SPN_CONNECT_EVENT, "reset connection verdicts", self._reset_verdicts
        )

    async def start(self) -> None:
        self._active = self._enabled()
        if self._active:
            logger.info("Privacy filter active")
        else:
            logger.warning("Privacy filter disabled by configuration")

    async def stop(self) -> None:
        self._active = False

    def _enabled(self) -> bool:
        return bool(self._options.get(CFG_OPTION_ENABLE_FILTER_KEY))

    async def _on_config_change(self, data: dict[str, Any]) -> None:
        if data.get("key") == CFG_OPTION_ENABLE_FILTER_KEY:
            self._active = self._enabled()
            logger.info("Privacy filter %s", "enabled" if self._active else "disabled")
        await self._reset_verdicts(data)

    async def _reset_verdicts(self, data: dict[str, Any]) -> None:
        changed = self._verdicts.reset_all()
        logger.info("Reset %d connection verdicts", changed)
