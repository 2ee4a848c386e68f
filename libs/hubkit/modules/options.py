"""Configuration options that modules declare and operators change at runtime."""

import logging
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from hubkit.modules.base import ModuleManager

logger = logging.getLogger(__name__)

CONFIG_MODULE = "config"
CONFIG_CHANGE_EVENT = "config change"
CATEGORY_ANNOTATION = "category"


class OptType(StrEnum):
    BOOL = "bool"
    INT = "int"
    STRING = "string"
    STRING_ARRAY = "[]string"


class ExpertiseLevel(StrEnum):
    USER = "user"
    EXPERT = "expert"
    DEVELOPER = "developer"


class ReleaseLevel(StrEnum):
    STABLE = "stable"
    BETA = "beta"
    EXPERIMENTAL = "experimental"


def value_matches(opt_type: OptType, value: Any) -> bool:
    """Check that `value` has the Python type backing `opt_type`."""
    if opt_type == OptType.BOOL:
        return isinstance(value, bool)
    if opt_type == OptType.INT:
        return isinstance(value, int) and not isinstance(value, bool)
    if opt_type == OptType.STRING:
        return isinstance(value, str)
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


class ConfigOption(BaseModel):
    """A declared configuration option."""

    name: str
    key: str = Field(min_length=1)
    description: str = ""
    opt_type: OptType
    expertise_level: ExpertiseLevel = ExpertiseLevel.USER
    release_level: ReleaseLevel = ReleaseLevel.STABLE
    default_value: Any
    annotations: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _default_matches_type(self) -> "ConfigOption":
        if not value_matches(self.opt_type, self.default_value):
            raise ValueError(
                f"default value {self.default_value!r} does not match type {self.opt_type}"
            )
        return self


class OptionRegistry:
    """Holds declared options and their current values.

    Changing a value emits `config`/`config change` through the bound
    module manager.
    """

    def __init__(self, manager: ModuleManager | None = None) -> None:
        self._manager = manager
        self._options: dict[str, ConfigOption] = {}
        self._values: dict[str, Any] = {}

    @property
    def options(self) -> list[ConfigOption]:
        return list(self._options.values())

    def register(self, option: ConfigOption) -> None:
        if option.key in self._options:
            raise ValueError(f"Option {option.key!r} already registered")
        self._options[option.key] = option

    def get(self, key: str) -> Any:
        option = self._options.get(key)
        if option is None:
            raise KeyError(key)
        return self._values.get(key, option.default_value)

    async def set(self, key: str, value: Any) -> None:
        """Change an option's value and notify config change hooks.

        Raises:
            KeyError: If the option is not registered.
            ValueError: If the value has the wrong type.
        """
        option = self._options.get(key)
        if option is None:
            raise KeyError(key)
        if not value_matches(option.opt_type, value):
            raise ValueError(f"Option {key!r} expects {option.opt_type}, got {value!r}")
        if self._values.get(key, option.default_value) == value:
            return
        self._values[key] = value
        logger.info("Option %s set to %r", key, value)
        if self._manager is not None:
            await self._manager.trigger(CONFIG_MODULE, CONFIG_CHANGE_EVENT, {"key": key, "value": value})

    def as_dict(self) -> dict[str, Any]:
        return {key: self.get(key) for key in self._options}
