"""Module SDK — lifecycle, event hooks and config options for hub modules."""

from hubkit.modules.base import EventHook, Module, ModuleManager
from hubkit.modules.options import (
    CATEGORY_ANNOTATION,
    CONFIG_CHANGE_EVENT,
    CONFIG_MODULE,
    ConfigOption,
    ExpertiseLevel,
    OptionRegistry,
    OptType,
    ReleaseLevel,
)

__all__ = [
    "CATEGORY_ANNOTATION",
    "CONFIG_CHANGE_EVENT",
    "CONFIG_MODULE",
    "ConfigOption",
    "EventHook",
    "ExpertiseLevel",
    "Module",
    "ModuleManager",
    "OptType",
    "OptionRegistry",
    "ReleaseLevel",
]
