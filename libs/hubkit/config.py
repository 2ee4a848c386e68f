"""HubSettings — hub configuration read from the environment."""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from hubkit.supervisor.escalation import DEFAULT_FORCE_BUDGET
from hubkit.supervisor.watchdog import DEFAULT_SHUTDOWN_TIMEOUT

HUB_VERSION = "0.7.8"

# env var → field name
_ENV_FIELDS: dict[str, str] = {
    "NATS_URL": "nats_url",
    "HUB_NAME": "name",
    "HUB_ID": "hub_id",
    "HUB_LOG_LEVEL": "log_level",
    "HUB_FORCE_EXIT_SIGNALS": "force_exit_signals",
    "HUB_SHUTDOWN_TIMEOUT": "shutdown_timeout",
    "HUB_PUBLIC": "public_hub",
    "HUB_REBOOT_ON_RESTART": "reboot_on_restart",
    "HUB_STATUS_INTERVAL": "status_interval",
}


class HubSettings(BaseModel):
    """Settings for a hub process and its supervisor."""

    nats_url: str = "nats://localhost:4222"
    name: str = "SPN Hub"
    hub_id: str = "hub"
    version: str = HUB_VERSION
    log_level: str = "WARNING"
    force_exit_signals: int = Field(default=DEFAULT_FORCE_BUDGET, ge=1)
    shutdown_timeout: float = Field(default=DEFAULT_SHUTDOWN_TIMEOUT, gt=0)
    public_hub: bool = True
    reboot_on_restart: bool = False
    status_interval: float = Field(default=30.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "HubSettings":
        """Build settings from environment variables, falling back to defaults."""
        if environ is None:
            environ = os.environ
        values: dict[str, Any] = {
            field: environ[var] for var, field in _ENV_FIELDS.items() if environ.get(var)
        }
        return cls.model_validate(values)
