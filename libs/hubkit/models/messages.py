"""Message types and payload models for the hub control protocol."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class MessageType(StrEnum):
    """All message types in the protocol."""

    STATUS = "status"
    EVENT = "event"
    CONTROL = "control"


class HubState(StrEnum):
    """Lifecycle states a hub reports in its status messages."""

    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class ControlAction(StrEnum):
    SHUTDOWN = "shutdown"
    RESTART = "restart"


class HubInfo(BaseModel):
    """Static identity of a hub process."""

    name: str
    version: str
    license: str = "GPLv3"
    user_agent: str
    public_hub: bool = True
    reboot_on_restart: bool = False


class Status(BaseModel):
    """Periodic hub status broadcast."""

    hub_id: str
    name: str
    version: str
    state: HubState
    uptime: float = Field(ge=0)


class ModuleEvent(BaseModel):
    """An event addressed to the hooks registered for `module`/`event`."""

    module: str
    event: str
    data: dict[str, Any] = Field(default_factory=dict)


class Control(BaseModel):
    """Operator request to stop the hub."""

    action: ControlAction
    exit_code: int | None = None


# Registry mapping message types to their payload models
PAYLOAD_REGISTRY: dict[MessageType, type[BaseModel]] = {
    MessageType.STATUS: Status,
    MessageType.EVENT: ModuleEvent,
    MessageType.CONTROL: Control,
}
