"""hubkit — supervisor, bus client and module SDK for the SPN hub."""

from hubkit.client.nats_client import HubBusClient
from hubkit.config import HUB_VERSION, HubSettings
from hubkit.helpers.factory import create_message
from hubkit.helpers.validation import validate_message
from hubkit.logs import LogSystem
from hubkit.models.envelope import Envelope
from hubkit.models.messages import (
    PAYLOAD_REGISTRY,
    Control,
    ControlAction,
    HubInfo,
    HubState,
    MessageType,
    ModuleEvent,
    Status,
)
from hubkit.models.topics import TOPIC_FOR_TYPE, Topics, to_nats_subject
from hubkit.modules import ConfigOption, Module, ModuleManager, OptionRegistry
from hubkit.supervisor import (
    CommandLineOperationRequested,
    ExitCode,
    ExitGate,
    Instance,
    SignalEvent,
    SignalKind,
    SignalListener,
    Supervisor,
)

__all__ = [
    # Client
    "HubBusClient",
    # Supervisor
    "CommandLineOperationRequested",
    "ExitCode",
    "ExitGate",
    "Instance",
    "SignalEvent",
    "SignalKind",
    "SignalListener",
    "Supervisor",
    # Runtime
    "HUB_VERSION",
    "HubSettings",
    "LogSystem",
    # Modules
    "ConfigOption",
    "Module",
    "ModuleManager",
    "OptionRegistry",
    # Models
    "Control",
    "ControlAction",
    "Envelope",
    "HubInfo",
    "HubState",
    "MessageType",
    "ModuleEvent",
    "PAYLOAD_REGISTRY",
    "Status",
    "TOPIC_FOR_TYPE",
    "Topics",
    # Helpers
    "create_message",
    "to_nats_subject",
    "validate_message",
]
