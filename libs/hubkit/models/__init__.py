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

__all__ = [
    "Control",
    "ControlAction",
    "Envelope",
    "HubInfo",
    "HubState",
    "MessageType",
    "ModuleEvent",
    "PAYLOAD_REGISTRY",
    "Status",
    "Topics",
    "TOPIC_FOR_TYPE",
    "to_nats_subject",
]
