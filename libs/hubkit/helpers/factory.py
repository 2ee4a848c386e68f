"""Building envelopes from payload models."""

from pydantic import BaseModel

from hubkit.models.envelope import Envelope
from hubkit.models.messages import PAYLOAD_REGISTRY, MessageType
from hubkit.models.topics import TOPIC_FOR_TYPE

_TYPE_FOR_MODEL: dict[type[BaseModel], MessageType] = {
    model: msg_type for msg_type, model in PAYLOAD_REGISTRY.items()
}


def create_message(*, from_hub: str, payload: BaseModel, topic: str | None = None) -> Envelope:
    """Wrap `payload` in an envelope sent by `from_hub`.

    The message type follows from the payload's model, and the topic defaults
    to the one that type travels on.

    Raises:
        TypeError: If `payload` is not one of the hub payload models.
    """
    msg_type = _TYPE_FOR_MODEL.get(type(payload))
    if msg_type is None:
        raise TypeError(f"{type(payload).__name__} is not a hub message payload")

    return Envelope(
        **{"from": from_hub},
        topic=topic if topic is not None else TOPIC_FOR_TYPE[msg_type],
        type=msg_type,
        payload=payload.model_dump(mode="json"),
    )
