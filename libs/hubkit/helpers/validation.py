"""Checks applied to envelopes before they are sent or handled."""

from pydantic import ValidationError

from hubkit.models.envelope import Envelope
from hubkit.models.messages import PAYLOAD_REGISTRY
from hubkit.models.topics import TOPIC_FOR_TYPE


def validate_message(envelope: Envelope) -> list[str]:
    """Return what is wrong with `envelope`; an empty list means valid."""
    errors: list[str] = []

    if not envelope.from_hub.strip():
        errors.append("'from' field must not be empty")

    expected_topic = TOPIC_FOR_TYPE[envelope.type]
    if envelope.topic != expected_topic:
        errors.append(f"{envelope.type} messages travel on {expected_topic}, not {envelope.topic!r}")

    try:
        PAYLOAD_REGISTRY[envelope.type].model_validate(envelope.payload)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(x) for x in err["loc"])
            errors.append(f"payload.{loc}: {err['msg']}")

    return errors
