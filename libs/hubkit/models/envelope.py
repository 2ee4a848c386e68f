"""Envelope model — what every message on the hub bus is wrapped in."""

import time
import uuid
from typing import Any

from pydantic import BaseModel, Field

from hubkit.models.messages import MessageType


class Envelope(BaseModel):
    """A hub message with its sender, topic and untyped payload.

    `from_hub` is `"from"` on the wire.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    from_hub: str = Field(alias="from")
    topic: str
    timestamp: float = Field(default_factory=time.time)
    type: MessageType
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    def to_wire(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode()

    @classmethod
    def from_wire(cls, data: bytes) -> "Envelope":
        """Decode a bus message.

        Raises:
            ValidationError: If `data` is not a JSON envelope.
        """
        return cls.model_validate_json(data)
