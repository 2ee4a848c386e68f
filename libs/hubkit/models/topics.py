"""Topic paths and their NATS subjects.

Topics use `/` separators (e.g., `/hub/control`),
while NATS uses `.` separators (e.g., `hub.control`).
"""

from hubkit.models.messages import MessageType


class Topics:
    """Topic paths used by hubs and operator tools."""

    STATUS = "/hub/status"
    EVENTS = "/hub/events"
    CONTROL = "/hub/control"

    @classmethod
    def all_topics(cls) -> list[str]:
        return [cls.STATUS, cls.EVENTS, cls.CONTROL]


# Each message type travels on exactly one topic
TOPIC_FOR_TYPE: dict[MessageType, str] = {
    MessageType.STATUS: Topics.STATUS,
    MessageType.EVENT: Topics.EVENTS,
    MessageType.CONTROL: Topics.CONTROL,
}


def to_nats_subject(topic: str) -> str:
    """`/hub/control` → `hub.control`"""
    return topic.lstrip("/").replace("/", ".")
