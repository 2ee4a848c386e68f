"""Unit tests for factory and validation helpers."""

import pytest
from pydantic import BaseModel

from hubkit import (
    Control,
    ControlAction,
    Envelope,
    HubState,
    MessageType,
    ModuleEvent,
    Status,
    Topics,
    create_message,
    validate_message,
)


# --- Factory ---


class TestCreateMessage:
    def test_control_goes_to_control_topic(self):
        env = create_message(from_hub="hub-control", payload=Control(action=ControlAction.RESTART))
        assert env.from_hub == "hub-control"
        assert env.topic == Topics.CONTROL
        assert env.type == MessageType.CONTROL
        assert env.payload == {"action": "restart", "exit_code": None}

    def test_status_payload_is_json_ready(self):
        status = Status(hub_id="hub-1", name="SPN Hub", version="0.7.8", state=HubState.STOPPING, uptime=1.0)
        env = create_message(from_hub="hub-1", payload=status)
        assert env.topic == Topics.STATUS
        assert env.payload["state"] == "stopping"

    def test_explicit_topic(self):
        env = create_message(
            from_hub="hub-control",
            payload=ModuleEvent(module="captain", event="spn connect"),
            topic="/hub/events/captain",
        )
        assert env.type == MessageType.EVENT
        assert env.topic == "/hub/events/captain"

    def test_unknown_payload_model(self):
        class Ping(BaseModel):
            seq: int = 0

        with pytest.raises(TypeError, match="Ping"):
            create_message(from_hub="hub-1", payload=Ping())


# --- Validation ---


def _envelope(**overrides) -> Envelope:
    fields = {
        "from": "hub-control",
        "topic": Topics.CONTROL,
        "type": MessageType.CONTROL,
        "payload": {"action": "shutdown"},
    }
    fields.update(overrides)
    return Envelope.model_validate(fields)


class TestValidateMessage:
    def test_valid_message(self):
        env = create_message(from_hub="hub-control", payload=Control(action=ControlAction.SHUTDOWN))
        assert validate_message(env) == []

    def test_empty_from(self):
        assert any("'from'" in e for e in validate_message(_envelope(**{"from": " "})))

    def test_wrong_topic_for_type(self):
        errors = validate_message(_envelope(topic=Topics.EVENTS))
        assert errors == [f"control messages travel on {Topics.CONTROL}, not '{Topics.EVENTS}'"]

    def test_invalid_payload(self):
        errors = validate_message(_envelope(payload={"action": "explode"}))
        assert any(e.startswith("payload.action") for e in errors)

    def test_missing_payload_field(self):
        errors = validate_message(_envelope(type=MessageType.EVENT, topic=Topics.EVENTS, payload={"module": "core"}))
        assert any(e.startswith("payload.event") for e in errors)
