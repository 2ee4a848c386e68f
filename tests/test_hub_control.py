"""Unit tests for the hub_control operator script."""

import pytest
from hubkit import MessageType, Topics, validate_message

from scripts.hub_control import build_message, parse_args


class TestBuildMessage:
    def test_shutdown(self):
        topic, env = build_message(parse_args(["shutdown", "--exit-code", "4"]))
        assert topic == Topics.CONTROL
        assert env.type == MessageType.CONTROL
        assert env.payload == {"action": "shutdown", "exit_code": 4}
        assert validate_message(env) == []

    def test_restart(self):
        topic, env = build_message(parse_args(["restart"]))
        assert topic == Topics.CONTROL
        assert env.payload["action"] == "restart"
        assert env.payload["exit_code"] is None

    def test_event_with_data(self):
        topic, env = build_message(
            parse_args(["event", "config", "config change", "key=filter/enable", "value=false"])
        )
        assert topic == Topics.EVENTS
        assert env.type == MessageType.EVENT
        assert env.payload["data"] == {"key": "filter/enable", "value": False}

    def test_event_bad_pair(self):
        with pytest.raises(ValueError):
            build_message(parse_args(["event", "captain", "spn connect", "oops"]))
