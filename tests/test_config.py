"""Unit tests for HubSettings and LogSystem."""

import logging

import pytest
from pydantic import ValidationError

from hubkit import HubSettings, LogSystem


class TestHubSettings:
    def test_defaults(self):
        settings = HubSettings.from_env({})
        assert settings.nats_url == "nats://localhost:4222"
        assert settings.name == "SPN Hub"
        assert settings.log_level == "WARNING"
        assert settings.force_exit_signals == 5
        assert settings.shutdown_timeout == 180.0
        assert settings.public_hub is True
        assert settings.reboot_on_restart is False

    def test_from_env(self):
        settings = HubSettings.from_env({
            "NATS_URL": "nats://nats:4222",
            "HUB_ID": "hub-eu-1",
            "HUB_LOG_LEVEL": "debug",
            "HUB_FORCE_EXIT_SIGNALS": "3",
            "HUB_SHUTDOWN_TIMEOUT": "12.5",
            "HUB_PUBLIC": "false",
            "HUB_REBOOT_ON_RESTART": "true",
        })
        assert settings.nats_url == "nats://nats:4222"
        assert settings.hub_id == "hub-eu-1"
        assert settings.log_level == "DEBUG"
        assert settings.force_exit_signals == 3
        assert settings.shutdown_timeout == 12.5
        assert settings.public_hub is False
        assert settings.reboot_on_restart is True

    def test_empty_values_fall_back_to_defaults(self):
        settings = HubSettings.from_env({"HUB_ID": ""})
        assert settings.hub_id == "hub"

    def test_force_exit_signals_must_be_positive(self):
        with pytest.raises(ValidationError):
            HubSettings.from_env({"HUB_FORCE_EXIT_SIGNALS": "0"})

    def test_shutdown_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            HubSettings.from_env({"HUB_SHUTDOWN_TIMEOUT": "-1"})

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            HubSettings.from_env({"HUB_LOG_LEVEL": "chatty"})


class TestLogSystem:
    def test_level_names(self):
        assert LogSystem("warning").level == logging.WARNING
        assert LogSystem(logging.DEBUG).level == logging.DEBUG

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            LogSystem("chatty")

    def test_start_once(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
        root = logging.getLogger()
        monkeypatch.setattr(root, "level", root.level)

        logs = LogSystem("INFO")
        logs.start()
        logs.start()

        assert logs.started
        assert len(calls) == 1
        assert calls[0]["level"] == logging.INFO

    def test_shutdown_only_after_start(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: None)
        monkeypatch.setattr(logging, "shutdown", lambda: calls.append("shutdown"))
        root = logging.getLogger()
        monkeypatch.setattr(root, "level", root.level)

        logs = LogSystem()
        logs.shutdown()
        assert calls == []

        logs.start()
        logs.shutdown()
        logs.shutdown()
        assert calls == ["shutdown"]
        assert logs.shut_down
