"""Tests for configuration parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from safir.logging import LogLevel, Profile

from imageauth.config import Config

from .support.data import config_path


def test_config() -> None:
    config = Config.from_file(config_path("standard"))
    assert config.log_level == LogLevel.DEBUG
    assert config.profile == Profile.development
    assert config.event_component == "imageauth-test"
    assert config.hosts.api_version == "metal3.io/v1alpha1"
    assert config.slack_webhook is None


def test_custom() -> None:
    config = Config.from_file(config_path("custom"))
    assert config.name == "Provisioning"
    assert config.hosts.group == "example.com"
    assert config.hosts.api_version == "example.com/v1"
    assert config.hosts.kind == "Machine"
    assert config.log_level == LogLevel.INFO
    assert config.profile == Profile.production


def test_defaults() -> None:
    config = Config()
    assert config.event_component == "imageauth"
    assert config.hosts.plural == "baremetalhosts"
    assert config.hosts.kind == "BareMetalHost"


def test_slack_webhook(monkeypatch: pytest.MonkeyPatch) -> None:
    webhook = "https://slack.example.com/webhook"
    monkeypatch.setenv("IMAGEAUTH_SLACK_WEBHOOK", webhook)
    config = Config.from_file(config_path("standard"))
    assert config.slack_webhook
    assert config.slack_webhook.get_secret_value() == webhook


def test_unknown_setting() -> None:
    with pytest.raises(ValidationError):
        Config.model_validate({"unknownSetting": True})
