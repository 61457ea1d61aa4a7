"""Tests for configuration data models."""

from __future__ import annotations

import pytest

from bodydecode.config.models import DecoderConfig
from bodydecode.exceptions import ConfigValidationError


def test_decoder_config_defaults():
    """Test DecoderConfig default values."""
    config = DecoderConfig()
    assert config.max_memory == 10 * 1024 * 1024
    assert config.body_limit == 32 * 1024 * 1024
    assert config.replay_body is True
    assert config.ignore_unknown_keys is True


def test_decoder_config_from_dict():
    config = DecoderConfig.from_dict(
        {"max_memory": 1024, "body_limit": 0, "replay_body": False}
    )
    assert config.max_memory == 1024
    assert config.body_limit == 0
    assert config.replay_body is False
    assert config.ignore_unknown_keys is True


def test_decoder_config_from_empty_dict():
    assert DecoderConfig.from_dict({}) == DecoderConfig()


def test_decoder_config_to_dict():
    config = DecoderConfig(max_memory=1, body_limit=2)
    assert config.to_dict() == {
        "max_memory": 1,
        "body_limit": 2,
        "replay_body": True,
        "ignore_unknown_keys": True,
    }


def test_decoder_config_from_dict_unknown_keys():
    with pytest.raises(ConfigValidationError) as exc_info:
        DecoderConfig.from_dict({"max_memory": 1, "engine": "On", "bogus": 1})

    assert exc_info.value.errors == ["Unknown key: bogus", "Unknown key: engine"]
    assert exc_info.value.context["field"] == "bogus"


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"max_memory": -1}, "max_memory must not be negative"),
        ({"body_limit": "big"}, "body_limit must be an integer"),
        ({"max_memory": True}, "max_memory must be an integer"),
        ({"replay_body": "yes"}, "replay_body must be a boolean"),
        ({"ignore_unknown_keys": 1}, "ignore_unknown_keys must be a boolean"),
    ],
)
def test_decoder_config_from_dict_invalid_values(data, message):
    with pytest.raises(ConfigValidationError) as exc_info:
        DecoderConfig.from_dict(data)

    assert exc_info.value.message == "Invalid configuration"
    assert any(error.startswith(message) for error in exc_info.value.errors)


def test_decoder_config_validate_collects_all_errors():
    config = DecoderConfig(max_memory=-1, body_limit=-1)
    assert len(config.validate()) == 2


def test_decoder_config_validate_valid():
    assert DecoderConfig().validate() == []
