"""Tests for configuration loader."""

from __future__ import annotations

import json

import pytest
import yaml

from bodydecode.config.loader import ConfigLoader, load_config
from bodydecode.config.models import DecoderConfig
from bodydecode.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    ConfigValidationError,
    EnvironmentVariableError,
)


def test_config_loader_initialization():
    """Test ConfigLoader initialization."""
    loader = ConfigLoader()
    assert loader.env_vars is not None


def test_config_loader_with_custom_env():
    """Test ConfigLoader with custom environment variables."""
    env_vars = {"TEST_VAR": "test_value"}
    loader = ConfigLoader(env_vars=env_vars)
    assert loader.env_vars == env_vars


def test_substitute_env_vars():
    loader = ConfigLoader(env_vars={"LIMIT": "1024"})

    assert loader._substitute_env_vars("body_limit: ${LIMIT}") == "body_limit: 1024"
    assert (
        loader._substitute_env_vars("max_memory: ${MISSING:-2048}")
        == "max_memory: 2048"
    )
    assert loader._substitute_env_vars("x: ${LIMIT:-1}") == "x: 1024"


def test_substitute_env_vars_missing():
    loader = ConfigLoader(env_vars={})

    with pytest.raises(EnvironmentVariableError, match="MISSING"):
        loader._substitute_env_vars("body_limit: ${MISSING}")


def test_load_yaml_file(tmp_path):
    path = tmp_path / "bodydecode.yaml"
    path.write_text(yaml.dump({"max_memory": 4096, "replay_body": False}))

    config = ConfigLoader().load_file(path)

    assert config.max_memory == 4096
    assert config.replay_body is False


def test_load_yaml_file_with_env_substitution(tmp_path):
    path = tmp_path / "bodydecode.yml"
    path.write_text("body_limit: ${BODY_LIMIT:-1000}\nmax_memory: ${MAX_MEMORY}\n")

    config = ConfigLoader(env_vars={"MAX_MEMORY": "512"}).load_file(path)

    assert config.body_limit == 1000
    assert config.max_memory == 512


def test_load_json_file(tmp_path):
    path = tmp_path / "bodydecode.json"
    path.write_text(json.dumps({"body_limit": 0, "ignore_unknown_keys": False}))

    config = load_config(path)

    assert config.body_limit == 0
    assert config.ignore_unknown_keys is False


def test_load_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(path) == DecoderConfig()


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigFileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_unparseable_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(ConfigurationError, match="Cannot parse"):
        load_config(path)


def test_load_non_mapping_root(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ConfigValidationError, match="must be a mapping"):
        load_config(path)


def test_load_invalid_values(tmp_path):
    path = tmp_path / "invalid.yaml"
    path.write_text("max_memory: -5\n")

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_load_env():
    config = load_config(
        env_vars={"BODYDECODE_MAX_MEMORY": "100", "BODYDECODE_BODY_LIMIT": "200"}
    )
    assert config.max_memory == 100
    assert config.body_limit == 200


def test_load_env_defaults():
    assert load_config(env_vars={}) == DecoderConfig()


def test_load_env_invalid_integer():
    with pytest.raises(ConfigValidationError) as exc_info:
        load_config(env_vars={"BODYDECODE_BODY_LIMIT": "lots"})
    assert exc_info.value.context["field"] == "body_limit"
