"""Tests for the command line interface."""

from __future__ import annotations

import json

import pytest
import yaml
from click.testing import CliRunner

from bodydecode.cli import main
from tests.utils import BOUNDARY, multipart_body


@pytest.fixture
def runner():
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def valid_config_file(tmp_path):
    """Create a valid config file."""
    path = tmp_path / "bodydecode.yaml"
    path.write_text(yaml.dump({"max_memory": 1024, "body_limit": 4096}))
    return str(path)


@pytest.fixture
def invalid_config_file(tmp_path):
    """Create an invalid config file."""
    path = tmp_path / "invalid.yaml"
    path.write_text(yaml.dump({"max_memory": -1, "engine": "On"}))
    return str(path)


# ============================================================================
# validate
# ============================================================================


def test_validate_valid_config(runner, valid_config_file):
    """Test validation of valid config file."""
    result = runner.invoke(main, ["validate", valid_config_file])

    assert result.exit_code == 0
    assert "Configuration is valid" in result.output
    assert "max_memory: 1024" in result.output
    assert "body_limit: 4096" in result.output


def test_validate_invalid_config(runner, invalid_config_file):
    """Test validation of invalid config file."""
    result = runner.invoke(main, ["validate", invalid_config_file])

    assert result.exit_code == 1
    assert "Configuration is invalid" in result.output
    assert "Unknown key: engine" in result.output


def test_validate_nonexistent_file(runner, tmp_path):
    """Test validation of nonexistent file."""
    result = runner.invoke(main, ["validate", str(tmp_path / "nonexistent.yaml")])

    assert result.exit_code == 1
    assert "Configuration file not found" in result.output


# ============================================================================
# decode
# ============================================================================


def test_decode_json_from_stdin(runner):
    result = runner.invoke(
        main,
        ["decode", "-t", "application/json"],
        input='{"username": "foo", "tags": [1, 2]}',
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == {"username": "foo", "tags": [1, 2]}


def test_decode_form_from_file(runner, tmp_path):
    body = tmp_path / "body.txt"
    body.write_bytes(b"a=1&b=2&b=3")

    result = runner.invoke(
        main, ["decode", "--content-type", "application/x-www-form-urlencoded", str(body)]
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == {"a": "1", "b": ["2", "3"]}


def test_decode_xml(runner):
    result = runner.invoke(
        main,
        ["decode", "-t", "application/xml"],
        input="<user><name>Ada</name></user>",
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == {"name": "Ada"}


def test_decode_multipart(runner):
    body = multipart_body({"title": "notes"}, files={"doc": ("a.txt", b"hello")})

    result = runner.invoke(
        main,
        ["decode", "-t", f"multipart/form-data; boundary={BOUNDARY}"],
        input=body,
    )

    assert result.exit_code == 0
    assert '"title": "notes"' in result.output
    assert "file doc: b'a.txt' (5 bytes)" in result.output


def test_decode_unsupported_content_type(runner):
    result = runner.invoke(main, ["decode", "-t", "text/csv"], input="a,b")

    assert result.exit_code == 1
    assert "Unsupported content type: text/csv" in result.output


def test_decode_malformed_content_type(runner):
    result = runner.invoke(main, ["decode", "-t", "json"], input="{}")

    assert result.exit_code == 1
    assert "Malformed Content-Type header" in result.output


def test_decode_invalid_body(runner):
    result = runner.invoke(main, ["decode", "-t", "application/json"], input="{")

    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_decode_with_config(runner, tmp_path):
    config = tmp_path / "bodydecode.yaml"
    config.write_text("body_limit: 4\n")

    result = runner.invoke(
        main,
        ["decode", "-t", "application/json", "-c", str(config)],
        input='{"username": "foo"}',
    )

    assert result.exit_code == 1
    assert "Request body too large" in result.output


def test_decode_requires_content_type(runner):
    result = runner.invoke(main, ["decode"], input="{}")

    assert result.exit_code == 2
