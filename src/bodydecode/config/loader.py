"""Configuration loading from YAML/JSON files and the environment."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from bodydecode.config.models import DecoderConfig
from bodydecode.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    ConfigValidationError,
    EnvironmentVariableError,
)

logger = logging.getLogger(__name__)

# ${VAR} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

ENV_PREFIX = "BODYDECODE_"
_ENV_OVERRIDES = {
    "MAX_MEMORY": ("max_memory", int),
    "BODY_LIMIT": ("body_limit", int),
}


class ConfigLoader:
    """Load a :class:`DecoderConfig` from a file.

    Args:
        env_vars: Environment used for ``${VAR}`` substitution, defaults to
            ``os.environ``
    """

    def __init__(self, env_vars: dict[str, str] | None = None):
        self.env_vars = dict(os.environ) if env_vars is None else env_vars

    def _substitute_env_vars(self, text: str) -> str:
        def replace(match: re.Match[str]) -> str:
            name, default = match.group(1), match.group(2)
            if name in self.env_vars:
                return self.env_vars[name]
            if default is not None:
                return default
            raise EnvironmentVariableError(name)

        return _ENV_PATTERN.sub(replace, text)

    def load_file(self, path: str | Path) -> DecoderConfig:
        """Load a YAML (``.yaml``/``.yml``) or JSON file.

        Raises:
            ConfigFileNotFoundError: If the file does not exist
            ConfigurationError: If the file cannot be parsed
            ConfigValidationError: If the values are invalid
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigFileNotFoundError(str(path))

        text = self._substitute_env_vars(path.read_text(encoding="utf-8"))
        data = self._parse(text, path)
        logger.debug(f"Loaded configuration from {path}")
        return DecoderConfig.from_dict(data)

    def _parse(self, text: str, path: Path) -> dict[str, Any]:
        try:
            if path.suffix == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Cannot parse configuration file: {path}",
                context={"file_path": str(path)},
                cause=e,
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigValidationError(
                "Configuration root must be a mapping",
                errors=[f"Got {type(data).__name__}"],
            )
        return data

    def load_env(self) -> DecoderConfig:
        """Build a config from defaults and ``BODYDECODE_*`` variables."""
        data: dict[str, Any] = {}
        for suffix, (name, convert) in _ENV_OVERRIDES.items():
            variable = ENV_PREFIX + suffix
            if variable not in self.env_vars:
                continue
            try:
                data[name] = convert(self.env_vars[variable])
            except ValueError as e:
                raise ConfigValidationError(
                    f"Invalid value for {variable}",
                    errors=[str(e)],
                    field=name,
                    cause=e,
                ) from e
        return DecoderConfig.from_dict(data)


def load_config(
    path: str | Path | None = None, env_vars: dict[str, str] | None = None
) -> DecoderConfig:
    """Load configuration from ``path``, or from the environment when omitted."""
    loader = ConfigLoader(env_vars=env_vars)
    if path is None:
        return loader.load_env()
    return loader.load_file(path)
