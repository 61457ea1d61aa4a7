"""Configuration data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any

from bodydecode.decoders.base import DEFAULT_BODY_LIMIT, DEFAULT_MAX_MEMORY
from bodydecode.exceptions import ConfigValidationError


@dataclass
class DecoderConfig:
    """Settings applied to the built-in decoders of a registry."""

    # In-memory threshold for multipart file parts (bytes)
    max_memory: int = DEFAULT_MAX_MEMORY

    # Maximum request body size (bytes), 0 disables the check
    body_limit: int = DEFAULT_BODY_LIMIT

    # Keep JSON/XML bodies readable after decoding
    replay_body: bool = True

    # Ignore payload keys that match no target field
    ignore_unknown_keys: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DecoderConfig:
        """Build a config from a plain dict.

        Raises:
            ConfigValidationError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                "Unknown configuration keys",
                errors=[f"Unknown key: {key}" for key in unknown],
                field=unknown[0],
            )

        config = cls(**data)
        errors = config.validate()
        if errors:
            raise ConfigValidationError("Invalid configuration", errors=errors)
        return config

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def validate(self) -> list[str]:
        """Return a list of problems, empty when the config is valid."""
        errors = []
        for name in ("max_memory", "body_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"{name} must be an integer, got {value!r}")
            elif value < 0:
                errors.append(f"{name} must not be negative, got {value}")
        for name in ("replay_body", "ignore_unknown_keys"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                errors.append(f"{name} must be a boolean, got {value!r}")
        return errors
