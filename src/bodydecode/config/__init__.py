"""Configuration for bodydecode registries."""

from __future__ import annotations

from bodydecode.config.loader import ConfigLoader, load_config
from bodydecode.config.models import DecoderConfig

__all__ = ["ConfigLoader", "DecoderConfig", "load_config"]
