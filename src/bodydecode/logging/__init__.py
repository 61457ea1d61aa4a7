"""Error logging and formatting helpers for bodydecode."""

from __future__ import annotations

from bodydecode.logging.error_logger import log_decode_error, log_error
from bodydecode.logging.formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "log_decode_error",
    "log_error",
]
