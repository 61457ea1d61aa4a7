"""Structured error logging for callers of the dispatcher.

The dispatcher never logs failures itself; applications call these helpers
where they handle the raised errors.
"""

from __future__ import annotations

import logging
from typing import Any

from bodydecode.exceptions import BodyDecodeError, DecodeError

logger = logging.getLogger("bodydecode.errors")


def _structured(error: BaseException, extra: dict[str, Any]) -> dict[str, Any]:
    if isinstance(error, BodyDecodeError):
        data = error.to_dict()
    else:
        data = {"error_type": type(error).__name__, "message": str(error)}
    data.update(extra)
    return data


def log_error(
    error: BaseException, level: int = logging.ERROR, **extra: Any
) -> None:
    """Log an error with its structured data attached to the record.

    Args:
        error: Exception to log
        level: Logging level
        **extra: Additional fields merged into ``structured_data``
    """
    data = _structured(error, extra)
    if isinstance(error, BodyDecodeError):
        message = str(error)
    else:
        message = f"{type(error).__name__}: {error}"
    logger.log(level, message, extra={"structured_data": data})


def log_decode_error(
    error: DecodeError, content_type: str | None = None, **extra: Any
) -> None:
    """Log a body decoding failure at WARNING level.

    Decoding failures are caused by the client, not the server.
    """
    if content_type is not None:
        extra["content_type"] = content_type
    log_error(error, level=logging.WARNING, **extra)
