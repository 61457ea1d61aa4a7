"""Shared pieces of the built-in decoders."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any, Protocol

from bodydecode.exceptions import BodySizeLimitError

if TYPE_CHECKING:
    from bodydecode.request import RequestProtocol

# Default in-memory threshold for multipart bodies (10 MiB)
DEFAULT_MAX_MEMORY = 10 * 1024 * 1024

# Default maximum body size (32 MiB), 0 disables the check
DEFAULT_BODY_LIMIT = 32 * 1024 * 1024


class DecoderProtocol(Protocol):
    """A decoder populates ``target`` from the body of ``request``.

    Decoders signal failure by raising, normally a
    :class:`~bodydecode.exceptions.DecodeError`.
    """

    def __call__(self, request: RequestProtocol, target: Any) -> None: ...


def read_body(
    request: RequestProtocol, limit: int = 0, content_type: str | None = None
) -> bytes:
    """Read the whole request body, enforcing ``limit`` when non-zero.

    A declared Content-Length bounds the read so WSGI input streams are not
    read past the end of the request.

    Raises:
        BodySizeLimitError: If the body is larger than ``limit``
    """
    length = getattr(request, "content_length", None)
    if limit and length is not None and length > limit:
        raise BodySizeLimitError(length, limit, content_type=content_type)

    if length is not None:
        data = request.body.read(length)
    elif limit:
        data = request.body.read(limit + 1)
    else:
        data = request.body.read()

    if limit and len(data) > limit:
        raise BodySizeLimitError(len(data), limit, content_type=content_type)
    return data


def replay_body(request: RequestProtocol, data: bytes) -> None:
    """Replace the consumed body stream with a fresh one over ``data``."""
    request.body = io.BytesIO(data)


def snippet(data: bytes, size: int = 100) -> str:
    return data[:size].decode("utf-8", errors="replace")
