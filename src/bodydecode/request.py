"""Request abstraction consumed by the decoders.

Decoders only need a ``headers`` mapping with case-insensitive ``get`` and a
readable ``body`` stream. :class:`Request` provides both, plus constructors
for WSGI environs and Starlette requests.
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol

from starlette.datastructures import Headers

if TYPE_CHECKING:
    from python_multipart.multipart import File
    from starlette.requests import Request as StarletteRequest


class RequestProtocol(Protocol):
    """Protocol defining the minimal request interface needed by decoders."""

    headers: Any  # Mapping with case-insensitive get()
    body: BinaryIO


class Request:
    """An HTTP request as seen by the decoders.

    Args:
        headers: Header mapping or list of ``(name, value)`` pairs
        body: Raw body bytes or a binary stream
    """

    def __init__(
        self,
        headers: Mapping[str, str] | list[tuple[str, str]] | None = None,
        body: bytes | BinaryIO = b"",
    ):
        if isinstance(headers, Headers):
            self.headers = headers
        elif isinstance(headers, Mapping):
            self.headers = Headers(headers=dict(headers))
        else:
            self.headers = Headers(
                raw=[
                    (name.lower().encode("latin-1"), value.encode("latin-1"))
                    for name, value in headers or []
                ]
            )
        if isinstance(body, (bytes, bytearray)):
            body = io.BytesIO(bytes(body))
        self.body: BinaryIO = body
        # Filled by the multipart decoder
        self.files: dict[str, list[File]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(content_type={self.headers.get('content-type')!r})"

    @property
    def content_length(self) -> int | None:
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> Request:
        """Build a request from a WSGI environ dict."""
        headers: dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                header_name = key[5:].replace("_", "-").title()
                headers[header_name] = value

        # CONTENT_TYPE and CONTENT_LENGTH are not prefixed with HTTP_
        if environ.get("CONTENT_TYPE"):
            headers["Content-Type"] = environ["CONTENT_TYPE"]
        if environ.get("CONTENT_LENGTH"):
            headers["Content-Length"] = environ["CONTENT_LENGTH"]

        body = environ.get("wsgi.input") or io.BytesIO()
        return cls(headers, body)

    @classmethod
    async def from_starlette(cls, request: StarletteRequest) -> Request:
        """Build a request from a Starlette request, reading its whole body."""
        body = await request.body()
        return cls(request.headers, body)
