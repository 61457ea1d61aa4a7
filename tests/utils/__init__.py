"""Shared test models and request builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bodydecode import Request, ValidationError, field

BOUNDARY = "----WebKitFormBoundary"


@dataclass
class User:
    """Target with the three tag namespaces side by side."""

    username: str = field("", form="username", json="username", xml="username")
    password: str = field("", form="password", json="password", xml="password")


@dataclass
class ValidatedUser(User):
    """User that rejects an empty username and counts validate() calls."""

    validate_calls: int = field(0, form="-", json="-", xml="-")

    def validate(self) -> None:
        self.validate_calls += 1
        if not self.username:
            raise ValidationError("username is required", field="username")


class RecordingDecoder:
    """Decoder stub that records its calls and sets ``target.decoded_by``."""

    def __init__(self, name: str = "recording"):
        self.name = name
        self.calls: list[tuple[Any, Any]] = []

    def __call__(self, request: Any, target: Any) -> None:
        self.calls.append((request, target))
        target.decoded_by = self.name


def make_request(content_type: str | None, body: bytes = b"") -> Request:
    headers = {} if content_type is None else {"Content-Type": content_type}
    return Request(headers, body)


def multipart_body(
    fields: dict[str, str],
    files: dict[str, tuple[str, bytes]] | None = None,
    boundary: str = BOUNDARY,
) -> bytes:
    """Build a multipart/form-data body from value fields and file parts."""
    parts = []
    for name, value in fields.items():
        parts.append(
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"\r\n'
            f"\r\n".encode()
            + value.encode()
            + b"\r\n"
        )
    for name, (filename, content) in (files or {}).items():
        parts.append(
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
            f"Content-Type: application/octet-stream\r\n"
            f"\r\n".encode()
            + content
            + b"\r\n"
        )
    return b"".join(parts) + f"--{boundary}--\r\n".encode()
