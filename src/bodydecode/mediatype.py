"""Content-Type header parsing.

Media types follow RFC 2045/7231: ``type "/" subtype *( ";" name "=" value )``
where type, subtype and parameter names are tokens and values are tokens
or quoted strings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bodydecode.exceptions import MalformedContentTypeError

if TYPE_CHECKING:
    from bodydecode.request import RequestProtocol

CONTENT_TYPE = "Content-Type"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE_MULTIPART_FORM = "multipart/form-data"
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_XML = "application/xml"

_TSPECIALS = frozenset('()<>@,;:\\"/[]?=')


def _is_token_char(char: str) -> bool:
    return 0x20 < ord(char) < 0x7F and char not in _TSPECIALS


def _consume_token(text: str) -> tuple[str, str]:
    index = 0
    while index < len(text) and _is_token_char(text[index]):
        index += 1
    return text[:index], text[index:]


def _consume_value(text: str) -> tuple[str | None, str]:
    """Consume a token or a quoted string, returning ``None`` on failure."""
    if not text.startswith('"'):
        token, rest = _consume_token(text)
        return (token or None), rest

    chars: list[str] = []
    index = 1
    while index < len(text):
        char = text[index]
        if char == '"':
            return "".join(chars), text[index + 1 :]
        if char == "\\" and index + 1 < len(text):
            index += 1
            char = text[index]
        elif char in "\r\n":
            break
        chars.append(char)
        index += 1
    # Unterminated quoted string
    return None, text


def parse_media_type(value: str | None) -> tuple[str, dict[str, str]]:
    """Parse a Content-Type header value.

    Args:
        value: Raw header value, e.g. ``"text/html; charset=UTF-8"``

    Returns:
        Tuple of the lowercase ``type/subtype`` and a dict mapping lowercase
        parameter names to their (unquoted) values

    Raises:
        MalformedContentTypeError: If the value is missing, empty or does not
            follow the media type grammar
    """
    if value is None or not value.strip():
        raise MalformedContentTypeError(value)

    base, sep, rest = value.partition(";")
    main, after = _consume_token(base.strip())
    if not main:
        raise MalformedContentTypeError(value, "no media type")
    if not after.startswith("/"):
        raise MalformedContentTypeError(value, "expected slash after first token")
    subtype, after = _consume_token(after[1:])
    if not subtype:
        raise MalformedContentTypeError(value, "expected token after slash")
    if after:
        raise MalformedContentTypeError(value, "unexpected content after media subtype")

    params: dict[str, str] = {}
    remaining = sep + rest
    while True:
        remaining = remaining.lstrip()
        if not remaining:
            break
        if not remaining.startswith(";"):
            raise MalformedContentTypeError(value, "expected ';' between parameters")
        remaining = remaining[1:].lstrip()
        if not remaining:
            # trailing semicolon
            break
        name, remaining = _consume_token(remaining)
        if not name:
            raise MalformedContentTypeError(value, "invalid parameter name")
        remaining = remaining.lstrip()
        if not remaining.startswith("="):
            raise MalformedContentTypeError(value, f"missing value for parameter {name!r}")
        param_value, remaining = _consume_value(remaining[1:].lstrip())
        if param_value is None:
            raise MalformedContentTypeError(value, f"invalid value for parameter {name!r}")
        name = name.lower()
        if name in params:
            raise MalformedContentTypeError(value, f"duplicate parameter {name!r}")
        params[name] = param_value

    return f"{main}/{subtype}".lower(), params


def normalize(content_type: str) -> str:
    """Return the registry key for a content type string.

    Strings that are not valid media types are only stripped and lowercased.
    """
    try:
        media_type, _ = parse_media_type(content_type)
    except MalformedContentTypeError:
        return content_type.strip().lower()
    return media_type


def content_type_params(request: RequestProtocol) -> tuple[str, dict[str, str]]:
    """Parse the request's Content-Type header into media type and parameters."""
    return parse_media_type(request.headers.get(CONTENT_TYPE))


def content_type_of(request: RequestProtocol) -> str:
    """Return the request's media type, the exact key used for decoder lookup."""
    media_type, _ = content_type_params(request)
    return media_type
