"""Decoder for application/x-www-form-urlencoded bodies."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from functools import partial
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl

from bodydecode.binding import bind_values
from bodydecode.decoders.base import DEFAULT_BODY_LIMIT, read_body, snippet
from bodydecode.exceptions import InvalidFormError
from bodydecode.mediatype import CONTENT_TYPE_FORM, content_type_params

if TYPE_CHECKING:
    from bodydecode.request import RequestProtocol

logger = logging.getLogger(__name__)

# Binds parsed form values (key -> list of strings) onto a target
FormBinder = Callable[[Any, Mapping[str, Sequence[str]]], Any]

# A '%' not followed by two hex digits
_BAD_ESCAPE = re.compile(rb"%(?![0-9A-Fa-f]{2})")


def form_binder(ignore_unknown_keys: bool = True) -> FormBinder:
    """Return the default binder: :func:`bind_values` on ``form`` tags."""
    return partial(bind_values, namespace="form", ignore_unknown=ignore_unknown_keys)


def parse_form(data: bytes, charset: str = "utf-8") -> dict[str, list[str]]:
    """Parse an urlencoded body into a multi-valued mapping.

    Blank values and keys without ``=`` are kept as empty strings. Pairs are
    separated by ``&`` only.

    Raises:
        InvalidFormError: On invalid percent escapes, ``;`` separators or
            undecodable bytes
    """
    match = _BAD_ESCAPE.search(data)
    if match is not None:
        raise InvalidFormError(
            f"invalid percent escape at offset {match.start()}",
            body_snippet=snippet(data),
        )

    offset = data.find(b";")
    if offset != -1:
        raise InvalidFormError(
            f"invalid semicolon separator at offset {offset}",
            body_snippet=snippet(data),
        )

    try:
        text = data.decode(charset)
        pairs = parse_qsl(text, keep_blank_values=True, encoding=charset, errors="strict")
    except (UnicodeDecodeError, LookupError) as e:
        raise InvalidFormError(str(e), body_snippet=snippet(data), cause=e) from e

    values: dict[str, list[str]] = {}
    for key, value in pairs:
        values.setdefault(key, []).append(value)
    return values


class FormDecoder:
    """Bind an urlencoded body onto the target's ``form`` fields.

    Unknown keys are ignored unless ``ignore_unknown_keys`` is False. A custom
    ``binder`` replaces field binding altogether; it is called with the
    target and the parsed values. The body stream is consumed.
    """

    content_type = CONTENT_TYPE_FORM

    def __init__(
        self,
        ignore_unknown_keys: bool = True,
        body_limit: int = DEFAULT_BODY_LIMIT,
        binder: FormBinder | None = None,
    ):
        self.ignore_unknown_keys = ignore_unknown_keys
        self.body_limit = body_limit
        self.binder = binder or form_binder(ignore_unknown_keys)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(body_limit={self.body_limit})"

    def __call__(self, request: RequestProtocol, target: Any) -> None:
        _, params = content_type_params(request)
        data = read_body(request, self.body_limit, self.content_type)
        values = parse_form(data, params.get("charset", "utf-8"))
        logger.debug(f"Parsed {len(values)} form fields")
        self.binder(target, values)
