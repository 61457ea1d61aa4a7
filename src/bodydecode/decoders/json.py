"""Decoder for application/json bodies."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from bodydecode.binding import bind_object
from bodydecode.decoders.base import DEFAULT_BODY_LIMIT, read_body, replay_body, snippet
from bodydecode.exceptions import InvalidJSONError
from bodydecode.mediatype import CONTENT_TYPE_JSON

if TYPE_CHECKING:
    from bodydecode.request import RequestProtocol

logger = logging.getLogger(__name__)


class JSONDecoder:
    """Deserialize a JSON body and bind it onto the target's ``json`` fields.

    With ``replay_body`` (the default) the consumed body stream is replaced by
    a new stream over the same bytes, so it can be read again downstream.
    """

    content_type = CONTENT_TYPE_JSON

    def __init__(
        self,
        replay_body: bool = True,
        ignore_unknown_keys: bool = True,
        body_limit: int = DEFAULT_BODY_LIMIT,
    ):
        self.replay_body = replay_body
        self.ignore_unknown_keys = ignore_unknown_keys
        self.body_limit = body_limit

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(replay_body={self.replay_body})"

    def __call__(self, request: RequestProtocol, target: Any) -> None:
        data = read_body(request, self.body_limit, self.content_type)
        if self.replay_body:
            replay_body(request, data)
        bind_object(target, self.loads(data), "json", self.ignore_unknown_keys)

    @staticmethod
    def loads(data: bytes) -> Any:
        """Parse a JSON document.

        Raises:
            InvalidJSONError: If the body is not UTF-8 or not valid JSON
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidJSONError(
                f"Invalid UTF-8 encoding: {e}", body_snippet=snippet(data), cause=e
            ) from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            logger.debug(f"Rejected JSON body: {e}")
            raise InvalidJSONError(
                f"{e.msg} at line {e.lineno} column {e.colno}",
                body_snippet=snippet(data),
                cause=e,
            ) from e
