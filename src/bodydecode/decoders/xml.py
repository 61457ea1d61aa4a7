"""Decoder for application/xml bodies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree

from bodydecode.binding import bind_element
from bodydecode.decoders.base import DEFAULT_BODY_LIMIT, read_body, replay_body, snippet
from bodydecode.exceptions import InvalidXMLError
from bodydecode.mediatype import CONTENT_TYPE_XML

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from bodydecode.request import RequestProtocol

logger = logging.getLogger(__name__)


class DoctypeForbiddenError(Exception):
    """Raised by the tree builder when the document declares a DTD."""


class _TreeBuilder(ElementTree.TreeBuilder):
    # Entity declarations allow expansion attacks
    def doctype(self, name: str, pubid: str | None, system: str | None) -> None:
        raise DoctypeForbiddenError(name)


class XMLDecoder:
    """Parse an XML body and bind the root's children onto ``xml`` fields.

    The root element's name is not checked. Body replay works as for
    :class:`~bodydecode.decoders.json.JSONDecoder`.
    """

    content_type = CONTENT_TYPE_XML

    def __init__(self, replay_body: bool = True, body_limit: int = DEFAULT_BODY_LIMIT):
        self.replay_body = replay_body
        self.body_limit = body_limit

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(replay_body={self.replay_body})"

    def __call__(self, request: RequestProtocol, target: Any) -> None:
        data = read_body(request, self.body_limit, self.content_type)
        if self.replay_body:
            replay_body(request, data)
        bind_element(target, self.parse(data), "xml")

    @staticmethod
    def parse(data: bytes) -> Element:
        """Parse an XML document into its root element.

        Raises:
            InvalidXMLError: On malformed XML or a DOCTYPE declaration
        """
        parser = ElementTree.XMLParser(target=_TreeBuilder())
        try:
            parser.feed(data)
            return parser.close()
        except DoctypeForbiddenError as e:
            raise InvalidXMLError(
                "DTD declarations are not allowed", body_snippet=snippet(data), cause=e
            ) from e
        except ElementTree.ParseError as e:
            logger.debug(f"Rejected XML body: {e}")
            raise InvalidXMLError(str(e), body_snippet=snippet(data), cause=e) from e
