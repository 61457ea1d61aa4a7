"""Registry of decoders keyed by content type, and request dispatch."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from bodydecode.config.models import DecoderConfig
from bodydecode.decoders import (
    FormDecoder,
    JSONDecoder,
    MultipartFormDecoder,
    XMLDecoder,
)
from bodydecode.exceptions import UnsupportedContentTypeError
from bodydecode.mediatype import (
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_MULTIPART_FORM,
    CONTENT_TYPE_XML,
    content_type_of,
    normalize,
)

if TYPE_CHECKING:
    from bodydecode.request import RequestProtocol

logger = logging.getLogger(__name__)

Decoder = Callable[["RequestProtocol", Any], None]


@runtime_checkable
class Validatable(Protocol):
    """A target that checks itself after decoding.

    ``validate()`` raises (normally :class:`~bodydecode.exceptions.ValidationError`)
    to reject the decoded value. Only a callable ``validate`` defined on the
    target's class is called.
    """

    def validate(self) -> Any: ...


class Decoders:
    """Mapping from content type to decoder.

    Keys are normalized media types: lowercase, without parameters. Access
    to the mapping is serialized by a lock, so decoders may be registered
    while other threads dispatch.
    """

    def __init__(self) -> None:
        self._decoders: dict[str, Decoder] = {}
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.content_types()!r})"

    def __contains__(self, content_type: object) -> bool:
        return isinstance(content_type, str) and self.lookup(content_type) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._decoders)

    def register(self, content_type: str, decoder: Decoder) -> None:
        """Register a decoder, replacing any previous one for the content type.

        Args:
            content_type: Media type, parameters and case are ignored
                (e.g., ``"application/json; charset=utf-8"``)
            decoder: Callable taking ``(request, target)``

        Example:
            decoders.register("application/json", JSONDecoder(replay_body=False))
        """
        key = normalize(content_type)
        with self._lock:
            self._decoders[key] = decoder
        logger.debug(f"Registered decoder for {key}: {decoder!r}")

    def lookup(self, content_type: str) -> Decoder | None:
        """Return the decoder registered for ``content_type``, if any."""
        key = normalize(content_type)
        with self._lock:
            return self._decoders.get(key)

    def content_types(self) -> list[str]:
        """List all registered content types.

        Returns:
            Sorted list of normalized media types
        """
        with self._lock:
            return sorted(self._decoders)

    def decode(self, request: RequestProtocol, target: Any) -> None:
        """Decode the body of ``request`` into ``target``.

        The decoder is chosen by the exact media type of the Content-Type
        header. Errors raised by the decoder or by ``target.validate()`` are
        propagated unchanged; fields set before a failure stay set.

        Args:
            request: Request with ``headers`` and a readable ``body``
            target: Value populated in place

        Raises:
            MalformedContentTypeError: If the header is missing or invalid
            UnsupportedContentTypeError: If no decoder handles the content type
            DecodeError: If the body cannot be decoded into the target
            ValidationError: If the target rejects the decoded value
        """
        content_type = content_type_of(request)
        decoder = self.lookup(content_type)
        if decoder is None:
            raise UnsupportedContentTypeError(content_type)

        logger.debug(f"Decoding {content_type} body into {type(target).__name__}")
        decoder(request, target)

        # Looked up on the type: a data field named "validate" is not a hook
        if callable(getattr(type(target), "validate", None)):
            target.validate()


def new(config: DecoderConfig | None = None) -> Decoders:
    """Create a registry with the built-in decoders.

    Args:
        config: Settings for the built-in decoders, defaults when omitted

    Returns:
        New independent Decoders instance
    """
    if config is None:
        config = DecoderConfig()

    decoders = Decoders()
    decoders.register(
        CONTENT_TYPE_FORM,
        FormDecoder(
            ignore_unknown_keys=config.ignore_unknown_keys,
            body_limit=config.body_limit,
        ),
    )
    decoders.register(
        CONTENT_TYPE_MULTIPART_FORM,
        MultipartFormDecoder(
            max_memory=config.max_memory,
            ignore_unknown_keys=config.ignore_unknown_keys,
            body_limit=config.body_limit,
        ),
    )
    decoders.register(
        CONTENT_TYPE_JSON,
        JSONDecoder(
            replay_body=config.replay_body,
            ignore_unknown_keys=config.ignore_unknown_keys,
            body_limit=config.body_limit,
        ),
    )
    decoders.register(
        CONTENT_TYPE_XML,
        XMLDecoder(replay_body=config.replay_body, body_limit=config.body_limit),
    )
    return decoders


# Default registry, built at import time
_default_decoders: Decoders = new()


def default_decoders() -> Decoders:
    return _default_decoders


def reset_default(config: DecoderConfig | None = None) -> Decoders:
    """Rebuild the default registry (useful for testing)."""
    global _default_decoders
    _default_decoders = new(config)
    return _default_decoders


def register(content_type: str, decoder: Decoder) -> None:
    """Register a decoder on the default registry."""
    _default_decoders.register(content_type, decoder)


def lookup(content_type: str) -> Decoder | None:
    """Look up a decoder on the default registry."""
    return _default_decoders.lookup(content_type)


def decode(request: RequestProtocol, target: Any) -> None:
    """Decode ``request`` into ``target`` with the default registry."""
    _default_decoders.decode(request, target)
