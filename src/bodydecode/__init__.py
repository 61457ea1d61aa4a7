"""Decode HTTP request bodies into Python objects by content type.

Usage:
    from dataclasses import dataclass

    import bodydecode

    @dataclass
    class Login:
        username: str = ""
        password: str = ""

    login = Login()
    bodydecode.decode(request, login)

    # Isolated registry with a custom decoder
    decoders = bodydecode.new()
    decoders.register("text/csv", decode_csv)
"""

from __future__ import annotations

from bodydecode.binding import field
from bodydecode.decoders import (
    FormDecoder,
    JSONDecoder,
    MultipartFormDecoder,
    XMLDecoder,
)
from bodydecode.exceptions import (
    BindingError,
    BodyDecodeError,
    BodySizeLimitError,
    DecodeError,
    InvalidFormError,
    InvalidJSONError,
    InvalidMultipartError,
    InvalidXMLError,
    MalformedContentTypeError,
    UnsupportedContentTypeError,
    ValidationError,
)
from bodydecode.mediatype import (
    CONTENT_TYPE,
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_MULTIPART_FORM,
    CONTENT_TYPE_XML,
    parse_media_type,
)
from bodydecode.registry import (
    Decoder,
    Decoders,
    Validatable,
    decode,
    lookup,
    new,
    register,
)
from bodydecode.request import Request

__all__ = [
    "CONTENT_TYPE",
    "CONTENT_TYPE_FORM",
    "CONTENT_TYPE_JSON",
    "CONTENT_TYPE_MULTIPART_FORM",
    "CONTENT_TYPE_XML",
    "BindingError",
    "BodyDecodeError",
    "BodySizeLimitError",
    "DecodeError",
    "Decoder",
    "Decoders",
    "FormDecoder",
    "InvalidFormError",
    "InvalidJSONError",
    "InvalidMultipartError",
    "InvalidXMLError",
    "JSONDecoder",
    "MalformedContentTypeError",
    "MultipartFormDecoder",
    "Request",
    "UnsupportedContentTypeError",
    "Validatable",
    "ValidationError",
    "XMLDecoder",
    "decode",
    "field",
    "lookup",
    "new",
    "parse_media_type",
    "register",
]
