"""Built-in decoders.

- FormDecoder: application/x-www-form-urlencoded
- MultipartFormDecoder: multipart/form-data
- JSONDecoder: application/json
- XMLDecoder: application/xml
"""

from __future__ import annotations

from bodydecode.decoders.base import (
    DEFAULT_BODY_LIMIT,
    DEFAULT_MAX_MEMORY,
    DecoderProtocol,
    read_body,
)
from bodydecode.decoders.json import JSONDecoder
from bodydecode.decoders.multipart import MultipartFormDecoder
from bodydecode.decoders.urlencoded import (
    FormBinder,
    FormDecoder,
    form_binder,
    parse_form,
)
from bodydecode.decoders.xml import XMLDecoder

__all__ = [
    "DEFAULT_BODY_LIMIT",
    "DEFAULT_MAX_MEMORY",
    "DecoderProtocol",
    "FormBinder",
    "FormDecoder",
    "JSONDecoder",
    "MultipartFormDecoder",
    "XMLDecoder",
    "form_binder",
    "parse_form",
    "read_body",
]
