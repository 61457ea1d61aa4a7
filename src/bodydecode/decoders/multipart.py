"""Decoder for multipart/form-data bodies, backed by python-multipart."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from python_multipart.exceptions import FormParserError
from python_multipart.multipart import FormParser, MultipartState

from bodydecode.decoders.base import DEFAULT_BODY_LIMIT, DEFAULT_MAX_MEMORY
from bodydecode.decoders.urlencoded import form_binder
from bodydecode.exceptions import (
    BodyDecodeError,
    BodySizeLimitError,
    InvalidMultipartError,
)
from bodydecode.mediatype import CONTENT_TYPE_MULTIPART_FORM, content_type_params

if TYPE_CHECKING:
    from python_multipart.multipart import Field, File

    from bodydecode.decoders.urlencoded import FormBinder
    from bodydecode.request import RequestProtocol

logger = logging.getLogger(__name__)


class MultipartFormDecoder:
    """Bind the value parts of a multipart body onto the target's ``form`` fields.

    Args:
        max_memory: Bytes of each file part kept in memory before spilling to a
            temporary file
        ignore_unknown_keys: Skip parts that match no field
        body_limit: Maximum body size in bytes, 0 disables the check
        chunk_size: Bytes read from the body stream per parser write
        binder: Called with the target and the value parts instead of the
            default field binding

    File parts are not bound; they are stored on ``request.files`` as lists of
    ``python_multipart.File`` keyed by field name. The body stream is
    consumed.
    """

    content_type = CONTENT_TYPE_MULTIPART_FORM

    def __init__(
        self,
        max_memory: int = DEFAULT_MAX_MEMORY,
        ignore_unknown_keys: bool = True,
        body_limit: int = DEFAULT_BODY_LIMIT,
        chunk_size: int = 64 * 1024,
        binder: FormBinder | None = None,
    ):
        self.max_memory = max_memory
        self.ignore_unknown_keys = ignore_unknown_keys
        self.body_limit = body_limit
        self.chunk_size = chunk_size
        self.binder = binder or form_binder(ignore_unknown_keys)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(max_memory={self.max_memory})"

    def __call__(self, request: RequestProtocol, target: Any) -> None:
        values, files = self.parse(request)
        request.files = files
        logger.debug(f"Parsed {len(values)} multipart fields, {len(files)} files")
        self.binder(target, values)

    def parse(
        self, request: RequestProtocol
    ) -> tuple[dict[str, list[str]], dict[str, list[File]]]:
        """Parse the request body into value parts and file parts.

        Raises:
            InvalidMultipartError: On a missing boundary, malformed or
                truncated body
            BodySizeLimitError: If the body exceeds ``body_limit``
        """
        _, params = content_type_params(request)
        boundary = params.get("boundary")
        if not boundary:
            raise InvalidMultipartError("missing boundary")

        values: dict[str, list[str]] = {}
        files: dict[str, list[File]] = {}

        def on_field(field: Field) -> None:
            name = (field.field_name or b"").decode("utf-8")
            values.setdefault(name, []).append((field.value or b"").decode("utf-8"))

        def on_file(file: File) -> None:
            name = (file.field_name or b"").decode("utf-8")
            files.setdefault(name, []).append(file)

        parser = FormParser(
            self.content_type,
            on_field,
            on_file,
            boundary=boundary.encode("latin-1"),
            config={"MAX_MEMORY_FILE_SIZE": self.max_memory},
        )

        try:
            self._feed(request, parser)
            parser.finalize()
            if parser.parser.state != MultipartState.END:
                raise InvalidMultipartError("unexpected end of body")
        except (FormParserError, UnicodeError) as e:
            close_files(files)
            raise InvalidMultipartError(str(e), cause=e) from e
        except BodyDecodeError:
            close_files(files)
            raise
        return values, files

    def _feed(self, request: RequestProtocol, parser: FormParser) -> None:
        length = getattr(request, "content_length", None)
        if self.body_limit and length is not None and length > self.body_limit:
            raise BodySizeLimitError(length, self.body_limit, content_type=self.content_type)

        total = 0
        while True:
            size = self.chunk_size
            if length is not None:
                size = min(size, length - total)
                if size <= 0:
                    break
            chunk = request.body.read(size)
            if not chunk:
                break
            total += len(chunk)
            if self.body_limit and total > self.body_limit:
                raise BodySizeLimitError(
                    total, self.body_limit, content_type=self.content_type
                )
            parser.write(chunk)


def close_files(files: dict[str, list[File]]) -> None:
    """Close file parts, removing any temporary files they spilled to."""
    for parts in files.values():
        for file in parts:
            file.close()
