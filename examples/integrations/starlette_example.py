"""Sample Starlette application decoding request bodies with bodydecode.

The same endpoint accepts JSON, XML, urlencoded and multipart bodies.

Run with:
    uvicorn examples.integrations.starlette_example:app --reload
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route

import bodydecode
from bodydecode import (
    BodyDecodeError,
    Request,
    UnsupportedContentTypeError,
    ValidationError,
    field,
)
from bodydecode.config import load_config
from bodydecode.logging import JSONFormatter, log_decode_error

# Structured logs for rejected bodies
handler = logging.StreamHandler()
handler.setFormatter(JSONFormatter())
logging.getLogger("bodydecode.errors").addHandler(handler)

# Settings from BODYDECODE_MAX_MEMORY / BODYDECODE_BODY_LIMIT
decoders = bodydecode.new(load_config())


@dataclass
class Comment:
    author: str = field("", form="author", json="author", xml="author")
    text: str = field("", form="comment", json="text", xml="text")
    tags: list[str] = field(default_factory=list, form="tag", json="tags", xml="tag")

    def validate(self) -> None:
        if not self.text.strip():
            raise ValidationError("comment text is required", field="text")


async def submit_comment(request):
    """Decode a comment from any supported body format."""
    body_request = await Request.from_starlette(request)
    comment = Comment()
    try:
        decoders.decode(body_request, comment)
    except UnsupportedContentTypeError as e:
        return JSONResponse({"error": e.message}, status_code=415)
    except BodyDecodeError as e:
        log_decode_error(e, path=request.url.path)
        return JSONResponse(e.to_dict(), status_code=400)

    attachments = [
        file.file_name.decode()
        for files in body_request.files.values()
        for file in files
    ]
    return JSONResponse(
        {
            "author": comment.author,
            "text": comment.text,
            "tags": comment.tags,
            "attachments": attachments,
        }
    )


app = Starlette(routes=[Route("/comments", submit_comment, methods=["POST"])])
