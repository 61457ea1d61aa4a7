"""Exception hierarchy for bodydecode.

Every error carries a stable code (``CATEGORY-NNNN``), a category, a
message, a context dict with diagnostic details, and an optional cause.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


class BodyDecodeError(Exception):
    """Base class for all bodydecode errors."""

    code = "DEC-0000"
    category = "general"

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        self.message = message
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(str(self))
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.context:
            details = ", ".join(f"{key}={value}" for key, value in self.context.items())
            text = f"{text} ({details})"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.code,
            "error_category": self.category,
            "message": self.message,
            "context": dict(self.context),
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause is not None else None,
        }


# ============================================================================
# Configuration errors
# ============================================================================


class ConfigurationError(BodyDecodeError):
    code = "CONF-1000"
    category = "configuration"


class ConfigFileNotFoundError(ConfigurationError):
    code = "CONF-1001"

    def __init__(self, file_path: str, **kwargs: Any):
        super().__init__(
            f"Configuration file not found: {file_path}",
            context={"file_path": file_path},
            **kwargs,
        )


class ConfigValidationError(ConfigurationError):
    code = "CONF-1002"

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        field: str | None = None,
        **kwargs: Any,
    ):
        context: dict[str, Any] = {"errors": list(errors or [])}
        if field is not None:
            context["field"] = field
        super().__init__(message, context=context, **kwargs)
        self.errors = context["errors"]


class EnvironmentVariableError(ConfigurationError):
    code = "CONF-1003"

    def __init__(self, variable: str, **kwargs: Any):
        super().__init__(
            f"Required environment variable not set: {variable}",
            context={"variable": variable},
            **kwargs,
        )


# ============================================================================
# Content type errors
# ============================================================================


class ContentTypeError(BodyDecodeError):
    code = "CT-2000"
    category = "content_type"


class MalformedContentTypeError(ContentTypeError):
    """The Content-Type header is missing or is not a valid media type."""

    code = "CT-2001"

    def __init__(self, header: str | None, reason: str = "", **kwargs: Any):
        if header is None or not header.strip():
            message = "Missing Content-Type header"
        else:
            message = f"Malformed Content-Type header: {header!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, context={"header": header}, **kwargs)
        self.header = header


class UnsupportedContentTypeError(ContentTypeError):
    """No decoder is registered for the request's content type."""

    code = "CT-2002"

    def __init__(self, content_type: str, **kwargs: Any):
        super().__init__(
            f"Unsupported content type: {content_type}",
            context={"content_type": content_type},
            **kwargs,
        )
        self.content_type = content_type


# ============================================================================
# Body decoding errors
# ============================================================================


class DecodeError(BodyDecodeError):
    """A decoder failed to turn the request body into the target value."""

    code = "BODY-3000"
    category = "body_processing"

    def __init__(
        self,
        message: str,
        content_type: str | None = None,
        body_snippet: str | None = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", None) or {}
        if content_type is not None:
            context["content_type"] = content_type
        if body_snippet is not None:
            context["body_snippet"] = body_snippet[:100]
        super().__init__(message, context=context, **kwargs)


class InvalidJSONError(DecodeError):
    code = "BODY-3001"

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            f"Invalid JSON: {message}", content_type="application/json", **kwargs
        )


class InvalidXMLError(DecodeError):
    code = "BODY-3002"

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            f"Invalid XML: {message}", content_type="application/xml", **kwargs
        )


class BodySizeLimitError(DecodeError):
    code = "BODY-3003"

    def __init__(self, actual_size: int, limit: int, **kwargs: Any):
        super().__init__(
            f"Request body too large: {actual_size} bytes exceeds limit of {limit}",
            context={"actual_size": actual_size, "limit": limit},
            **kwargs,
        )


class InvalidMultipartError(DecodeError):
    code = "BODY-3004"

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            f"Invalid multipart body: {message}",
            content_type="multipart/form-data",
            **kwargs,
        )


class InvalidFormError(DecodeError):
    code = "BODY-3005"

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(
            f"Invalid form body: {message}",
            content_type="application/x-www-form-urlencoded",
            **kwargs,
        )


class BindingError(DecodeError):
    """A decoded value could not be assigned to a field of the target."""

    code = "BODY-3006"

    def __init__(self, message: str, field: str | None = None, **kwargs: Any):
        context = kwargs.pop("context", None) or {}
        if field is not None:
            context["field"] = field
        super().__init__(message, context=context, **kwargs)
        self.field = field


# ============================================================================
# Validation errors
# ============================================================================


class ValidationError(BodyDecodeError):
    """Raised by a target's ``validate()`` when the decoded value is rejected."""

    code = "VAL-4000"
    category = "validation"

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        field: str | None = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", None) or {}
        if errors:
            context["errors"] = list(errors)
        if field is not None:
            context["field"] = field
        super().__init__(message, context=context, **kwargs)
        self.errors = list(errors or [])
        self.field = field
