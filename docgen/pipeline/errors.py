"""Generation error taxonomy.

Every failure of the generation pipeline is raised as a GenerationError
carrying an ErrorKind. ``OUTWARD_ERRORS`` is the only place a kind is
mapped to an HTTP status and caller-facing message.
"""

import enum
from dataclasses import dataclass
from typing import Any

from fastapi import status


class ErrorKind(str, enum.Enum):
    """Outward classification of a pipeline failure."""

    REQUEST_SHAPE = "request_shape"
    TEMPLATE_NOT_FOUND = "template_not_found"
    INVALID_TEMPLATE = "invalid_template"
    FETCH_FAILURE = "fetch_failure"
    RENDER_FAILURE = "render_failure"
    CONVERSION_FAILURE = "conversion_failure"
    INTERNAL = "internal"


@dataclass(frozen=True)
class OutwardError:
    status_code: int
    message: str
    expose_details: bool = True


OUTWARD_ERRORS: dict[ErrorKind, OutwardError] = {
    ErrorKind.REQUEST_SHAPE: OutwardError(status.HTTP_400_BAD_REQUEST, "Invalid request"),
    ErrorKind.TEMPLATE_NOT_FOUND: OutwardError(status.HTTP_404_NOT_FOUND, "Template not found"),
    ErrorKind.INVALID_TEMPLATE: OutwardError(status.HTTP_400_BAD_REQUEST, "Invalid template"),
    ErrorKind.FETCH_FAILURE: OutwardError(
        status.HTTP_502_BAD_GATEWAY, "Failed to fetch template from URL"
    ),
    ErrorKind.RENDER_FAILURE: OutwardError(
        status.HTTP_422_UNPROCESSABLE_CONTENT, "Template rendering failed"
    ),
    ErrorKind.CONVERSION_FAILURE: OutwardError(
        status.HTTP_502_BAD_GATEWAY, "Document conversion failed"
    ),
    ErrorKind.INTERNAL: OutwardError(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error during document generation",
        expose_details=False,
    ),
}


class GenerationError(Exception):
    """Base class for classified pipeline failures."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message

    def to_body(self) -> dict[str, Any]:
        """Build the outward ``{error, details?}`` body."""
        outward = OUTWARD_ERRORS[self.kind]
        body: dict[str, Any] = {"error": outward.message}
        if outward.expose_details and self.details:
            body["details"] = self.details
        return body

    @property
    def status_code(self) -> int:
        return OUTWARD_ERRORS[self.kind].status_code


class RequestShapeError(GenerationError):
    kind = ErrorKind.REQUEST_SHAPE


class TemplateMissingError(GenerationError):
    kind = ErrorKind.TEMPLATE_NOT_FOUND

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id

    def to_body(self) -> dict[str, Any]:
        return {"error": OUTWARD_ERRORS[self.kind].message, "template_id": self.template_id}


class InvalidTemplateError(GenerationError):
    kind = ErrorKind.INVALID_TEMPLATE

    def __init__(self, errors: list[str] | tuple[str, ...]) -> None:
        super().__init__("Template failed structural validation", details=list(errors))
        self.errors = list(errors)


class FetchReason(str, enum.Enum):
    TIMEOUT = "timeout"
    STATUS = "status"
    TOO_LARGE = "too_large"
    TRANSPORT = "transport"


class FetchError(GenerationError):
    """Remote template fetch failure; ``reason`` tells the failures apart."""

    kind = ErrorKind.FETCH_FAILURE

    def __init__(self, reason: FetchReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class RenderFailedError(GenerationError):
    kind = ErrorKind.RENDER_FAILURE


class ConversionFailedError(GenerationError):
    kind = ErrorKind.CONVERSION_FAILURE


class InternalGenerationError(GenerationError):
    kind = ErrorKind.INTERNAL
