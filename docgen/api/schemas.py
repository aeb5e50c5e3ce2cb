"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Re-export generation models used by the routers
from docgen.pipeline.models import (
    GenerationOptions,
    GenerationRequest,
    InlineTemplate,
    OutputFormat,
    TemplateReport,
    TemplateSummary,
)


# =============================================================================
# Template Schemas
# =============================================================================


class ValidateTemplateRequest(BaseModel):
    """Request schema for the validate-only operation."""

    content: str = Field(min_length=1, description="Base64-encoded .docx content")
    data: dict[str, Any] | None = Field(
        default=None, description="Sample data cross-checked against the template fields"
    )


class ValidateTemplateResponse(BaseModel):
    """Response for the validate-only operation.

    Always returned with a success status; ``valid`` carries the verdict.
    """

    valid: bool
    fields: list[str] = Field(default_factory=list)
    errors: list[str] | None = None
    warnings: list[str] | None = None

    @classmethod
    def from_report(cls, report: TemplateReport) -> "ValidateTemplateResponse":
        return cls(
            valid=report.valid,
            fields=report.fields,
            errors=report.errors or None,
            warnings=report.warnings or None,
        )


class TemplateListItem(BaseModel):
    """A stored template with the fields it requires."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    required_fields: list[str] = Field(alias="requiredFields")

    @classmethod
    def from_summary(cls, summary: TemplateSummary) -> "TemplateListItem":
        return cls(id=summary.id, name=summary.name, required_fields=summary.required_fields)


# =============================================================================
# Common Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(description="Error message")
    details: Any | None = Field(default=None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    service: str
    version: str
    converter: str


__all__ = [
    "ErrorResponse",
    "GenerationOptions",
    "GenerationRequest",
    "HealthResponse",
    "InlineTemplate",
    "OutputFormat",
    "TemplateListItem",
    "ValidateTemplateRequest",
    "ValidateTemplateResponse",
]
