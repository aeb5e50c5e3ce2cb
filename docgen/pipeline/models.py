"""Generation pipeline models.

Request and result models shared by the pipeline and the API layer.
These models are kept here to avoid circular imports with the API layer.
"""

import enum
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field


class OutputFormat(str, enum.Enum):
    """Requested output format."""

    PDF = "pdf"
    DOCX = "docx"
    HTML = "html"

    @property
    def extension(self) -> str:
        return f".{self.value}"


class InlineTemplate(BaseModel):
    """Template supplied directly in the request (bring your own template)."""

    content: str = Field(description="Base64-encoded .docx content")
    filename: str = Field(description="Original filename of the template")


class GenerationOptions(BaseModel):
    """Optional rendering options."""

    header_text: str | None = Field(default=None, description="Text placed in the page header")
    watermark: bool | None = Field(default=None, description="Request a watermark")
    metadata: dict[str, str] | None = Field(default=None, description="Document metadata")


class GenerationRequest(BaseModel):
    """Document generation request.

    Exactly one of ``template_id``, ``template`` and ``template_url`` must be
    given. That rule is enforced by the resolver so it is reported as a
    request-shape error rather than a schema error.
    """

    template_id: str | None = Field(default=None, description="Server-stored template id")
    template: InlineTemplate | None = Field(default=None, description="Inline template")
    template_url: str | None = Field(default=None, description="URL to fetch the template from")
    output_format: OutputFormat = Field(description="Requested output format")
    data: dict[str, Any] = Field(description="Data substituted into the template")
    options: GenerationOptions | None = Field(default=None)

    def describe_source(self) -> str:
        """Short template reference for logs."""
        if self.template_id:
            return self.template_id
        if self.template is not None:
            return f"inline:{self.template.filename}"
        return self.template_url or "<none>"


class TemplateSourceMode(str, enum.Enum):
    STORED = "stored"
    INLINE = "inline"
    REMOTE = "remote"


@dataclass(frozen=True)
class ResolvedTemplate:
    """Template bytes plus the name used to label generated files."""

    content: bytes
    display_name: str
    mode: TemplateSourceMode


@dataclass(frozen=True)
class GenerationResult:
    content: bytes
    media_type: str
    filename: str


@dataclass(frozen=True)
class TemplateReport:
    """Outcome of a validate-only request."""

    valid: bool
    fields: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TemplateSummary:
    id: str
    name: str
    required_fields: list[str]
