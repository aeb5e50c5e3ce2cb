"""Template resolution and document generation pipeline."""

from docgen.pipeline.errors import ErrorKind, GenerationError
from docgen.pipeline.models import GenerationRequest, OutputFormat
from docgen.pipeline.orchestrator import GenerationOrchestrator
from docgen.pipeline.resolver import TemplateSourceResolver

__all__ = [
    "ErrorKind",
    "GenerationError",
    "GenerationOrchestrator",
    "GenerationRequest",
    "OutputFormat",
    "TemplateSourceResolver",
]
