"""Document generation orchestrator.

Runs a generation request through its stages:

    resolving source -> validating -> rendering -> converting -> responding

Any failure ends the request with a classified GenerationError. Nothing
is retried: render and convert calls are not idempotent.

Also hosts the template management operations (validate-only, listing,
upload, deletion) that share the same collaborators.
"""

import enum
import re
from typing import Any

import structlog

from docgen.interfaces.converter import BaseDocumentConverter, ConversionError
from docgen.interfaces.renderer import BaseDocumentRenderer, RenderError
from docgen.interfaces.storage import BaseTemplateStorage, StorageError, TemplateNotFoundError
from docgen.interfaces.template import BaseFieldExtractor, BaseTemplateValidator
from docgen.pipeline.errors import (
    ConversionFailedError,
    GenerationError,
    InternalGenerationError,
    InvalidTemplateError,
    RenderFailedError,
    TemplateMissingError,
)
from docgen.pipeline.models import (
    GenerationRequest,
    GenerationResult,
    OutputFormat,
    TemplateReport,
    TemplateSourceMode,
    TemplateSummary,
)
from docgen.pipeline.resolver import TemplateSourceResolver, decode_base64
from docgen.strategies.template_engine.images import ImageNormalizer
from docgen.strategies.template_engine.models import DOCX_MEDIA_TYPE

logger = structlog.get_logger(__name__)


class GenerationStage(str, enum.Enum):
    RESOLVING_SOURCE = "resolving_source"
    VALIDATING = "validating"
    RENDERING = "rendering"
    CONVERTING = "converting"
    RESPONDING = "responding"


def output_filename(
    display_name: str, output_format: OutputFormat, native_extension: str = ".docx"
) -> str:
    """Build the download name: display name, native extension swapped for the requested one."""
    stem = re.sub(re.escape(native_extension) + "$", "", display_name, flags=re.IGNORECASE)
    return stem.replace("/", "_") + output_format.extension


def flatten_keys(data: dict[str, Any], prefix: str = "") -> set[str]:
    """Collect the key paths of a sample data tree.

    Nested objects contribute dotted paths; for arrays of objects the
    first element stands in for every element.
    """
    keys: set[str] = set()
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else key
        keys.add(path)
        if isinstance(value, dict):
            keys |= flatten_keys(value, path)
        elif isinstance(value, list) and value and isinstance(value[0], dict):
            keys |= flatten_keys(value[0], path)
    return keys


def missing_field_warnings(fields: list[str], data: dict[str, Any]) -> list[str]:
    """Warn about top-level template fields absent from the sample data."""
    available = flatten_keys(data)
    return [
        f"Field '{name}' is not present in the sample data"
        for name in fields
        if "." not in name and name not in available
    ]


class GenerationOrchestrator:
    """Sequences template resolution, validation, rendering and conversion.

    All collaborators are injected so tests can substitute doubles.
    """

    def __init__(
        self,
        storage: BaseTemplateStorage,
        resolver: TemplateSourceResolver,
        validator: BaseTemplateValidator,
        extractor: BaseFieldExtractor,
        renderer: BaseDocumentRenderer,
        converters: dict[OutputFormat, BaseDocumentConverter],
        normalizer: ImageNormalizer | None = None,
    ) -> None:
        self._storage = storage
        self._resolver = resolver
        self._validator = validator
        self._extractor = extractor
        self._renderer = renderer
        self._converters = converters
        self._normalizer = normalizer or ImageNormalizer()

    async def generate(self, request: GenerationRequest, org_id: str) -> GenerationResult:
        """Generate a document.

        Args:
            request: The generation request.
            org_id: Organization owning stored templates.

        Returns:
            GenerationResult with content, media type and download filename.

        Raises:
            GenerationError: Classified failure of any stage.
        """
        log = logger.bind(
            template=request.describe_source(),
            output_format=request.output_format.value,
            org_id=org_id,
        )
        stage = GenerationStage.RESOLVING_SOURCE

        try:
            resolved = await self._resolver.resolve(request, org_id)
            log = log.bind(mode=resolved.mode.value)

            # Stored templates were validated when uploaded.
            stage = GenerationStage.VALIDATING
            if resolved.mode is not TemplateSourceMode.STORED:
                result = self._validator.validate(resolved.content)
                if not result.valid:
                    raise InvalidTemplateError(result.errors)

            stage = GenerationStage.RENDERING
            rendered = await self._render(request, resolved.content, resolved.display_name)

            stage = GenerationStage.CONVERTING
            if request.output_format is OutputFormat.DOCX:
                content, media_type = rendered, DOCX_MEDIA_TYPE
            else:
                content, media_type = await self._convert(request, rendered, resolved.display_name)

            stage = GenerationStage.RESPONDING
            filename = output_filename(
                resolved.display_name, request.output_format, self._renderer.native_extension
            )
            log.info("document_generated", filename=filename, size=len(content))
            return GenerationResult(content=content, media_type=media_type, filename=filename)

        except InternalGenerationError as e:
            log.error(
                "generation_failed",
                stage=stage.value,
                kind=e.kind.value,
                error=e.message,
                exc_info=True,
            )
            raise
        except GenerationError as e:
            log.warning("generation_failed", stage=stage.value, kind=e.kind.value, error=e.message)
            raise
        except Exception as e:
            log.error(
                "generation_failed",
                stage=stage.value,
                kind="internal",
                error=str(e),
                exc_info=True,
            )
            raise InternalGenerationError(str(e)) from e

    async def _render(self, request: GenerationRequest, template: bytes, display_name: str) -> bytes:
        data = self._normalizer.normalize(request.data)
        options = request.options.model_dump(exclude_none=True) if request.options else {}
        try:
            return await self._renderer.render(template, data, options)
        except TemplateNotFoundError as e:
            raise TemplateMissingError(display_name) from e
        except RenderError as e:
            raise RenderFailedError(str(e)) from e

    async def _convert(
        self, request: GenerationRequest, rendered: bytes, display_name: str
    ) -> tuple[bytes, str]:
        converter = self._converters.get(request.output_format)
        if converter is None:
            raise InternalGenerationError(
                f"No converter configured for {request.output_format.value}"
            )

        source_name = output_filename(
            display_name, OutputFormat.DOCX, self._renderer.native_extension
        )
        metadata = request.options.metadata if request.options else None
        try:
            content = await converter.convert(rendered, source_name, metadata)
        except ConversionError as e:
            raise ConversionFailedError(str(e)) from e
        return content, converter.media_type

    # ------------------------------------------------------------------
    # Template management
    # ------------------------------------------------------------------

    def validate_template(self, content: str, data: dict[str, Any] | None = None) -> TemplateReport:
        """Validate inline template content and list its fields.

        Never raises for a bad template: problems are reported in the
        returned TemplateReport.
        """
        buffer = decode_base64(content)
        result = self._validator.validate(buffer)
        if not result.valid:
            return TemplateReport(valid=False, errors=list(result.errors))

        fields = self._extractor.extract(buffer)
        warnings = missing_field_warnings(fields, data) if data is not None else []
        logger.info("template_validated", fields=len(fields), warnings=len(warnings))
        return TemplateReport(valid=True, fields=fields, warnings=warnings)

    async def list_templates(self, org_id: str) -> list[TemplateSummary]:
        """List stored templates with the fields each requires.

        Templates deleted while the listing is in progress are skipped.
        """
        try:
            stored = await self._storage.list(org_id)
            summaries = []
            for template in stored:
                try:
                    content = await self._storage.get(org_id, template.id)
                except TemplateNotFoundError:
                    logger.warning("template_vanished", template_id=template.id, org_id=org_id)
                    continue
                summaries.append(
                    TemplateSummary(
                        id=template.id,
                        name=template.name,
                        required_fields=self._extractor.extract(content),
                    )
                )
        except StorageError as e:
            logger.error("template_listing_failed", org_id=org_id, error=str(e), exc_info=True)
            raise InternalGenerationError(str(e)) from e
        return summaries

    async def store_template(self, org_id: str, filename: str, content: bytes) -> TemplateSummary:
        """Validate and store an uploaded template.

        Raises:
            InvalidTemplateError: If the upload is not a usable template.
        """
        result = self._validator.validate(content)
        if not result.valid:
            logger.warning("template_upload_rejected", filename=filename, errors=list(result.errors))
            raise InvalidTemplateError(result.errors)

        try:
            stored = await self._storage.put(org_id, filename, content)
        except TemplateNotFoundError as e:
            raise TemplateMissingError(filename) from e
        except StorageError as e:
            logger.error("template_upload_failed", filename=filename, error=str(e), exc_info=True)
            raise InternalGenerationError(str(e)) from e

        return TemplateSummary(
            id=stored.id,
            name=stored.name,
            required_fields=self._extractor.extract(content),
        )

    async def delete_template(self, org_id: str, template_id: str) -> None:
        try:
            await self._storage.delete(org_id, template_id)
        except TemplateNotFoundError as e:
            logger.warning("template_delete_missing", template_id=template_id, org_id=org_id)
            raise TemplateMissingError(template_id) from e

    async def converter_healthy(self) -> bool:
        """Liveness of the PDF conversion delegate."""
        converter = self._converters.get(OutputFormat.PDF)
        return converter is not None and await converter.is_healthy()
