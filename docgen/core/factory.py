"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from docgen.core.config import Settings, get_settings
from docgen.interfaces.converter import BaseDocumentConverter
from docgen.interfaces.renderer import BaseDocumentRenderer
from docgen.interfaces.storage import BaseTemplateStorage
from docgen.interfaces.template import BaseFieldExtractor, BaseTemplateValidator
from docgen.pipeline.models import OutputFormat
from docgen.pipeline.orchestrator import GenerationOrchestrator
from docgen.pipeline.resolver import TemplateSourceResolver
from docgen.strategies.converters import DocxHtmlConverter, GotenbergConverter
from docgen.strategies.renderers import DocxTemplateRenderer
from docgen.strategies.storage import LocalFileStorage
from docgen.strategies.template_engine import (
    DocxContainerValidator,
    ImageNormalizer,
    PlaceholderFieldExtractor,
)

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        settings = get_settings()
        factory = ComponentFactory(settings)

        orchestrator = factory.get_orchestrator()
        result = await orchestrator.generate(request, org_id="default")
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._storage_cache: BaseTemplateStorage | None = None
        self._renderer_cache: BaseDocumentRenderer | None = None
        self._converter_cache: dict[OutputFormat, BaseDocumentConverter] = {}
        self._orchestrator_cache: GenerationOrchestrator | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_storage(self, storage_backend: str | None = None) -> BaseTemplateStorage:
        """Get a template storage instance based on the specified backend.

        Args:
            storage_backend: The backend to instantiate. If None, uses settings.

        Returns:
            A BaseTemplateStorage implementation instance.

        Raises:
            ValueError: If the backend is unknown or not implemented.
        """
        if self._storage_cache is None or storage_backend is not None:
            storage_backend = storage_backend or self._settings.storage_backend

            logger.info(f"Instantiating template storage: {storage_backend}")

            match storage_backend:
                case "local":
                    self._storage_cache = LocalFileStorage(
                        base_dir=self._settings.templates_dir,
                        multi_tenant=self._settings.multi_tenant,
                    )
                case "s3" | "supabase" | "azure":
                    raise ValueError(
                        f"{storage_backend} storage not yet implemented. "
                        f"Use STORAGE_BACKEND=local for now."
                    )
                case _:
                    raise ValueError(
                        f"Unknown storage backend: {storage_backend}. "
                        f"Valid options: 'local'"
                    )

        return self._storage_cache

    def get_validator(self) -> BaseTemplateValidator:
        return DocxContainerValidator()

    def get_extractor(self) -> BaseFieldExtractor:
        return PlaceholderFieldExtractor()

    def get_normalizer(self) -> ImageNormalizer:
        return ImageNormalizer(
            width=self._settings.default_image_width_cm,
            height=self._settings.default_image_height_cm,
        )

    def get_renderer(self) -> BaseDocumentRenderer:
        """Get the template renderer instance."""
        if self._renderer_cache is None:
            logger.info("Instantiating docx renderer")
            self._renderer_cache = DocxTemplateRenderer()
        return self._renderer_cache

    def get_converter(self, output_format: OutputFormat) -> BaseDocumentConverter:
        """Get the converter producing the given output format.

        Raises:
            ValueError: If no converter produces that format.
        """
        if output_format not in self._converter_cache:
            logger.info(f"Instantiating converter: {output_format.value}")

            match output_format:
                case OutputFormat.PDF:
                    converter = GotenbergConverter(
                        base_url=self._settings.gotenberg_url,
                        timeout=self._settings.gotenberg_timeout_seconds,
                    )
                case OutputFormat.HTML:
                    converter = DocxHtmlConverter()
                case _:
                    raise ValueError(f"No converter produces {output_format.value}")

            self._converter_cache[output_format] = converter

        return self._converter_cache[output_format]

    def get_resolver(self) -> TemplateSourceResolver:
        return TemplateSourceResolver(storage=self.get_storage(), settings=self._settings)

    def get_orchestrator(self) -> GenerationOrchestrator:
        """Get the generation orchestrator wired with configured collaborators."""
        if self._orchestrator_cache is None:
            logger.info("Instantiating generation orchestrator")

            self._orchestrator_cache = GenerationOrchestrator(
                storage=self.get_storage(),
                resolver=self.get_resolver(),
                validator=self.get_validator(),
                extractor=self.get_extractor(),
                renderer=self.get_renderer(),
                converters={
                    OutputFormat.PDF: self.get_converter(OutputFormat.PDF),
                    OutputFormat.HTML: self.get_converter(OutputFormat.HTML),
                },
                normalizer=self.get_normalizer(),
            )

        return self._orchestrator_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._storage_cache = None
        self._renderer_cache = None
        self._converter_cache = {}
        self._orchestrator_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
