"""Unit tests for the component factory."""

import pytest

from docgen.core.factory import ComponentFactory
from docgen.pipeline.models import OutputFormat
from docgen.pipeline.orchestrator import GenerationOrchestrator
from docgen.strategies.converters import DocxHtmlConverter, GotenbergConverter
from docgen.strategies.storage import LocalFileStorage


class TestComponentFactory:
    """Test suite for ComponentFactory."""

    @pytest.fixture
    def factory(self, settings):
        return ComponentFactory(settings)

    def test_local_storage(self, factory):
        assert isinstance(factory.get_storage(), LocalFileStorage)

    def test_storage_is_cached(self, factory):
        assert factory.get_storage() is factory.get_storage()

    @pytest.mark.parametrize("backend", ["s3", "supabase", "azure"])
    def test_reserved_backends_not_implemented(self, factory, backend):
        with pytest.raises(ValueError, match="not yet implemented"):
            factory.get_storage(backend)

    def test_unknown_backend(self, factory):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            factory.get_storage("ftp")

    def test_converters(self, factory):
        assert isinstance(factory.get_converter(OutputFormat.PDF), GotenbergConverter)
        assert isinstance(factory.get_converter(OutputFormat.HTML), DocxHtmlConverter)

    def test_docx_needs_no_converter(self, factory):
        with pytest.raises(ValueError):
            factory.get_converter(OutputFormat.DOCX)

    def test_orchestrator_is_cached_until_cleared(self, factory):
        orchestrator = factory.get_orchestrator()

        assert isinstance(orchestrator, GenerationOrchestrator)
        assert factory.get_orchestrator() is orchestrator

        factory.clear_cache()

        assert factory.get_orchestrator() is not orchestrator
