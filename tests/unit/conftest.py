"""Shared fixtures."""

import pytest

from builders import FakeConverter
from docgen.core.config import Settings
from docgen.interfaces.converter import ConversionUnavailableError


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to a temporary templates directory."""
    return Settings(
        templates_dir=tmp_path / "templates",
        template_fetch_timeout_ms=2_000,
        template_fetch_max_bytes=1024 * 1024,
    )


@pytest.fixture
def unreachable_converter():
    return FakeConverter(healthy=False, error=ConversionUnavailableError("Gotenberg unreachable"))
