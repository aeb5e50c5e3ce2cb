"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- The generation orchestrator
- Organization context
"""

import logging

from fastapi import Depends, Header, Request

from docgen.core.config import Settings
from docgen.pipeline.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    """Dependency for the orchestrator wired at application startup.

    Args:
        request: The incoming request.

    Returns:
        The application's GenerationOrchestrator.
    """
    return request.app.state.orchestrator


async def get_org_id(
    x_org_id: str | None = Header(default=None, description="Organization ID for multi-tenancy"),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Dependency for extracting organization ID from headers.

    Falls back to the configured default organization when the header is
    absent, so single-tenant deployments need not send it.

    Args:
        x_org_id: The organization ID from X-Org-ID header.
        settings: Application settings.

    Returns:
        The organization identifier.
    """
    if not x_org_id or not x_org_id.strip():
        return settings.default_org_id
    return x_org_id.strip()
