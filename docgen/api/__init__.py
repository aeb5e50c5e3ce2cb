"""API routes and dependencies."""

from docgen.api.generate import router as generate_router
from docgen.api.templates import router as templates_router

__all__ = ["generate_router", "templates_router"]
