"""FastAPI application entry point.

Main application setup with middleware, routing, and lifecycle management.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from docgen import __version__
from docgen.api import generate_router, templates_router
from docgen.api.schemas import ErrorResponse, HealthResponse
from docgen.core.config import Settings, get_settings
from docgen.core.factory import ComponentFactory, get_factory
from docgen.core.logging_config import setup_logging
from docgen.pipeline.errors import OUTWARD_ERRORS, ErrorKind, GenerationError
from docgen.pipeline.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

SERVICE_NAME = "docgen-service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    logger.info(
        f"Starting {SERVICE_NAME} {__version__} "
        f"(storage: {settings.storage_backend}, templates: {settings.templates_dir})"
    )

    yield

    logger.info(f"Shutting down {SERVICE_NAME}...")


def _validation_details(exc: RequestValidationError) -> list[str]:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        details.append(f"{location}: {message}" if location else message)
    return details


def create_app(
    settings: Settings | None = None,
    orchestrator: GenerationOrchestrator | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.
        orchestrator: Optional pre-built orchestrator. If None, one is
            wired from settings through the component factory.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    orchestrator = orchestrator or ComponentFactory(settings).get_orchestrator()

    app = FastAPI(
        title="Document Generation Service",
        description="Render .docx templates with JSON data into DOCX, PDF or HTML",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Store shared state
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # Include routers
    app.include_router(generate_router, prefix="/v1")
    app.include_router(templates_router, prefix="/v1")
    logger.info("Registered generation and templates routers")

    # Health check endpoint
    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint for load balancers and monitoring.

        The service reports healthy even when the PDF converter is down.
        """
        converter_up = await request.app.state.orchestrator.converter_healthy()
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            service=SERVICE_NAME,
            version=__version__,
            converter="up" if converter_up else "down",
        )

    # Exception handlers
    @app.exception_handler(GenerationError)
    async def generation_exception_handler(request: Request, exc: GenerationError):
        """Map classified pipeline failures to their outward status and body."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors as request-shape errors."""
        logger.warning(f"Validation error: {exc.errors()}")
        outward = OUTWARD_ERRORS[ErrorKind.REQUEST_SHAPE]
        return JSONResponse(
            status_code=outward.status_code,
            content=ErrorResponse(
                error=outward.message,
                details=_validation_details(exc),
            ).model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Render HTTP errors raised by routes in the common error envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error=OUTWARD_ERRORS[ErrorKind.INTERNAL].message,
            ).model_dump(exclude_none=True),
        )

    logger.info("FastAPI application created successfully")
    return app


def build_default_app() -> FastAPI:
    """Build the application from environment settings with logging installed."""
    settings = get_settings()
    setup_logging(settings)
    return create_app(settings, get_factory().get_orchestrator())


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "docgen.main:build_default_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )
