"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access throughout the application.
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Template Storage
    storage_backend: str = Field(
        default="local",
        description="Storage strategy to use: 'local' (s3, supabase, azure reserved).",
    )
    templates_dir: Path = Field(
        default=Path("./templates"),
        description="Root directory of the local template storage backend.",
    )
    multi_tenant: bool = Field(
        default=False,
        description="Store templates in one subdirectory per organization.",
    )
    default_org_id: str = Field(
        default="default",
        description="Organization used when the X-Org-ID header is absent.",
    )

    # Conversion service
    gotenberg_url: str = Field(
        default="http://gotenberg:3000",
        description="Gotenberg base URL used for PDF conversion.",
    )
    gotenberg_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout for a single Gotenberg conversion call.",
    )

    # Remote template fetch
    template_fetch_timeout_ms: int = Field(
        default=30_000,
        gt=0,
        description="Hard wall-clock timeout for fetching a template by URL.",
    )
    template_fetch_max_bytes: int = Field(
        default=50 * 1024 * 1024,
        gt=0,
        description="Maximum size of a template fetched by URL.",
    )
    template_fetch_user_agent: str = Field(
        default="docgen-service/0.1.0 (+template-fetch)",
        description="User-Agent sent when fetching remote templates.",
    )

    # Rendering
    default_image_width_cm: float = Field(
        default=6,
        description="Width given to images detected in the data payload.",
    )
    default_image_height_cm: float = Field(
        default=6,
        description="Height given to images detected in the data payload.",
    )

    # HTTP
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory for info.log/error.log. Console only when unset.",
    )

    @field_validator("templates_dir")
    @classmethod
    def ensure_templates_dir(cls, v: Path) -> Path:
        """Ensure templates directory exists."""
        v.mkdir(parents=True, exist_ok=True)
        return v.resolve()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    @property
    def template_fetch_timeout_seconds(self) -> float:
        return self.template_fetch_timeout_ms / 1000

    def configure_logging(self) -> None:
        """Configure global logging based on settings."""
        import structlog

        level = getattr(logging, self.log_level, logging.INFO)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=level,
        )

        logger.setLevel(level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
