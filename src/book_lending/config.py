"""Configuration management for the Book Lending service.

Settings are loaded from ``BOOK_LENDING_*`` environment variables (or a
``.env`` file) and validated with Pydantic v2. Secrets such as the token
signing key never appear in the settings repr.
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "change-me-in-production"  # noqa: S105


class ServiceConfig(BaseSettings):
    """Service configuration.

    Covers the database location, token signing and expiry, and the
    per-request limits the lending façade applies.
    """

    model_config = SettingsConfigDict(
        # All env vars share one prefix so they don't collide with other services
        env_prefix="BOOK_LENDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Service Metadata ===

    service_name: str = Field(
        default="book-lending",
        description="Service name reported in logs and traces",
        pattern=r"^[a-z0-9-]+$",
    )

    service_version: str = Field(
        default="0.1.0",
        description="Service version",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Database Configuration ===

    database_path: Path = Field(
        default=Path("data/lending.db"),
        description="SQLite database file path",
    )

    # === Security Configuration ===

    jwt_secret: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="Key used to sign and verify bearer tokens",
        min_length=8,
        repr=False,
    )

    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm (HMAC family only)",
        pattern=r"^HS(256|384|512)$",
    )

    token_ttl_minutes: int = Field(
        default=60,
        description="Lifetime of an issued token in minutes",
        ge=1,
        le=7 * 24 * 60,
    )

    # === Request Handling ===

    request_timeout_seconds: float = Field(
        default=10.0,
        description="Deadline applied to a single façade operation",
        gt=0,
    )

    store_conflict_retries: int = Field(
        default=1,
        description="How many times a lost storage race is retried per book",
        ge=0,
        le=5,
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug behaviour and SQL echo",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    # === Validation Methods ===

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: Path) -> Path:
        """Resolve the database path and make sure its directory exists."""
        abs_path = v.absolute()
        abs_path.parent.mkdir(parents=True, exist_ok=True)

        if not abs_path.parent.is_dir():
            raise ValueError(f"Database directory {abs_path.parent} is not accessible")

        return abs_path

    @field_validator("service_name")
    @classmethod
    def validate_service_name(cls, v: str) -> str:
        if len(v) < 3:
            raise ValueError("Service name must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Service name must not exceed 50 characters")
        return v

    # === Computed Properties ===

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug or self.log_level == "DEBUG"

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET

    def get_database_url(self) -> str:
        """Get SQLAlchemy database URL."""
        return f"sqlite:///{self.database_path}"


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: ServiceConfig | None = None


def get_config() -> ServiceConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        config = ServiceConfig()
        if config.uses_default_secret and not config.is_development:
            logger.warning(
                "BOOK_LENDING_JWT_SECRET is not set; tokens are signed with the development key"
            )
        _ConfigStore._instance = config  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]


def configure_logging(config: ServiceConfig | None = None) -> None:
    """Apply the configured log level to the root logger.

    Logs go to stderr so that stdout stays free for command output.
    """
    config = config or get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
