import logging
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from search_dashboard.exceptions import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Search Analytics Dashboard"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: Literal["development", "production", "test"] = "development"
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)

    # Database settings
    database_url: str
    db_connect_retries: int = Field(5, ge=1)
    db_connect_retry_delay: float = Field(5.0, ge=0)
    db_statement_timeout_ms: int = Field(30000, ge=0)

    # Security settings
    secret_key: str = Field(min_length=32)
    session_cookie: str = "search_dashboard.sid"
    session_max_age: int = 60 * 60 * 24

    # Proxies whose X-Forwarded-For is trusted (comma separated IPs or networks, "*" for any)
    forwarded_allow_ips: str = "127.0.0.1"

    # Administrator identity
    admin_email: str
    admin_password: str = Field(min_length=8)

    # CORS settings (comma separated)
    allowed_origins: str = "http://localhost:3000"

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_api: str = "100/15minutes"
    rate_limit_login: str = "5/15minutes"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("admin_email")
    @classmethod
    def validate_admin_email(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("must be a valid email address")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, failing with ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            problems.append(f"{field}: {error['msg']}")
        logger.error("Environment validation failed:")
        for problem in problems:
            logger.error(f"  - {problem}")
        raise ConfigurationError("Environment validation failed", problems=problems) from e


settings = load_settings()
