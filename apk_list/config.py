"""Application configuration using Pydantic settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic.networks import IPvAnyAddress
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "render" / "templates"


class ConfigurationError(RuntimeError):
    """Raised when the process cannot start with the given configuration."""
    pass


class Settings(BaseSettings):
    """Application settings."""

    # Retailer API
    api_key: str = ""
    catalog_url: str = "https://api-extern.systembolaget.se/product/v1/product"
    request_timeout_seconds: float = 60.0
    catalog_max_attempts: int = Field(default=3, ge=1)

    # Server
    addr: IPvAnyAddress = Field(default="127.0.0.1", validate_default=True)
    port: int = Field(default=3030, ge=0, le=65535)

    # Scheduler (seconds)
    update_interval_seconds: float = Field(default=7200, gt=0)
    retry_interval_seconds: float = Field(default=5, gt=0)

    # Rendering
    template_dir: Path = DEFAULT_TEMPLATE_DIR
    template_name: str = "apk.html"
    score_precision: int = Field(default=2, ge=0)

    # App Settings
    debug: bool = False
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    log_dir: str = ""  # Empty disables the JSON file handlers

    model_config = SettingsConfigDict(
        env_prefix="APK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def require_api_key(self) -> str:
        """Return the API key, or raise if it is not configured."""
        key = self.api_key.strip()
        if not key:
            raise ConfigurationError("APK_API_KEY must be set")
        return key


settings = Settings()
