"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional, List, Union
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path

PACKAGE_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="IG Image Generator", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("port", "ig_gen_port"),
        description="Server port",
    )
    allowed_hosts: List[str] = Field(default=["*"], description="Allowed hosts for CORS")
    max_body_size: int = Field(default=10 * 1024 * 1024, description="Maximum JSON body size")
    enable_docs: bool = Field(default=True, description="Enable FastAPI docs endpoints")

    # Template Configuration
    templates_dir: Path = Field(
        default=PACKAGE_TEMPLATES_DIR, description="Root directory of HTML slide templates"
    )

    # Rendering Configuration
    viewport_width: int = Field(default=1080, description="Slide width in pixels")
    viewport_height: int = Field(default=1350, description="Slide height in pixels")
    device_scale_factor: float = Field(default=1.0, description="Device pixel ratio")
    render_timeout_ms: int = Field(
        default=30000, description="Network idle timeout for slide content in milliseconds"
    )
    font_timeout: float = Field(default=10.0, description="Font loading timeout in seconds")

    # Browser Configuration
    browser_headless: bool = Field(default=True, description="Run browser in headless mode")
    browser_executable_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "ig_gen_browser_executable_path", "browser_executable_path"
        ),
        description="Override path of the Chromium executable",
    )
    browser_args: List[str] = Field(
        default=[
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ],
        description="Extra Chromium launch arguments",
    )

    # Cloudinary Configuration
    cloudinary_cloud_name: str = Field(default="dpptdb3sr", description="Cloudinary cloud name")
    cloudinary_upload_preset: str = Field(
        default="eevdbifs", description="Unsigned Cloudinary upload preset"
    )
    cloudinary_api_base: str = Field(
        default="https://api.cloudinary.com/v1_1", description="Cloudinary API base URL"
    )
    upload_timeout: Optional[float] = Field(
        default=None, description="Upload timeout in seconds, unset means no timeout"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse allowed hosts from string or list."""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    @field_validator("browser_executable_path")
    @classmethod
    def empty_path_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty executable override as unset."""
        return v or None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="IG_GEN_",
        populate_by_name=True,
        extra="ignore",
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
