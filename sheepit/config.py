"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Fernet key for sealing provider tokens at rest
    encryption_key: str = Field(default="")

    # Provider endpoints
    github_api_url: str = "https://api.github.com"
    vercel_api_url: str = "https://api.vercel.com"
    cloudflare_api_url: str = "https://api.cloudflare.com/client/v4"
    provider_timeout_seconds: float = 30.0
    vercel_github_app_install_url: str = "https://github.com/apps/vercel/installations/new"

    # Pipeline
    name_prefix: str = "sheepit"
    commit_message: str = "Deploy via SheepIt"
    repo_provision_delay_seconds: float = 2.0
    og_fetch_timeout_seconds: float = 4.0

    # Client-side poller
    api_base_url: str = "http://localhost:8000"
    poll_interval_seconds: float = 2.0
    poll_max_attempts: int = 30

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"
    log_file: str | None = None

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    def default_name(self, subdomain: str) -> str:
        """Generated repository / hosting project name for a subdomain."""
        return f"{self.name_prefix}-{subdomain}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
