"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "ContribBot"
    host: str = "0.0.0.0"
    port: int = 3000

    # Discord application
    client_id: str = ""
    client_secret: str = ""
    discord_token: str = ""
    redirect_uri: str = "http://localhost:3000/linked-role"

    # GitHub
    github_token: str = ""

    # Repositories to check, in priority order
    repo_1: str = ""
    repo_2: str = ""

    @field_validator("repo_1", "repo_2")
    @classmethod
    def strip_repository(cls, v: str) -> str:
        """Drop surrounding whitespace from repository references."""
        return v.strip()

    @model_validator(mode="after")
    def require_repository(self) -> "Settings":
        """At least one repository must be configured."""
        if not self.repositories:
            raise ValueError("At least REPO_1 must be set in environment variables")
        return self

    @property
    def repositories(self) -> list[str]:
        """Configured repositories in check order, blanks removed."""
        return [repo for repo in (self.repo_1, self.repo_2) if repo]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
