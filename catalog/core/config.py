"""Application configuration loaded from environment variables."""
import logging
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central place for strongly typed application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="Catalog Manager")
    environment: Literal["development", "staging", "production"] = Field(default="development")

    database_url: str = Field(
        default="sqlite:///catalog.db",
        validation_alias=AliasChoices("CATALOG_DATABASE_URL", "DATABASE_URL"),
    )
    database_echo: bool = Field(default=False)
    auto_create_schema: bool = Field(default=True)
    fallback_to_memory: bool = Field(default=True)

    log_level: str = Field(default="INFO")
    log_file: str | None = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level

    @model_validator(mode="after")
    def convert_database_url(self) -> "Settings":
        """Convert Heroku-style postgres:// URLs to the postgresql:// dialect name."""
        if self.database_url.startswith("postgres://"):
            self.database_url = self.database_url.replace("postgres://", "postgresql://", 1)
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance so downstream code can import directly."""

    return Settings()
