"""
Configuration for the skill emulator.

Settings are read from ``SKILL_EMULATOR_*`` environment variables or a ``.env``
file, so a test suite or CI job can point the emulator at a skill without
code changes.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Emulator settings loaded from environment variables."""

    # Skill identity
    locale: str = "en-US"
    application_id: str | None = None

    # Interaction model file (unified JSON); None = ./models/<locale>.json
    interaction_model: str | None = None

    # Skill target: a local handler ("index.handler" or "index.py") or a URL
    handler: str | None = None
    skill_url: str | None = None

    # Remote skill timeout in seconds; None = wait forever
    request_timeout: float | None = None

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SKILL_EMULATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


def get_settings() -> Settings:
    """Get the emulator settings instance."""
    return Settings()
