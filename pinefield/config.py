"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    pinefield_env: str = "development"
    pinefield_log_level: str = "info"

    # Field size and optional fixed seed for the one-shot generation
    pinefield_particle_count: int = 75000
    pinefield_seed: int | None = None

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
