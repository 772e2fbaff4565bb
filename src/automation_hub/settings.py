"""
automation_hub.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Derive the image pipeline configuration value injected into services.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True, slots=True)
class ImageConfig:
    """
    Upload limits and blob location consumed by the image pipeline.
    """

    max_size: int
    extensions: tuple[str, ...]
    save_dir: Path


class Settings(BaseSettings):
    """
    - Strict env-driven configuration (prefix `AHUB_`)
    - Defaults safe for local dev
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="AHUB_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "automation-hub"
    log_level: str = "INFO"
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./automation_hub.db"

    # Images
    image_max_size: int = 5 * 1024 * 1024
    image_extensions: list[str] = Field(
        default_factory=lambda: [".jpg", ".jpeg", ".png", ".gif", ".webp"]
    )
    image_save_dir: Path = Path("./images")

    # Notifications
    kafka_enabled: bool = False
    kafka_brokers: str = "localhost:9092"
    kafka_topic: str = "automations"
    kafka_client_id: str = "automation-hub"

    @field_validator("image_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        # Extensions are compared lowercased with a leading dot.
        out = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            out.append(ext if ext.startswith(".") else f".{ext}")
        return out

    def image_config(self) -> ImageConfig:
        return ImageConfig(
            max_size=self.image_max_size,
            extensions=tuple(self.image_extensions),
            save_dir=self.image_save_dir,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# List-valued settings (image extensions) are read from env as JSON, e.g.
# AHUB_IMAGE_EXTENSIONS='[".png", ".jpg"]'.
