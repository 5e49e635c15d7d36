"""Seeder configuration loaded from the environment."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_DIR = Path(__file__).resolve().parents[1]
CONTENT_HOST_TEMPLATE = "https://assets.decentraland.{domain}"


class Settings(BaseSettings):
    """Environment-driven settings shared by the seed script and its services."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    app_env: Literal["development", "staging", "production", "test"] = "development"

    database_url: str = "sqlite+aiosqlite:///./builder.db"

    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_secure: bool = False
    minio_bucket: str = "builder"

    seed_data_dir: Path = BACKEND_DIR / "scripts" / "seed_data"
    default_eth_address: str = "0x0000000000000000000000000000000000000000"
    content_host_timeout_seconds: float = Field(default=60.0, gt=0)
    seed_concurrency: int = Field(default=16, gt=0)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def content_host_url(self) -> str:
        domain = "org" if self.is_production else "zone"
        return CONTENT_HOST_TEMPLATE.format(domain=domain)


settings = Settings()
