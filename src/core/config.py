"""
Centralised settings for the request-modeling layer, loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Load .env from project root (two levels up from this file)
load_dotenv(_PROJECT_ROOT / ".env")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ── Configuration files ──────────────────────────────
    maker_config_path: Path = _PROJECT_ROOT / "config" / "metric_makers.yml"
    dimension_config_path: Path = _PROJECT_ROOT / "config" / "dimensions.yml"

    # ── Request defaults ─────────────────────────────────
    default_time_zone: str = "UTC"
    default_async_after_ms: int = -1  # never go asynchronous
    default_format: str = "json"

    # ── App ──────────────────────────────────────────────
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
