"""Runtime settings, loaded from the environment (prefix ``LUZISTOCK_``) or a .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LUZISTOCK_",
        env_file=".env",
        extra="ignore",
    )

    database_url: str = f"sqlite:///{_DATA_DIR / 'luzistock.db'}"
    sql_echo: bool = False
    log_level: str = "INFO"

    checkout_reservation_minutes: int = Field(default=15, gt=0)
    cart_reservation_minutes: int = Field(default=15, gt=0)
    low_stock_threshold: int = Field(default=5, ge=0)


@lru_cache
def get_settings() -> Settings:
    return Settings()
