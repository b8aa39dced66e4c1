"""Application settings and configuration."""

import sys
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "mediabuzz"
    env: str = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"
    allowed_origins: str = "http://localhost:8080"
    public_base_url: str = "http://localhost:8080"

    # Storage
    data_dir: Path = Field(
        default=Path("./server/data"),
        description="Directory holding the JSON collection files",
    )
    mongodb_uri: str | None = Field(
        default=None,
        description="Document database URI; file storage only when unset",
    )
    mongodb_database: str = "stockmediabuzz"
    mongodb_connect_timeout_ms: int = 5000

    # Admin
    admin_email: str = "admin@freemediabuzz.com"
    admin_api_key: str | None = None

    # Coins
    referral_min_coins: int = 5
    referral_max_coins: int = 100
    min_withdraw_coins: int = 1
    coins_per_payout_unit: int = 5000  # 5000 coins = 100 BDT
    payout_unit_amount: float = 100.0

    @property
    def is_production(self) -> bool:
        return self.env == "production"


# Global settings instance
settings = Settings()

# ── Sanity checks ────────────────────────────────────────────────────
if settings.referral_min_coins > settings.referral_max_coins:
    print(
        "\n❌  FATAL: REFERRAL_MIN_COINS is greater than REFERRAL_MAX_COINS.\n",
        file=sys.stderr,
    )
    sys.exit(1)
