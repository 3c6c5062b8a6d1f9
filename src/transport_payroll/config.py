"""Configuration management for the transport payroll engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    engine_version: str
    timezone: str
    log_level: str
    batch_workers: int

    @property
    def tzinfo(self) -> ZoneInfo:
        """Employer time zone used for naive timestamps."""
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./transport_payroll.db",
            ),
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            timezone=os.getenv("EMPLOYER_TIMEZONE", "Europe/Copenhagen"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            batch_workers=int(os.getenv("BATCH_WORKERS", "4")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
