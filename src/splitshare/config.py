from __future__ import annotations

import logging
from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    default_currency: str = Field("USD", alias="DEFAULT_CURRENCY")
    exact_tolerance_cents: int = Field(1, ge=0, alias="SPLIT_EXACT_TOLERANCE_CENTS")
    percentage_tolerance: Decimal = Field(Decimal("0.01"), ge=0, alias="SPLIT_PERCENTAGE_TOLERANCE")

    @property
    def log_level_number(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
