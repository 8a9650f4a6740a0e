# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application configuration loaded from the environment."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings.

    Values are read from environment variables (case-insensitive) or a
    local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(default="sqlite:///./carcrm.db")

    # Exchange rates
    exchange_rate_api_url: str = Field(
        default="https://api.exchangerate-api.com/v4/latest/AED"
    )
    exchange_rate_ttl_seconds: int = Field(default=3600, gt=0)
    http_timeout_seconds: float = Field(default=10.0, gt=0)


settings = Settings()
