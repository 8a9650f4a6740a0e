# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Pydantic schemas package."""

from carcrm.schemas.currency import (
    CacheStatusResponse,
    ConversionResponse,
    CurrencyResponse,
    ExchangeRateResponse,
)

__all__ = [
    "CacheStatusResponse",
    "ConversionResponse",
    "CurrencyResponse",
    "ExchangeRateResponse",
]
