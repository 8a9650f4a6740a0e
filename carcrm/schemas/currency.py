# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Currency and exchange rate schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CurrencyResponse(BaseModel):
    """Currency information response."""

    code: str
    symbol: str
    is_base: bool


class ExchangeRateResponse(BaseModel):
    """Exchange rate response."""

    from_currency: str
    to_currency: str
    rate: float


class ConversionResponse(BaseModel):
    """Currency conversion response."""

    amount: float
    from_currency: str
    to_currency: str
    rate: float
    converted_amount: float


class CacheStatusResponse(BaseModel):
    """Exchange rate cache snapshot."""

    model_config = ConfigDict(from_attributes=True)

    rates_count: int
    last_update: datetime | None
    is_updating: bool
    rates: dict[str, float]
