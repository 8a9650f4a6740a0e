# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Services package."""

from carcrm.services.exchange_rate_service import (
    CacheStatus,
    ExchangeRateService,
    convert_currency_async,
    force_refresh_rates,
    get_exchange_rate,
)
from carcrm.services.fallback_rates import convert_currency
from carcrm.services.rate_api_client import ExchangeRateError, RateApiError
from carcrm.services.rate_store import RateStoreError

__all__ = [
    "CacheStatus",
    "ExchangeRateError",
    "ExchangeRateService",
    "RateApiError",
    "RateStoreError",
    "convert_currency",
    "convert_currency_async",
    "force_refresh_rates",
    "get_exchange_rate",
]
