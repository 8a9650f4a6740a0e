# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Currency API endpoints."""

from fastapi import APIRouter, Depends, Query

from carcrm.api.deps import get_exchange_rate_service
from carcrm.models.enums import CurrencyType
from carcrm.schemas.currency import (
    CacheStatusResponse,
    ConversionResponse,
    CurrencyResponse,
    ExchangeRateResponse,
)
from carcrm.services.currency_helpers import get_currency_symbol
from carcrm.services.exchange_rate_service import ExchangeRateService
from carcrm.services.fallback_rates import BASE_CURRENCY

router = APIRouter()


@router.get("", response_model=list[CurrencyResponse])
def list_currencies(
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> list[CurrencyResponse]:
    """Get list of supported currencies, base currency first."""
    return [
        CurrencyResponse(
            code=currency.value,
            symbol=get_currency_symbol(currency),
            is_base=currency == BASE_CURRENCY,
        )
        for currency in service.get_supported_currencies()
    ]


@router.get("/rate", response_model=ExchangeRateResponse)
async def get_exchange_rate(
    from_currency: CurrencyType = Query(..., alias="from"),
    to_currency: CurrencyType = Query(..., alias="to"),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> ExchangeRateResponse:
    """Get exchange rate between two currencies."""
    rate = await service.get_rate(from_currency, to_currency)
    return ExchangeRateResponse(
        from_currency=from_currency.value,
        to_currency=to_currency.value,
        rate=rate,
    )


@router.get("/convert", response_model=ConversionResponse)
async def convert_amount(
    amount: float = Query(...),
    from_currency: CurrencyType = Query(..., alias="from"),
    to_currency: CurrencyType = Query(BASE_CURRENCY, alias="to"),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> ConversionResponse:
    """Convert an amount between two currencies."""
    rate = await service.get_rate(from_currency, to_currency)
    return ConversionResponse(
        amount=amount,
        from_currency=from_currency.value,
        to_currency=to_currency.value,
        rate=rate,
        converted_amount=amount * rate,
    )


@router.get("/cache-status", response_model=CacheStatusResponse)
def get_cache_status(
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> CacheStatusResponse:
    """Get a snapshot of the exchange rate cache."""
    return CacheStatusResponse.model_validate(service.get_cache_status())


@router.post("/refresh", response_model=CacheStatusResponse)
async def refresh_rates(
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> CacheStatusResponse:
    """Force a refresh of the exchange rate cache."""
    await service.force_refresh()
    return CacheStatusResponse.model_validate(service.get_cache_status())
