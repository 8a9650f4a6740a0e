# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Currency calculations for cars, expenses and transactions.

All totals are expressed in the base currency (AED) and use the live
exchange rate cache.
"""

import asyncio
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from carcrm.models.enums import CurrencyType
from carcrm.services.exchange_rate_service import ExchangeRateService
from carcrm.services.fallback_rates import BASE_CURRENCY, normalize_code

MAX_AMOUNT = 999_999_999

CURRENCY_SYMBOLS: dict[str, str] = {
    CurrencyType.AED.value: "د.إ",
    CurrencyType.USD.value: "$",
    CurrencyType.EUR.value: "€",
    CurrencyType.GBP.value: "£",
}

# Amounts at or above these (in the source currency) deserve a warning that
# the conversion rate materially affects the figure.
CONVERSION_WARNING_THRESHOLDS: dict[str, float] = {
    CurrencyType.AED.value: 50_000,
    CurrencyType.USD.value: 15_000,
    CurrencyType.EUR.value: 12_000,
    CurrencyType.GBP.value: 10_000,
}


@dataclass(frozen=True)
class MoneyAmount:
    """An amount in a given currency."""

    amount: float
    currency: str


@dataclass(frozen=True)
class Conversion:
    """One requested conversion in a batch."""

    amount: float
    from_currency: str
    to_currency: str = BASE_CURRENCY.value


@dataclass(frozen=True)
class CarCost:
    """Purchase side of a car in inventory."""

    purchase_price: float
    purchase_currency: str
    total_expenses_base: float = 0.0


@dataclass(frozen=True)
class CarSale:
    """Sale side of a sold car."""

    sale_price: float
    sale_currency: str
    sale_date: date | None = None


@dataclass
class CurrencyShare:
    """Aggregated transactions of one currency."""

    count: int = 0
    total_base: float = 0.0
    percentage: float = 0.0


@dataclass
class AmountValidation:
    """Result of validating a user-entered amount."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


async def calculate_profit_in_base(
    rates: ExchangeRateService,
    sale_price: float,
    sale_currency: str,
    purchase_price: float,
    purchase_currency: str,
    total_expenses: float = 0.0,
) -> float:
    """Profit in AED; ``total_expenses`` is already in AED."""
    sale_base = await rates.convert_currency(sale_price, sale_currency, BASE_CURRENCY)
    purchase_base = await rates.convert_currency(
        purchase_price, purchase_currency, BASE_CURRENCY
    )
    return sale_base - purchase_base - total_expenses


def calculate_roi(profit: float, total_investment: float) -> float:
    """Return on investment in percent."""
    if total_investment == 0:
        return 0.0
    return profit / total_investment * 100


def calculate_profit_margin(profit: float, total_cost: float) -> float:
    """Profit relative to cost, in percent."""
    if total_cost == 0:
        return 0.0
    return profit / total_cost * 100


async def calculate_total_cost(
    rates: ExchangeRateService,
    purchase_price: float,
    purchase_currency: str,
    expenses: Iterable[MoneyAmount],
) -> float:
    """Purchase price plus all expenses, in AED."""
    total = await rates.convert_currency(purchase_price, purchase_currency, BASE_CURRENCY)
    for expense in expenses:
        total += await rates.convert_currency(
            expense.amount, expense.currency, BASE_CURRENCY
        )
    return total


async def batch_convert_currency(
    rates: ExchangeRateService,
    conversions: Iterable[Conversion],
) -> list[float]:
    """Convert many amounts concurrently, preserving order."""
    return list(
        await asyncio.gather(
            *(
                rates.convert_currency(c.amount, c.from_currency, c.to_currency)
                for c in conversions
            )
        )
    )


async def calculate_inventory_value(
    rates: ExchangeRateService,
    cars: Iterable[CarCost],
) -> float:
    """Total purchase value of the inventory plus recorded expenses, in AED."""
    total = 0.0
    for car in cars:
        purchase_base = await rates.convert_currency(
            car.purchase_price, car.purchase_currency, BASE_CURRENCY
        )
        total += purchase_base + car.total_expenses_base
    return total


async def calculate_average_selling_price(
    rates: ExchangeRateService,
    sold_cars: list[CarSale],
) -> float:
    if not sold_cars:
        return 0.0

    total = 0.0
    for car in sold_cars:
        total += await rates.convert_currency(
            car.sale_price, car.sale_currency, BASE_CURRENCY
        )
    return total / len(sold_cars)


async def calculate_monthly_revenue(
    rates: ExchangeRateService,
    sold_cars: Iterable[CarSale],
    year: int,
    month: int,
) -> float:
    """Sales revenue in AED for one calendar month (``month`` is 1-12)."""
    total = 0.0
    for car in sold_cars:
        if car.sale_date is None:
            continue
        if car.sale_date.year != year or car.sale_date.month != month:
            continue
        total += await rates.convert_currency(
            car.sale_price, car.sale_currency, BASE_CURRENCY
        )
    return total


async def calculate_currency_distribution(
    rates: ExchangeRateService,
    transactions: Iterable[MoneyAmount],
) -> dict[str, CurrencyShare]:
    """Group transactions by currency with their AED totals and share."""
    distribution: dict[str, CurrencyShare] = {}
    grand_total = 0.0

    for transaction in transactions:
        code = normalize_code(transaction.currency)
        share = distribution.setdefault(code, CurrencyShare())
        amount_base = await rates.convert_currency(
            transaction.amount, code, BASE_CURRENCY
        )
        share.count += 1
        share.total_base += amount_base
        grand_total += amount_base

    for share in distribution.values():
        if grand_total > 0:
            share.percentage = share.total_base / grand_total * 100

    return distribution


def validate_currency_amount(amount: float, currency: str) -> AmountValidation:
    """Check that an entered amount is usable for bookkeeping."""
    errors: list[str] = []

    if not math.isfinite(amount):
        errors.append("Amount must be a valid number")
    # NaN fails both comparisons; infinities also hit the range checks.
    if amount < 0:
        errors.append("Amount cannot be negative")
    if amount > MAX_AMOUNT:
        errors.append("Amount is too large")

    if normalize_code(currency) not in CURRENCY_SYMBOLS:
        errors.append("Unsupported currency")

    return AmountValidation(is_valid=not errors, errors=errors)


def get_currency_symbol(currency: str) -> str:
    code = normalize_code(currency)
    return CURRENCY_SYMBOLS.get(code, code)


def needs_conversion_warning(
    amount: float,
    from_currency: str,
    to_currency: str,
) -> bool:
    """Whether a conversion is large enough to warn the user about."""
    from_code = normalize_code(from_currency)
    if from_code == normalize_code(to_currency):
        return False
    threshold = CONVERSION_WARNING_THRESHOLDS.get(from_code, 50_000)
    return amount >= threshold
