# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Hardcoded last-resort exchange rates and I/O-free conversion.

Everything here is synchronous and never touches the network or the
database, so it is safe to call from any context.
"""

from carcrm.models.enums import CurrencyType

BASE_CURRENCY = CurrencyType.AED

# Approximate rates, used when neither the API nor stored rates are available.
# Keys are (from, to); amount_in_to = amount_in_from * rate.
FALLBACK_RATES: dict[tuple[str, str], float] = {
    ("USD", "AED"): 3.67,
    ("EUR", "AED"): 4.00,
    ("GBP", "AED"): 4.60,
    ("AED", "USD"): 0.27,
    ("AED", "EUR"): 0.25,
    ("AED", "GBP"): 0.22,
}


def normalize_code(currency: str) -> str:
    """Return the plain upper-case ISO code for an enum member or string."""
    if isinstance(currency, CurrencyType):
        return currency.value
    return currency.strip().upper()


def get_supported_currencies() -> list[CurrencyType]:
    """Supported currencies, base currency first."""
    return list(CurrencyType)


def _table_rate(from_currency: str, to_currency: str) -> float | None:
    rate = FALLBACK_RATES.get((from_currency, to_currency))
    if rate is not None:
        return rate
    reverse = FALLBACK_RATES.get((to_currency, from_currency))
    if reverse:
        return 1 / reverse
    return None


def fallback_rate(from_currency: str, to_currency: str) -> float | None:
    """Look up a rate in the hardcoded table.

    Tries the direct pair, then the reverse pair, then composes through the
    base currency (from -> AED -> to). Returns None when the pair cannot be
    resolved, e.g. for a currency the table does not know.
    """
    from_currency = normalize_code(from_currency)
    to_currency = normalize_code(to_currency)
    if from_currency == to_currency:
        return 1.0

    rate = _table_rate(from_currency, to_currency)
    if rate is not None:
        return rate

    base = BASE_CURRENCY.value
    if base in (from_currency, to_currency):
        return None
    to_base = _table_rate(from_currency, base)
    from_base = _table_rate(base, to_currency)
    if to_base is None or from_base is None:
        return None
    return to_base * from_base


def convert_currency(
    amount: float,
    from_currency: str,
    to_currency: str = BASE_CURRENCY,
) -> float:
    """Convert using only the hardcoded table.

    Unknown pairs return the amount unchanged.
    """
    rate = fallback_rate(from_currency, to_currency)
    if rate is None:
        return amount
    return amount * rate


def calculate_profit_sync(
    sale_price: float,
    sale_currency: str,
    purchase_price: float,
    purchase_currency: str,
    total_expenses: float = 0.0,
) -> float:
    """Profit in the base currency using hardcoded rates.

    ``total_expenses`` is expected to already be in the base currency.
    """
    sale_base = convert_currency(sale_price, sale_currency, BASE_CURRENCY)
    purchase_base = convert_currency(purchase_price, purchase_currency, BASE_CURRENCY)
    return sale_base - purchase_base - total_expenses
