# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the hardcoded fallback table and synchronous conversion."""

import pytest

from carcrm.models.enums import CurrencyType
from carcrm.services.fallback_rates import (
    FALLBACK_RATES,
    calculate_profit_sync,
    convert_currency,
    fallback_rate,
    get_supported_currencies,
)


class TestFallbackTable:
    """Shape of the hardcoded table."""

    def test_covers_every_base_pair(self):
        for currency in ("USD", "EUR", "GBP"):
            assert (currency, "AED") in FALLBACK_RATES
            assert ("AED", currency) in FALLBACK_RATES

    def test_rates_are_positive(self):
        assert all(rate > 0 for rate in FALLBACK_RATES.values())


class TestFallbackRate:
    """Lookup order: direct, reverse, through AED."""

    def test_direct_pair(self):
        assert fallback_rate("GBP", "AED") == 4.60

    def test_enum_members_accepted(self):
        assert fallback_rate(CurrencyType.USD, CurrencyType.AED) == 3.67

    def test_cross_pair_through_base(self):
        assert fallback_rate("GBP", "USD") == pytest.approx(4.60 * 0.27)

    def test_same_currency(self):
        assert fallback_rate("EUR", "EUR") == 1.0

    def test_unknown_currency(self):
        assert fallback_rate("JPY", "AED") is None
        assert fallback_rate("JPY", "USD") is None


class TestConvertCurrency:
    """Synchronous conversion used where nothing can be awaited."""

    def test_same_currency_returns_amount(self):
        assert convert_currency(100, "USD", "USD") == 100

    @pytest.mark.parametrize(
        ("from_currency", "to_currency", "expected"),
        [
            ("USD", "AED", 367),
            ("EUR", "AED", 400),
            ("GBP", "AED", 460),
            ("AED", "USD", 27),
            ("AED", "EUR", 25),
            ("AED", "GBP", 22),
        ],
    )
    def test_base_pairs(self, from_currency, to_currency, expected):
        assert convert_currency(100, from_currency, to_currency) == pytest.approx(
            expected
        )

    def test_cross_currency_through_aed(self):
        assert convert_currency(100, "USD", "EUR") == pytest.approx(91.75)

    def test_default_target_is_aed(self):
        assert convert_currency(100, "GBP") == pytest.approx(460)

    def test_unknown_pair_returns_amount(self):
        assert convert_currency(100, "JPY", "AED") == 100

    def test_zero_and_negative(self):
        assert convert_currency(0, "USD", "AED") == 0
        assert convert_currency(-100, "USD", "AED") == pytest.approx(-367)

    def test_precision(self):
        assert convert_currency(123.45, "USD", "AED") == pytest.approx(453.0615)
        assert convert_currency(1_000_000, "USD", "AED") == pytest.approx(3_670_000)


class TestProfitSync:
    def test_profit_in_aed(self):
        # Bought for 10k USD (36,700 AED), sold for 10k EUR (40,000 AED).
        profit = calculate_profit_sync(10_000, "EUR", 10_000, "USD", 1_000)
        assert profit == pytest.approx(40_000 - 36_700 - 1_000)


def test_supported_currencies_base_first():
    assert get_supported_currencies()[0] == CurrencyType.AED
    assert len(get_supported_currencies()) == 4
