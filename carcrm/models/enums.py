# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class CurrencyType(str, Enum):
    """Currencies the CRM trades in.

    AED is the base currency: API and fallback rates are quoted against it.
    """

    AED = "AED"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
