# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from carcrm.models.base import Base
from carcrm.models.enums import CurrencyType
from carcrm.models.exchange_rate import ExchangeRate

__all__ = [
    "Base",
    "CurrencyType",
    "ExchangeRate",
]
