# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

from carcrm.services.exchange_rate_service import ExchangeRateService


def get_exchange_rate_service() -> ExchangeRateService:
    """Get the process-wide exchange rate service."""
    return ExchangeRateService.get_instance()
