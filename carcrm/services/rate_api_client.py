# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Client for the live exchange-rate API."""

import logging
import math

import httpx

from carcrm.config import settings

logger = logging.getLogger(__name__)


class ExchangeRateError(Exception):
    """Base exception for exchange rate errors."""


class RateApiError(ExchangeRateError):
    """The rate API could not be reached or returned unusable data."""


class ExchangeRateApiClient:
    """Fetches the latest base-currency rates with a single GET.

    The endpoint answers ``{"base": "AED", "rates": {"USD": 0.2723, ...}}``,
    every rate quoted from the base currency.
    """

    def __init__(
        self,
        api_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: Full URL of the latest-rates endpoint.
            timeout: Request timeout in seconds.
        """
        self.api_url = api_url or settings.exchange_rate_api_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_latest_rates(self) -> dict[str, float]:
        """Fetch rates from the base currency to every quoted currency.

        Returns:
            Mapping of upper-case currency code to rate.

        Raises:
            RateApiError: On transport errors, non-2xx status, or a payload
                without a usable ``rates`` object.
        """
        try:
            client = await self._get_client()
            response = await client.get(self.api_url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch exchange rates: {e}")
            raise RateApiError(f"Failed to fetch exchange rates: {e}") from e
        except ValueError as e:
            logger.error(f"Invalid API response: {e}")
            raise RateApiError(f"Invalid API response: {e}") from e

        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict):
            raise RateApiError("Invalid API response format: missing rates")

        parsed: dict[str, float] = {}
        for code, value in rates.items():
            try:
                rate = float(value)
            except (TypeError, ValueError):
                logger.debug(f"Skipping non-numeric rate for {code}: {value!r}")
                continue
            if rate > 0 and math.isfinite(rate):
                parsed[str(code).upper()] = rate
        return parsed
