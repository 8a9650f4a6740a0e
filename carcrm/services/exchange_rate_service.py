# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Process-wide exchange rate cache with a three-tier refresh chain.

Rates come from, in order of preference:

1. the live rate API (persisted to the database on success),
2. rates stored in the database within the cache TTL,
3. the hardcoded fallback table.

Lookups never fail: a pair no source can resolve converts at rate 1.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import ClassVar

from carcrm.config import settings
from carcrm.events import AppEvent, EventBus, event_bus
from carcrm.models.base import utcnow
from carcrm.models.enums import CurrencyType
from carcrm.services.fallback_rates import (
    BASE_CURRENCY,
    FALLBACK_RATES,
    fallback_rate,
    get_supported_currencies,
    normalize_code,
)
from carcrm.services.rate_api_client import ExchangeRateApiClient, ExchangeRateError
from carcrm.services.rate_store import RateRecord, RateStore, RateStoreError

logger = logging.getLogger(__name__)

RateKey = tuple[str, str]


class RateSource(str, Enum):
    """Where a rate, or a whole refresh, came from."""

    API = "api"
    DATABASE = "database"
    FALLBACK = "fallback"
    CACHE = "cache"
    DERIVED = "derived"


@dataclass(frozen=True)
class Resolved:
    """A lookup that found a rate."""

    rate: float
    source: RateSource


@dataclass(frozen=True)
class Unresolved:
    """A lookup no source could answer."""


RateLookup = Resolved | Unresolved


def rate_or_identity(lookup: RateLookup) -> float:
    """Collapse a lookup to a number, treating unresolved pairs as 1."""
    if isinstance(lookup, Resolved):
        return lookup.rate
    return 1.0


@dataclass
class CacheStatus:
    """Snapshot of the cache for diagnostics."""

    rates_count: int
    last_update: datetime | None
    is_updating: bool
    rates: dict[str, float] = field(default_factory=dict)


class ExchangeRateService:
    """Exchange rate cache and currency conversion.

    Most callers share one instance through :meth:`get_instance`; tests
    construct their own with stub collaborators.
    """

    _instance: ClassVar[ExchangeRateService | None] = None

    def __init__(
        self,
        api_client: ExchangeRateApiClient | None = None,
        store: RateStore | None = None,
        bus: EventBus | None = None,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize an empty cache.

        Args:
            api_client: Live rate source. Defaults to the configured endpoint.
            store: Persisted rate source. Without one the database tier is
                skipped.
            bus: Event bus receiving refresh and failure notifications.
            ttl: Age after which cached rates are refreshed.
            clock: Returns the current naive UTC time.
        """
        self.api_client = api_client or ExchangeRateApiClient()
        self.store = store
        self.bus = bus or event_bus
        self.ttl = ttl or timedelta(seconds=settings.exchange_rate_ttl_seconds)
        self._clock = clock
        self._rates: dict[RateKey, float] = {}
        self._last_update: datetime | None = None
        self._is_updating = False

    @classmethod
    def get_instance(cls) -> ExchangeRateService:
        """Get the process-wide instance, backed by the application database."""
        if cls._instance is None:
            from carcrm.database import SessionLocal
            from carcrm.services.rate_store import SqlAlchemyRateStore

            cls._instance = cls(store=SqlAlchemyRateStore(SessionLocal))
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the process-wide instance (for testing).

        Does not close the instance's HTTP client; use
        :meth:`close_instance` where an event loop is available.
        """
        cls._instance = None

    @classmethod
    async def close_instance(cls) -> None:
        """Close the process-wide instance's HTTP client and drop it."""
        instance, cls._instance = cls._instance, None
        if instance is not None:
            await instance.close()

    @property
    def last_update(self) -> datetime | None:
        return self._last_update

    @property
    def is_updating(self) -> bool:
        return self._is_updating

    def is_stale(self) -> bool:
        """Whether the next async lookup should refresh first.

        A cache exactly TTL old is stale.
        """
        if self._last_update is None:
            return True
        return self._clock() - self._last_update >= self.ttl

    @staticmethod
    def get_supported_currencies() -> list[CurrencyType]:
        return get_supported_currencies()

    async def get_rate(self, from_currency: str, to_currency: str) -> float:
        """Get the rate converting ``from_currency`` into ``to_currency``.

        Refreshes the cache first when it is stale and no refresh is running.
        Falls back to the hardcoded table, then to 1.
        """
        from_currency = normalize_code(from_currency)
        to_currency = normalize_code(to_currency)
        if from_currency == to_currency:
            return 1.0

        if self.is_stale() and not self._is_updating:
            await self._refresh()

        return rate_or_identity(self._lookup(from_currency, to_currency))

    async def convert_currency(
        self,
        amount: float,
        from_currency: str,
        to_currency: str = BASE_CURRENCY,
    ) -> float:
        """Convert an amount, refreshing rates if needed."""
        rate = await self.get_rate(from_currency, to_currency)
        return amount * rate

    def get_cached_rate(self, from_currency: str, to_currency: str) -> float:
        """Get a rate without any I/O.

        Same lookup chain as :meth:`get_rate` minus the refresh, for code
        that cannot await.
        """
        from_currency = normalize_code(from_currency)
        to_currency = normalize_code(to_currency)
        if from_currency == to_currency:
            return 1.0
        return rate_or_identity(self._lookup(from_currency, to_currency))

    def convert_currency_cached(
        self,
        amount: float,
        from_currency: str,
        to_currency: str = BASE_CURRENCY,
    ) -> float:
        """Convert an amount using only what is already cached."""
        return amount * self.get_cached_rate(from_currency, to_currency)

    async def force_refresh(self) -> None:
        """Mark the cache stale and run the full refresh chain now."""
        self._last_update = None
        await self._refresh()

    def get_cache_status(self) -> CacheStatus:
        """Snapshot the cache; later refreshes do not alter the result."""
        return CacheStatus(
            rates_count=len(self._rates),
            last_update=self._last_update,
            is_updating=self._is_updating,
            rates={f"{src}_{dst}": rate for (src, dst), rate in self._rates.items()},
        )

    def clear(self) -> None:
        """Empty the cache and forget the last refresh."""
        self._rates.clear()
        self._last_update = None
        self._is_updating = False

    async def close(self) -> None:
        """Release the API client's connections."""
        await self.api_client.close()

    def _lookup(self, from_currency: str, to_currency: str) -> RateLookup:
        key = (from_currency, to_currency)
        rate = self._rates.get(key)
        if rate is not None:
            return Resolved(rate, RateSource.CACHE)

        reverse = self._rates.get((to_currency, from_currency))
        if reverse:
            rate = 1 / reverse
            self._rates[key] = rate
            return Resolved(rate, RateSource.DERIVED)

        rate = fallback_rate(from_currency, to_currency)
        if rate is not None:
            return Resolved(rate, RateSource.FALLBACK)

        logger.debug(f"No rate for {from_currency}->{to_currency}, using 1")
        return Unresolved()

    def _replace_rates(self, rates: dict[RateKey, float]) -> None:
        # No await between clear and update: readers on the same loop
        # never see a half-filled table.
        self._rates.clear()
        self._rates.update(rates)

    async def _refresh(self) -> None:
        if self._is_updating:
            return

        self._is_updating = True
        try:
            source = await self._refresh_from_sources()
        finally:
            self._last_update = self._clock()
            self._is_updating = False

        logger.info(
            f"Exchange rates refreshed from {source.value} ({len(self._rates)} rates)"
        )
        await self.bus.publish(
            AppEvent.RATES_REFRESHED,
            {"source": source.value, "rates_count": len(self._rates)},
        )

    async def _refresh_from_sources(self) -> RateSource:
        try:
            await self._load_from_api()
            return RateSource.API
        except ExchangeRateError as e:
            logger.warning(f"Failed to fetch rates from API, trying database: {e}")
            await self._source_failed(RateSource.API, e)

        try:
            await self._load_from_store()
            return RateSource.DATABASE
        except ExchangeRateError as e:
            logger.warning(
                f"Failed to load rates from database, using fallback rates: {e}"
            )
            await self._source_failed(RateSource.DATABASE, e)

        self._replace_rates(dict(FALLBACK_RATES))
        return RateSource.FALLBACK

    async def _source_failed(self, source: RateSource, error: Exception) -> None:
        await self.bus.publish(
            AppEvent.RATE_SOURCE_FAILED,
            {"source": source.value, "error": str(error)},
        )

    async def _load_from_api(self) -> None:
        quoted = await self.api_client.fetch_latest_rates()
        base = BASE_CURRENCY.value

        rates: dict[RateKey, float] = {}
        for currency in get_supported_currencies():
            code = currency.value
            if code == base or code not in quoted:
                continue
            rate = quoted[code]
            rates[(base, code)] = rate
            rates[(code, base)] = 1 / rate

        if not rates:
            raise ExchangeRateError("API response has no rates for supported currencies")

        self._replace_rates(rates)
        await self._persist(rates)

    async def _persist(self, rates: dict[RateKey, float]) -> None:
        if self.store is None:
            return

        now = self._clock()
        records = [
            RateRecord(from_currency=src, to_currency=dst, rate=rate, date=now)
            for (src, dst), rate in rates.items()
        ]
        try:
            await self.store.insert_rate_records(records)
        except ExchangeRateError as e:
            logger.warning(f"Failed to save rates to database: {e}")
            await self.bus.publish(
                AppEvent.RATES_PERSIST_FAILED,
                {"error": str(e), "records": len(records)},
            )

    async def _load_from_store(self) -> None:
        if self.store is None:
            raise RateStoreError("No rate store configured")

        since = self._clock() - self.ttl
        records = await self.store.query_recent_rate_records(since)

        rates: dict[RateKey, float] = {}
        for record in records:
            key = (
                normalize_code(record.from_currency),
                normalize_code(record.to_currency),
            )
            # Newest first: keep the first row seen for each pair.
            if key not in rates and record.rate > 0:
                rates[key] = float(record.rate)

        if not rates:
            raise RateStoreError("No recent rates in database")

        self._replace_rates(rates)


async def get_exchange_rate(from_currency: str, to_currency: str) -> float:
    """Rate lookup on the process-wide service."""
    return await ExchangeRateService.get_instance().get_rate(from_currency, to_currency)


async def convert_currency_async(
    amount: float,
    from_currency: str,
    to_currency: str = BASE_CURRENCY,
) -> float:
    """Conversion on the process-wide service."""
    return await ExchangeRateService.get_instance().convert_currency(
        amount, from_currency, to_currency
    )


async def force_refresh_rates() -> None:
    """Force a refresh of the process-wide service."""
    await ExchangeRateService.get_instance().force_refresh()
