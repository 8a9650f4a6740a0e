# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Persistence adapter for exchange rate records."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carcrm.models.exchange_rate import ExchangeRate
from carcrm.services.rate_api_client import ExchangeRateError

logger = logging.getLogger(__name__)


class RateStoreError(ExchangeRateError):
    """The rate store could not be read or written."""


@dataclass(frozen=True)
class RateRecord:
    """A rate to be written to the store."""

    from_currency: str
    to_currency: str
    rate: float
    date: datetime


@dataclass(frozen=True)
class StoredRateRecord:
    """A rate read back from the store."""

    from_currency: str
    to_currency: str
    rate: float
    created_at: datetime


class RateStore(ABC):
    """What the exchange rate cache needs from persistence."""

    @abstractmethod
    async def insert_rate_records(self, records: list[RateRecord]) -> None:
        """Append rate records.

        Raises:
            RateStoreError: If the records could not be written.
        """

    @abstractmethod
    async def query_recent_rate_records(
        self, since: datetime
    ) -> list[StoredRateRecord]:
        """Return records created at or after ``since``, newest first.

        Raises:
            RateStoreError: If the store could not be queried.
        """


class SqlAlchemyRateStore(RateStore):
    """Rate store backed by the ``exchange_rates`` table.

    Opens a short-lived session per call, so one store can serve a
    process-wide cache. Session work runs in a worker thread so a slow
    database never blocks the event loop.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        """Initialize the store.

        Args:
            session_factory: Callable returning a new SQLAlchemy session.
        """
        self._session_factory = session_factory

    async def insert_rate_records(self, records: list[RateRecord]) -> None:
        if not records:
            return

        await asyncio.to_thread(self._insert, records)
        logger.debug(f"Stored {len(records)} exchange rate records")

    async def query_recent_rate_records(
        self, since: datetime
    ) -> list[StoredRateRecord]:
        return await asyncio.to_thread(self._query_since, since)

    def _insert(self, records: list[RateRecord]) -> None:
        db = self._session_factory()
        try:
            db.add_all(
                ExchangeRate(
                    from_currency=record.from_currency,
                    to_currency=record.to_currency,
                    rate=record.rate,
                    date=record.date,
                )
                for record in records
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise RateStoreError(f"Failed to save exchange rates: {e}") from e
        finally:
            db.close()

    def _query_since(self, since: datetime) -> list[StoredRateRecord]:
        db = self._session_factory()
        try:
            rows = db.scalars(
                select(ExchangeRate)
                .where(ExchangeRate.created_at >= since)
                .order_by(ExchangeRate.created_at.desc())
            ).all()
            return [
                StoredRateRecord(
                    from_currency=row.from_currency,
                    to_currency=row.to_currency,
                    rate=row.rate,
                    created_at=row.created_at,
                )
                for row in rows
            ]
        except SQLAlchemyError as e:
            raise RateStoreError(f"Failed to load exchange rates: {e}") from e
        finally:
            db.close()
