# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from carcrm import __version__
from carcrm.services.exchange_rate_service import ExchangeRateService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    ExchangeRateService.get_instance()
    logger.info("Exchange rate service ready")

    yield

    logger.info("Shutting down exchange rate service...")
    await ExchangeRateService.close_instance()


app = FastAPI(
    title="Car Export CRM",
    description="Car import/export CRM with multi-currency exchange rates",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include API router after it's created
from carcrm.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
