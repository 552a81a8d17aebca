from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    history_entries: int


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - LLM API key check is skipped only when LLM_ADAPTER=mock.
    - Bonus percentage and exchange rate must parse as numbers.
    - History capacity must be a non-negative integer.
    """

    from app.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- LLM API key ----------------------------------------------------
    adapter = os.getenv("LLM_ADAPTER", "openai").strip().lower()
    if adapter not in {"openai", "mock"}:
        errors.append(
            f"LLM_ADAPTER='{adapter}' is not valid. Allowed values: ['mock', 'openai']."
        )
    elif adapter != "mock":
        llm_api_key = os.getenv("LLM_API_KEY", "").strip()
        openai_api_key = os.getenv("OPENAI_API_KEY", "").strip()
        if not llm_api_key and not openai_api_key:
            errors.append(
                "LLM API key is not set. Provide LLM_API_KEY or OPENAI_API_KEY, "
                "or set LLM_ADAPTER=mock."
            )

    # --- Report settings ------------------------------------------------
    # Bonus inputs may be zero or negative; they only need to be numeric.
    for name in ("REPORT_BONUS_PERCENTAGE", "REPORT_EXCHANGE_RATE"):
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            float(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' is not a number.")

    raw_capacity = os.getenv("REPORT_HISTORY_CAPACITY", "").strip()
    if raw_capacity:
        try:
            capacity = int(raw_capacity)
        except ValueError:
            errors.append(f"REPORT_HISTORY_CAPACITY='{raw_capacity}' is not an integer.")
        else:
            if capacity < 0:
                errors.append(f"REPORT_HISTORY_CAPACITY='{raw_capacity}' must not be negative.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Load the persisted history on boot so a corrupt file is reported early."""
    from app.repositories.history_repository import get_history_repository

    repository = get_history_repository()
    logging.getLogger(__name__).info(
        "History loaded from %s with %d entries",
        repository.path,
        len(repository.list_results()),
    )
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Earnings Report API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import report_router
    from app.repositories.history_repository import get_history_repository

    application.include_router(report_router)

    @application.get("/health")
    def healthcheck() -> HealthResponse:
        return HealthResponse(
            status="ok",
            history_entries=len(get_history_repository().list_results()),
        )

    return application


app = create_app()
