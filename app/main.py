from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool
    ingestion_running: bool


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A PostgreSQL database URL must be configured.
    - Mailbox credentials are required whenever MAIL_ENABLED is not false.
    - INGESTION_CRON must be a valid five-field crontab expression.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    database_url = os.getenv("DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    local_database_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    if not database_url and not cloud_database_url and not local_database_url:
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL or LOCAL_DATABASE_URL."
        )

    # --- Mailbox ----------------------------------------------------------
    mail_enabled_raw = os.getenv("MAIL_ENABLED", "true").strip().lower()
    if mail_enabled_raw in {"1", "true", "yes", "on"}:
        if not os.getenv("GRAPH_CLIENT_ID", "").strip():
            errors.append(
                "GRAPH_CLIENT_ID is not set but MAIL_ENABLED is true. "
                "Set GRAPH_CLIENT_ID or disable mail ingestion with MAIL_ENABLED=false."
            )
        if not os.getenv("GRAPH_REFRESH_TOKEN", "").strip() and not os.getenv(
            "GRAPH_REFRESH_TOKEN_FILE", ""
        ).strip():
            errors.append(
                "No Graph refresh token configured. Set GRAPH_REFRESH_TOKEN or GRAPH_REFRESH_TOKEN_FILE."
            )

    # --- Schedule ---------------------------------------------------------
    cron = os.getenv("INGESTION_CRON", "").strip()
    if cron:
        from apscheduler.triggers.cron import CronTrigger

        try:
            CronTrigger.from_crontab(cron)
        except ValueError as exc:
            errors.append(f"INGESTION_CRON={cron!r} is not a valid crontab expression: {exc}")

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


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema, start the scheduler on boot; shut it down on exit."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    application.state.scheduler = scheduler
    logging.getLogger(__name__).info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Hotel Forecast Snapshot API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import comparison_router, hotels_router, ingestion_router

    application.include_router(hotels_router)
    application.include_router(comparison_router)
    application.include_router(ingestion_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        from app.services.ingestion_cycle_service import get_ingestion_cycle_runner

        scheduler = getattr(application.state, "scheduler", None)
        return HealthResponse(
            status="ok",
            scheduler_running=bool(scheduler is not None and scheduler.running),
            ingestion_running=get_ingestion_cycle_runner().is_running,
        )

    return application


app = create_app()
