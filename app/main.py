import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Awaitable, Callable, List

from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from app.api.middleware import SecurityHeadersMiddleware
from app.api.routes import acquisition, health, lawsuits, notifications, privacy, saved_searches, sources, users
from app.core.config import settings
from app.core.db import SessionLocal
from app.core.encryption import is_pii_encryption_configured
from app.core.logging import get_logger
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.services.acquisition_service import AcquisitionService

PROJECT_ROOT = Path(__file__).resolve().parent.parent

log = get_logger("app")


def run_migrations() -> None:
    """Upgrade the schema to the latest Alembic revision."""
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(cfg, "head")
    log.info("Database schema is at head")


async def run_acquisition_pipeline() -> None:
    """One pass over every registered source, highest priority first."""
    with SessionLocal() as db:
        results = await AcquisitionService(db).run_all()

    failed = sorted(name for name, result in results.items() if not result.get("success"))
    processed = sum(result.get("records_processed", 0) for result in results.values())
    if failed:
        log.warning(f"Acquisition pass finished with failures: {', '.join(failed)}")
    log.info(f"Acquisition pass stored {processed} lawsuits from {len(results)} sources")


async def run_periodically(
    name: str,
    interval: float,
    job: Callable[[], Awaitable[None]],
    run_immediately: bool = False,
) -> None:
    """Run ``job`` every ``interval`` seconds until cancelled. Job errors are logged, never fatal."""
    log.info(f"Periodic task {name} started (interval: {interval}s)")
    first = run_immediately
    while True:
        try:
            if not first:
                await asyncio.sleep(interval)
            first = False
            await job()
        except asyncio.CancelledError:
            log.info(f"Periodic task {name} cancelled")
            raise
        except Exception:
            log.exception(f"Periodic task {name} failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(f"Starting class action finder API ({settings.ENV})")
    if not is_pii_encryption_configured():
        if settings.is_production:
            log.error("DATA_ENCRYPTION_KEY or PII_HASH_KEY is not set; storing PII will fail")
        else:
            log.warning("DATA_ENCRYPTION_KEY or PII_HASH_KEY is not set; PII encryption is unavailable")

    if settings.MIGRATE_ON_STARTUP:
        try:
            run_migrations()
        except Exception:
            log.exception("Database migration failed, refusing to start")
            raise

    tasks: List[asyncio.Task] = []
    if settings.ACQUISITION_ENABLED:
        tasks.append(
            asyncio.create_task(
                run_periodically(
                    "acquisition",
                    settings.ACQUISITION_INTERVAL_SECONDS,
                    run_acquisition_pipeline,
                    run_immediately=True,
                )
            )
        )
    else:
        log.info("Scheduled acquisition disabled (ACQUISITION_ENABLED=false)")

    yield

    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    log.info("Background tasks stopped")


app = FastAPI(
    title="Class Action Lawsuit Finder",
    description="Lawsuit discovery, notifications and privacy services for class-action claimants",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
    debug=settings.debug_enabled,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(SecurityHeadersMiddleware)

for module in (health, lawsuits, users, saved_searches, notifications, sources, acquisition, privacy):
    app.include_router(module.router)
