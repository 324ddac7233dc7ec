"""Acquisition entrypoint - Standalone script for running acquisition jobs.

Usage:
    python -m app.acquisition_entrypoint                 # Run all sources
    python -m app.acquisition_entrypoint <source_id>     # Run a single source
"""

import asyncio
import sys
import uuid

from app.core.db import SessionLocal
from app.core.logging import get_logger
from app.services.acquisition_service import AcquisitionService

logger = get_logger("acquisition_entrypoint")


async def run_acquisition_job(source_id: uuid.UUID):
    """Run acquisition for a single source."""
    logger.info(f"Starting acquisition job for source: {source_id}")
    with SessionLocal() as db:
        result = await AcquisitionService(db).run(source_id)
        logger.info(f"Acquisition job completed for {source_id}: {result}")
        return result


async def run_all_sources():
    """Run acquisition for all sources."""
    logger.info("Running acquisition for all sources")
    with SessionLocal() as db:
        results = await AcquisitionService(db).run_all()
        logger.info(f"Acquisition completed for all sources: {results}")
        return results


def main(argv=None):
    """Main entry point for the acquisition pipeline."""
    argv = sys.argv[1:] if argv is None else argv
    logger.info("Acquisition pipeline starting...")

    if argv:
        try:
            source_id = uuid.UUID(argv[0])
        except ValueError:
            logger.error(f"Invalid source id: {argv[0]}. Must be a data source UUID")
            sys.exit(1)
        try:
            result = asyncio.run(run_acquisition_job(source_id))
        except Exception as exc:
            logger.error(f"Acquisition job failed for {source_id}: {exc}")
            sys.exit(1)
    else:
        result = asyncio.run(run_all_sources())
        # Exit with error code if any source failed
        if any(not r.get("success", False) for r in result.values()):
            sys.exit(1)

    logger.info(f"Acquisition pipeline completed: {result}")
    return result


if __name__ == "__main__":
    main()
