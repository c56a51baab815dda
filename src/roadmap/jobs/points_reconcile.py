"""Background scheduler for nightly points reconciliation."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from ..core.database import SessionLocal, session_scope
from ..services.reconcile_service import reconcile_points

logger = logging.getLogger(__name__)

_scheduler = AsyncIOScheduler(timezone="UTC")


async def _execute_reconcile() -> None:
    try:
        with session_scope(SessionLocal) as session:
            summary = reconcile_points(session, repair=True)
        logger.info("points reconciliation completed: %s", summary)
    except Exception:  # pragma: no cover - safeguard for background job
        logger.exception("points reconciliation job failed")
        raise


@_scheduler.scheduled_job("cron", hour=2, minute=30, id="points_reconcile", misfire_grace_time=3600)
async def _scheduled_job() -> None:
    await _execute_reconcile()


def register_scheduler(app: FastAPI) -> None:
    """Attach APScheduler lifecycle hooks to the FastAPI app."""

    @app.on_event("startup")
    async def start_scheduler() -> None:
        if not _scheduler.running:
            _scheduler.start()
            logger.info("points reconciliation scheduler started")

    @app.on_event("shutdown")
    async def shutdown_scheduler() -> None:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
            logger.info("points reconciliation scheduler stopped")


def run_reconcile_once(*, repair: bool = True) -> dict[str, int]:
    """Convenience helper to run the reconciliation synchronously."""

    with session_scope(SessionLocal) as session:
        return reconcile_points(session, repair=repair)
