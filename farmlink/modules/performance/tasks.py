"""Celery tasks for performance scoring: nightly recalculation."""

from __future__ import annotations

import asyncio
import logging

from celery_app import celery
from farmlink.database.engine import async_session

logger = logging.getLogger(__name__)


# ── Async implementations ────────────────────────────────────────────────────


async def _recompute_all_performance_async() -> int:
    """Recompute every ACTIVE/PROBATIONARY farmer's score and commit."""
    from farmlink.modules.performance.service import SCHEDULED_REASON, PerformanceService

    async with async_session() as session:
        svc = PerformanceService(session)
        try:
            updated = await svc.recompute_all(reason=SCHEDULED_REASON)
            await session.commit()
            return updated
        except Exception:
            await session.rollback()
            logger.exception("Scheduled performance recalculation failed")
            raise


# ── Celery task definitions ──────────────────────────────────────────────────


@celery.task(
    name="farmlink.modules.performance.tasks.recompute_all_performance",
    bind=True,
    max_retries=2,
)
def recompute_all_performance(self) -> int:
    """Nightly: refresh scores so time-based inputs (late weeks, grace periods) stay current."""
    try:
        return asyncio.run(_recompute_all_performance_async())
    except Exception as exc:
        logger.exception("recompute_all_performance failed")
        raise self.retry(exc=exc, countdown=300)
