"""Worker process for scheduled leave balance jobs.

Runs an asyncio loop that recomputes every leave summary once a day and
carries unused annual leave into the new year on Jan 1.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from leave_engine.config import configure_logging, get_settings
from leave_engine.db import session_scope
from leave_engine.services.dates import today_utc

logger = logging.getLogger(__name__)


def is_carry_over_day(day: date) -> bool:
    return day.month == 1 and day.day == 1


async def run_daily_jobs(today: date) -> None:
    """Run the jobs due on ``today``. Failures are logged, never raised."""
    from leave_engine.services.carryover import run_carry_over
    from leave_engine.services.recompute import run_recomputation

    # Carry-over first so the recomputed current year sees the carried days.
    if is_carry_over_day(today):
        try:
            async with session_scope() as session:
                co_result = await run_carry_over(session, today.year - 1, today.year, today=today)
            logger.info(
                "Carry-over run for %s: carried=%d skipped=%d",
                today,
                len(co_result.items),
                len(co_result.skipped),
            )
        except Exception:
            logger.exception("Carry-over run failed for %s", today)

    try:
        async with session_scope() as session:
            result = await run_recomputation(session, today)
        logger.info(
            "Recomputation run for %s: updated=%d created=%d skipped=%d",
            today,
            result.updated_count,
            result.created_count,
            len(result.skipped),
        )
    except Exception:
        logger.exception("Recomputation run failed for %s", today)


async def run_worker_loop() -> None:
    """Main worker loop."""
    interval = get_settings().worker_interval_seconds
    logger.info("Leave balance worker started (interval=%ds)", interval)

    while True:
        await run_daily_jobs(today_utc())
        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker process."""
    configure_logging()
    asyncio.run(run_worker_loop())


if __name__ == "__main__":
    main()
