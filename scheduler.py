import logging
from datetime import date
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from config import get_settings
from database import session_scope
from errors import StoreError
from services import RecurringObligationService, users_with_active_obligations


logger = logging.getLogger(__name__)


def reconcile_all_users(session_factory=session_scope, today: Optional[date] = None) -> int:
    generated = 0
    with session_factory() as session:
        user_ids = users_with_active_obligations(session)
    for user_id in user_ids:
        with session_factory() as session:
            try:
                result = RecurringObligationService(session, user_id).reconcile(today)
            except StoreError as exc:
                logger.warning(f"reconcile_failed: user={user_id} error={exc}")
                continue
            if result.failures:
                logger.warning(
                    f"reconcile_partial: user={user_id} period={result.period} "
                    f"generated={result.generated} failed={len(result.failures)}"
                )
            generated += result.generated
    return generated


class SchedulerManager:
    def __init__(self) -> None:
        settings = get_settings()
        self.settings = settings
        self.scheduler = BackgroundScheduler(timezone=settings.timezone)

    def _run_job(self, source: str = "manual") -> None:
        logger.info(f"scheduler_run: source={source}")
        count = reconcile_all_users()
        logger.info(f"scheduler_run: source={source} transactions_generated={count}")

    def start(self) -> None:
        self._run_job("startup")

        hour = self.settings.reconcile_hour
        minute = self.settings.reconcile_minute
        trigger = CronTrigger(hour=hour, minute=minute)
        self.scheduler.add_job(
            self._run_job,
            trigger,
            args=[f"daily_{hour:02d}:{minute:02d}"],
            id="reconcile_daily",
            replace_existing=True,
            misfire_grace_time=3600,
        )

        trigger = IntervalTrigger(hours=1)
        self.scheduler.add_job(
            self._run_job,
            trigger,
            args=["hourly_safety_net"],
            id="reconcile_hourly_safety",
            replace_existing=True,
            misfire_grace_time=300,
        )

        self.scheduler.start()
        logger.info(
            f"Scheduler started with daily {hour:02d}:{minute:02d} and hourly safety net"
        )

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
