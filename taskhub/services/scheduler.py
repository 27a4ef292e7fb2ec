# taskhub/services/scheduler.py
"""
Scheduler service for periodic deadline checks
"""

import asyncio
import logging
from typing import Any, Dict

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from taskhub.config import settings
from taskhub.services.deadline_notifications import run_deadline_checks_in_background

logger = logging.getLogger(__name__)


class DeadlineScheduler:
    """Runs the deadline notification checks on a fixed interval"""

    def __init__(self, interval_minutes: int = None):
        self.scheduler = AsyncIOScheduler()
        self.interval_minutes = interval_minutes or settings.DEADLINE_SCHEDULER_INTERVAL_MINUTES
        self.is_running = False

    def start(self):
        """Start the scheduler"""
        if self.is_running:
            return
        self.scheduler.add_job(
            self.check_deadlines,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id="check_deadlines",
            name="Check Task Deadlines",
            replace_existing=True,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info(f"Deadline scheduler started (every {self.interval_minutes} minutes)")

    def stop(self):
        """Stop the scheduler"""
        if self.is_running:
            self.scheduler.shutdown()
            self.is_running = False
            logger.info("Deadline scheduler stopped")

    async def check_deadlines(self):
        """Run both deadline checks off the event loop"""
        logger.info("Running scheduled deadline check...")
        result = await asyncio.to_thread(run_deadline_checks_in_background, False)
        if result:
            logger.info(f"Scheduled deadline check created {result['totalNotificationsCreated']} notifications")

    def get_scheduler_status(self) -> Dict[str, Any]:
        """Get scheduler status and job information"""
        if not self.is_running:
            return {"status": "stopped", "jobs": []}

        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger),
            })
        return {"status": "running", "jobs": jobs}


deadline_scheduler = DeadlineScheduler()
