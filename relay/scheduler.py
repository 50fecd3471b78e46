"""
APScheduler wiring: run the processing cycle on a fixed interval.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from relay.models import CycleResult
from relay.pipeline import CycleCoordinator

logger = logging.getLogger(__name__)

JOB_ID = "processing_cycle"


class CycleScheduler:
    def __init__(
        self,
        coordinator: CycleCoordinator,
        interval_seconds: int,
        scheduler: Optional[BackgroundScheduler] = None,
    ) -> None:
        self.coordinator = coordinator
        self.interval_seconds = interval_seconds
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    def start(self, run_immediately: bool = True) -> None:
        """Register the interval job and start the background thread."""
        job_options = {}
        if run_immediately:
            # An explicit None would add the job paused, so only pass a real time
            job_options["next_run_time"] = datetime.now(timezone.utc)
        self.scheduler.add_job(
            self._tick,
            "interval",
            seconds=self.interval_seconds,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **job_options,
        )
        self.scheduler.start()
        logger.info("Background processing scheduled every %ss.", self.interval_seconds)

    def trigger(self) -> CycleResult:
        """Run one cycle now, in the caller's thread."""
        return self.coordinator.run()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def _tick(self) -> None:
        logger.info("Background thread waking up for processing cycle.")
        self.coordinator.run()
