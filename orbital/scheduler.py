"""Periodic job registration on top of the `schedule` library.

Each tick is registered as its own job with its own cancellation handle.
`run_pending` runs due jobs one after another on the calling thread, so
tick bodies never overlap. Tick functions can also be called directly.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import schedule


logger = logging.getLogger(__name__)


@dataclass
class PeriodicTask:
    """A registered periodic job.

    Attributes:
        name: Job name used in logs
        interval_seconds: Interval between runs
        job: Underlying schedule.Job
    """
    name: str
    interval_seconds: int
    job: schedule.Job
    scheduler: schedule.Scheduler = field(repr=False)

    def cancel(self) -> None:
        """Stop this job; other jobs keep running."""
        self.scheduler.cancel_job(self.job)
        logger.info("Cancelled periodic task %s", self.name)


def _guarded(name: str, tick: Callable[[], Any]) -> Callable[[], None]:
    """Wrap a tick so an exception is logged instead of killing the loop."""
    def run() -> None:
        try:
            tick()
        except Exception:
            logger.exception("Periodic task %s failed", name)
    return run


class PeriodicScheduler:
    """Owns a schedule.Scheduler and the tasks registered on it."""

    def __init__(self, scheduler: schedule.Scheduler | None = None) -> None:
        self.scheduler = scheduler or schedule.Scheduler()
        self.tasks: dict[str, PeriodicTask] = {}

    def every(
        self,
        name: str,
        interval_seconds: int,
        tick: Callable[[], Any],
    ) -> PeriodicTask:
        """Register a tick to run every interval_seconds.

        Args:
            name: Job name
            interval_seconds: Interval between runs
            tick: Zero-argument callable

        Returns:
            PeriodicTask handle
        """
        job = self.scheduler.every(interval_seconds).seconds.do(_guarded(name, tick))
        return self._register(name, interval_seconds, job)

    def every_minute(self, name: str, tick: Callable[[], Any]) -> PeriodicTask:
        """Register a tick on second ':00' of every wall-clock minute.

        The next run is anchored to the clock, not to when the previous
        run finished, so a slow tick never pushes a later run past a
        minute boundary.
        """
        job = self.scheduler.every().minute.at(":00").do(_guarded(name, tick))
        return self._register(name, 60, job)

    def _register(self, name: str, interval_seconds: int, job: schedule.Job) -> PeriodicTask:
        task = PeriodicTask(
            name=name,
            interval_seconds=interval_seconds,
            job=job,
            scheduler=self.scheduler,
        )
        self.tasks[name] = task
        logger.info("Registered periodic task %s every %ds", name, interval_seconds)
        return task

    def run_pending(self) -> None:
        self.scheduler.run_pending()

    def cancel_all(self) -> None:
        for task in list(self.tasks.values()):
            task.cancel()
        self.tasks.clear()

    def run_forever(
        self,
        poll_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        should_stop: Callable[[], bool] = lambda: False,
    ) -> None:
        """Run due jobs until should_stop returns True."""
        while not should_stop():
            self.scheduler.run_pending()
            sleep(poll_seconds)
