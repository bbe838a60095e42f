"""Tests for periodic task registration."""

import datetime
from types import SimpleNamespace
from unittest.mock import Mock, patch

import schedule

from orbital.scheduler import PeriodicScheduler


class TestPeriodicScheduler:
    """Tests for PeriodicScheduler."""

    def test_every_registers_job(self):
        scheduler = PeriodicScheduler(schedule.Scheduler())

        task = scheduler.every("alert-check", 300, Mock())

        assert task.interval_seconds == 300
        assert scheduler.tasks == {"alert-check": task}
        assert scheduler.scheduler.jobs == [task.job]

    def test_jobs_run(self):
        scheduler = PeriodicScheduler(schedule.Scheduler())
        tick = Mock()
        scheduler.every("recording", 60, tick)

        scheduler.scheduler.run_all()

        tick.assert_called_once_with()

    def test_failing_tick_does_not_stop_others(self):
        scheduler = PeriodicScheduler(schedule.Scheduler())
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        scheduler.every("alert-check", 60, failing)
        scheduler.every("recording", 60, healthy)

        scheduler.scheduler.run_all()

        failing.assert_called_once()
        healthy.assert_called_once()

    def test_cancel_one_task(self):
        scheduler = PeriodicScheduler(schedule.Scheduler())
        first = scheduler.every("scheduled-delivery", 60, Mock())
        second = scheduler.every("alert-check", 300, Mock())

        first.cancel()

        assert scheduler.scheduler.jobs == [second.job]

    def test_cancel_all(self):
        scheduler = PeriodicScheduler(schedule.Scheduler())
        scheduler.every("scheduled-delivery", 60, Mock())
        scheduler.every("alert-check", 300, Mock())

        scheduler.cancel_all()

        assert scheduler.scheduler.jobs == []
        assert scheduler.tasks == {}

    def test_run_forever_until_stopped(self):
        scheduler = PeriodicScheduler(Mock())
        stops = iter([False, False, True])
        sleeps = []

        scheduler.run_forever(poll_seconds=0.5, sleep=sleeps.append, should_stop=lambda: next(stops))

        assert scheduler.scheduler.run_pending.call_count == 2
        assert sleeps == [0.5, 0.5]

    def test_every_minute_is_anchored_to_the_clock(self):
        scheduler = PeriodicScheduler(schedule.Scheduler())

        task = scheduler.every_minute("scheduled-delivery", Mock())

        assert task.interval_seconds == 60
        assert task.job.unit == "minutes"
        assert task.job.at_time == datetime.time(0, 0, 0)
        assert (task.job.next_run.second, task.job.next_run.microsecond) == (0, 0)

    def test_every_minute_stays_on_the_boundary_after_runs(self):
        """Next run is recomputed from the clock, not from the run's end."""
        scheduler = PeriodicScheduler(schedule.Scheduler())
        tick = Mock()
        task = scheduler.every_minute("scheduled-delivery", tick)

        for _ in range(3):
            scheduler.scheduler.run_all()
            assert (task.job.next_run.second, task.job.next_run.microsecond) == (0, 0)

        assert tick.call_count == 3


class SimulatedDatetime(datetime.datetime):
    """datetime whose now() returns a value the test advances."""
    current = datetime.datetime(2024, 5, 10, 10, 0, 0, 500000)

    @classmethod
    def now(cls, tz=None):
        return cls.current


def simulated_clock():
    module = SimpleNamespace(
        datetime=SimulatedDatetime,
        timedelta=datetime.timedelta,
        time=datetime.time,
    )
    return patch.object(schedule, "datetime", module)


class TestMinuteAlignment:
    """Slow ticks and a 1 s poll must not skip any wall-clock minute."""

    def test_no_minute_is_skipped_over_three_hours(self):
        SimulatedDatetime.current = datetime.datetime(2024, 5, 10, 10, 0, 0, 500000)
        ran_at = []

        def slow_tick():
            ran_at.append(SimulatedDatetime.current.replace(second=0, microsecond=0))
            SimulatedDatetime.current += datetime.timedelta(milliseconds=300)

        with simulated_clock():
            scheduler = PeriodicScheduler(schedule.Scheduler())
            scheduler.every_minute("scheduled-delivery", slow_tick)
            for _ in range(3 * 3600):
                SimulatedDatetime.current += datetime.timedelta(seconds=1)
                scheduler.run_pending()

        assert ran_at[0] == datetime.datetime(2024, 5, 10, 10, 1)
        gaps = [b - a for a, b in zip(ran_at, ran_at[1:])]
        assert set(gaps) == {datetime.timedelta(minutes=1)}
        assert len(ran_at) >= 3 * 60 - 5
