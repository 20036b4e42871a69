"""Tests for the background reseed scheduler."""

import threading
import time

import pytest

from invoice_manager.services.scheduler import ReseedScheduler


class FlakySeed:
    """Fails the first ``failures`` calls, then succeeds."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"seed failure {self.calls}")


class TestRunOnce:
    def test_success_on_first_attempt(self) -> None:
        seed = FlakySeed()
        scheduler = ReseedScheduler(seed, retry_delay_seconds=0)

        assert scheduler.run_once() is True

        status = scheduler.status()
        assert seed.calls == 1
        assert status.run_count == 1
        assert status.error_count == 0
        assert status.last_run is not None

    def test_retries_until_success(self) -> None:
        seed = FlakySeed(failures=2)
        scheduler = ReseedScheduler(seed, max_retries=3, retry_delay_seconds=0)

        assert scheduler.run_once() is True

        status = scheduler.status()
        assert seed.calls == 3
        assert status.run_count == 1
        assert status.error_count == 2

    def test_gives_up_after_max_retries(self) -> None:
        seed = FlakySeed(failures=10)
        scheduler = ReseedScheduler(seed, max_retries=3, retry_delay_seconds=0)

        assert scheduler.run_once() is False

        status = scheduler.status()
        assert seed.calls == 3
        assert status.run_count == 0
        assert status.error_count == 3
        assert status.last_run is None

    def test_overlapping_run_is_skipped(self) -> None:
        entered = threading.Event()
        release = threading.Event()
        calls = []

        def slow_seed() -> None:
            calls.append(1)
            entered.set()
            release.wait(5)

        scheduler = ReseedScheduler(slow_seed, retry_delay_seconds=0)
        worker = threading.Thread(target=scheduler.run_once)
        worker.start()
        assert entered.wait(5)

        assert scheduler.status().is_seeding is True
        assert scheduler.run_once() is False

        release.set()
        worker.join(5)
        assert len(calls) == 1
        assert scheduler.status().run_count == 1


class TestLifecycle:
    def test_start_runs_immediately_and_stops(self) -> None:
        ran = threading.Event()
        scheduler = ReseedScheduler(ran.set, interval_seconds=3600)

        assert scheduler.start() is True
        assert ran.wait(5)

        status = scheduler.status()
        assert status.is_running is True
        assert scheduler.stop(timeout=5) is True
        assert scheduler.is_running is False

    def test_next_run_is_one_interval_after_last(self) -> None:
        ran = threading.Event()
        scheduler = ReseedScheduler(ran.set, interval_seconds=600)
        scheduler.start()
        assert ran.wait(5)

        for _ in range(50):
            status = scheduler.status()
            if status.last_run is not None:
                break
            time.sleep(0.01)
        scheduler.stop(timeout=5)

        assert status.next_run is not None
        assert (status.next_run - status.last_run).total_seconds() == 600

    def test_start_twice(self) -> None:
        scheduler = ReseedScheduler(lambda: None, interval_seconds=3600)
        scheduler.start()

        assert scheduler.start() is False
        scheduler.stop(timeout=5)

    def test_restart_waits_for_loop_stuck_in_seeding(self) -> None:
        entered = threading.Event()
        release = threading.Event()

        def slow_seed() -> None:
            entered.set()
            release.wait(5)

        scheduler = ReseedScheduler(
            slow_seed, interval_seconds=3600, retry_delay_seconds=0
        )
        scheduler.start()
        assert entered.wait(5)

        assert scheduler.stop(timeout=0.01) is False
        assert scheduler.is_running is True
        assert scheduler.start() is False
        loops = [t for t in threading.enumerate() if t.name == "reseed-scheduler"]
        assert len(loops) == 1

        release.set()
        assert scheduler.stop(timeout=5) is True
        assert scheduler.is_running is False
        assert scheduler.start() is True
        assert scheduler.stop(timeout=5) is True

    def test_stop_when_not_running(self) -> None:
        assert ReseedScheduler(lambda: None).stop() is False

    def test_status_to_dict(self) -> None:
        data = ReseedScheduler(lambda: None, interval_seconds=60).status().to_dict()

        assert data["is_running"] is False
        assert data["next_run"] is None
        assert data["interval_seconds"] == 60

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"interval_seconds": 0}, "interval_seconds"),
            ({"max_retries": 0}, "max_retries"),
        ],
    )
    def test_rejects_invalid_settings(self, kwargs: dict, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            ReseedScheduler(lambda: None, **kwargs)
