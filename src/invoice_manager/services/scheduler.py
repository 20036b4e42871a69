"""Periodic demo-data reseeding in a background thread."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from invoice_manager.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class SchedulerStatus:
    is_running: bool
    is_seeding: bool
    last_run: datetime | None
    next_run: datetime | None
    run_count: int
    error_count: int
    interval_seconds: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_running": self.is_running,
            "is_seeding": self.is_seeding,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "next_run": self.next_run.isoformat() if self.next_run else None,
            "run_count": self.run_count,
            "error_count": self.error_count,
            "interval_seconds": self.interval_seconds,
        }


class ReseedScheduler:
    """Runs ``seed_fn`` immediately on start and then on a fixed interval.

    Each run makes up to ``max_retries`` attempts separated by
    ``retry_delay_seconds``. A run that starts while another is still in
    progress is skipped. Failed attempts are counted and logged; the loop
    keeps going until :meth:`stop` is called.
    """

    def __init__(
        self,
        seed_fn: Callable[[], Any],
        interval_seconds: float = 3600.0,
        max_retries: int = 3,
        retry_delay_seconds: float = 5.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._seed_fn = seed_fn
        self.interval_seconds = interval_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_run: datetime | None = None
        self._run_count = 0
        self._error_count = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the background loop. Returns False if it is already running."""
        if self.is_running:
            logger.warning("scheduler_already_running")
            return False

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="reseed-scheduler", daemon=True
        )
        self._thread.start()
        logger.info("scheduler_started", interval_seconds=self.interval_seconds)
        return True

    def stop(self, timeout: float | None = None) -> bool:
        """Signal the loop to end and wait for it.

        Returns False if the loop was not running, or if it is still finishing
        a seeding cycle when ``timeout`` expires. In that case the handle is
        kept, so :meth:`start` refuses until the old loop has exited.
        """
        if self._thread is None:
            logger.warning("scheduler_not_running")
            return False

        self._stop_event.set()
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("scheduler_stop_timed_out", timeout=timeout)
            return False
        self._thread = None
        logger.info("scheduler_stopped")
        return True

    def wait(self, timeout: float | None = None) -> None:
        """Block until the loop ends (e.g. after :meth:`stop` from a signal)."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def run_once(self) -> bool:
        """Run one seeding cycle with retries.

        Returns True when an attempt succeeded, False when every attempt
        failed or the cycle was skipped because another is in progress.
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning("seeding_skipped", reason="previous run still in progress")
            return False

        try:
            logger.info("seeding_cycle_started")
            for attempt in range(1, self.max_retries + 1):
                try:
                    self._seed_fn()
                except Exception as exc:
                    with self._state_lock:
                        self._error_count += 1
                    logger.error(
                        "seeding_attempt_failed",
                        attempt=attempt,
                        max_retries=self.max_retries,
                        error=str(exc),
                    )
                    if attempt < self.max_retries:
                        if self._stop_event.wait(self.retry_delay_seconds):
                            return False
                    continue

                with self._state_lock:
                    self._run_count += 1
                    self._last_run = datetime.now(UTC)
                    run_count = self._run_count
                logger.info("seeding_completed", attempt=attempt, run_count=run_count)
                return True

            logger.error("seeding_cycle_failed", attempts=self.max_retries)
            return False
        finally:
            self._run_lock.release()

    def status(self) -> SchedulerStatus:
        with self._state_lock:
            last_run = self._last_run
            run_count = self._run_count
            error_count = self._error_count
        running = self.is_running
        next_run = (
            last_run + timedelta(seconds=self.interval_seconds)
            if running and last_run
            else None
        )
        return SchedulerStatus(
            is_running=running,
            is_seeding=self._run_lock.locked(),
            last_run=last_run,
            next_run=next_run,
            run_count=run_count,
            error_count=error_count,
            interval_seconds=self.interval_seconds,
        )

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            self.run_once()
            if self._stop_event.wait(self.interval_seconds):
                break


__all__ = ["ReseedScheduler", "SchedulerStatus"]
