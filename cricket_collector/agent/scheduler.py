"""
Periodic collect-and-submit loop.
"""

import logging
import threading
import time
from enum import Enum

from cricket_collector.config import Settings
from cricket_collector.forwarder import Forwarder, SubmissionResult
from cricket_collector.metrics import MetricsCollector

logger = logging.getLogger(__name__)

# Long intervals are waited out in slices the platform timer accepts
MAX_WAIT_SECONDS = 3600.0


class SchedulerState(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"


class Scheduler:
    """
    Runs one collection cycle immediately, then one per tick.

    Ticks fall on a fixed cadence measured from start(), independent of
    how long a cycle takes. A tick that comes due during a cycle runs as
    soon as the cycle ends; any further ticks missed meanwhile are dropped.
    """

    def __init__(
        self,
        settings: Settings,
        collector: MetricsCollector | None = None,
        forwarder: Forwarder | None = None,
    ):
        self.settings = settings
        self.interval = float(settings.collect_interval)
        self.collector = collector or MetricsCollector(settings)
        self.forwarder = forwarder or Forwarder(settings)
        self._stop_event = threading.Event()
        self._thread = None
        self.state = SchedulerState.IDLE

    def run_cycle(self) -> SubmissionResult | None:
        """Collect one snapshot and submit it. Never raises."""
        self.state = SchedulerState.COLLECTING
        try:
            snapshot = self.collector.collect()
            result = self.forwarder.submit(snapshot)
        except Exception:
            logger.exception("Error in metrics collection cycle")
            return None
        finally:
            self.state = SchedulerState.IDLE

        if result.ok:
            logger.info(f"Metrics submitted for {snapshot.server_name}")
        else:
            logger.error(f"Error sending metrics: {result.reason}")
        return result

    def run(self):
        """Run the collection loop until stop() is called"""
        started = time.monotonic()
        logger.info(f"Starting metrics collection every {self.settings.collect_interval}s")

        self.run_cycle()
        next_tick = started + self.interval

        while not self._stop_event.is_set():
            delay = next_tick - time.monotonic()
            if delay > 0:
                if self._stop_event.wait(min(delay, MAX_WAIT_SECONDS)):
                    break
                if next_tick > time.monotonic():
                    continue

            self.run_cycle()

            next_tick += self.interval
            now = time.monotonic()
            if next_tick <= now:
                # Keep only the latest tick that came due during the cycle
                missed = int((now - next_tick) // self.interval)
                next_tick += missed * self.interval

        logger.info("Metrics collection loop finished.")

    def start(self) -> threading.Thread:
        """Start the collection loop in a background thread"""
        if self._thread and self._thread.is_alive():
            logger.warning("Scheduler already running")
            return self._thread

        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None):
        """Signal the loop to stop; an in-flight cycle is not interrupted"""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
