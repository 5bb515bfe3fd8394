import logging
import os
import signal
import time
from collections.abc import Callable

from django.db import close_old_connections

from core import exceptions, sentry

logger = logging.getLogger(__name__)

Sweep = Callable[[], int | None]


class LoopingTimer:
    """
    Triggers check() to be true once every `interval`.
    """

    next_run: float | None = None

    def __init__(self, interval: float, trigger_at_start=True):
        self.interval = interval
        self.trigger_at_start = trigger_at_start

    def check(self) -> bool:
        # See if it's our first time being called
        if self.next_run is None:
            # Set up the next call based on trigger_at_start
            if self.trigger_at_start:
                self.next_run = time.monotonic()
            else:
                self.next_run = time.monotonic() + self.interval
        # See if it's time to run the next call
        if time.monotonic() >= self.next_run:
            self.next_run = time.monotonic() + self.interval
            return True
        return False


class SweepRunner:
    """
    Runs a set of named expiry sweeps on a fixed interval.
    Designed to run either indefinitely, or just for a few seconds.

    Sweeps are independent and idempotent, so one failing is logged and
    reported without stopping the others.
    """

    def __init__(
        self,
        sweeps: dict[str, Sweep],
        interval: int = 3600,
        liveness_file: str | None = None,
        run_for: int = 0,
        watchdog: bool = True,
    ):
        self.sweeps = sweeps
        self.interval = interval
        self.liveness_file = liveness_file
        self.run_for = run_for
        self.watchdog = watchdog
        self.loop_delay = min(5.0, max(interval / 10, 0.1))
        if self.watchdog:
            # Set up SIGALRM handler
            signal.signal(signal.SIGALRM, self.alarm_handler)

    def run(self):
        sentry.set_gnap_app("cleanup")
        self.started = time.monotonic()
        self.timer = LoopingTimer(self.interval)
        logger.info("Running sweep loop every %ss", self.interval)
        try:
            while True:
                if self.timer.check():
                    if self.watchdog:
                        # Each call cancels the previous alarm
                        signal.alarm(max(int(self.interval * 2), 60))
                    if self.liveness_file:
                        with open(self.liveness_file, "w") as fh:
                            fh.write(str(int(time.time())))
                    self.run_single_cycle()
                    close_old_connections()
                # Are we in limited run mode?
                if self.run_for and (time.monotonic() - self.started) > self.run_for:
                    break
                time.sleep(self.loop_delay)
        except KeyboardInterrupt:
            pass
        if self.watchdog:
            signal.alarm(0)
        logger.info("Sweep loop complete")

    def run_single_cycle(self) -> dict[str, int | None]:
        """
        Runs every sweep once, returning what each one reported.
        """
        results: dict[str, int | None] = {}
        for name, sweep in self.sweeps.items():
            with sentry.start_transaction(op="task", name=f"cleanup.{name}"):
                try:
                    results[name] = sweep()
                except Exception as e:
                    exceptions.capture_exception(e)
                    logger.exception("Sweep %s failed", name)
                    results[name] = None
                else:
                    logger.info("Sweep %s: %s affected", name, results[name])
        return results

    def alarm_handler(self, signum, frame):
        """
        Called when SIGALRM fires, which means we missed a sweep.
        Just exit as we're likely deadlocked.
        """
        logger.critical("Watchdog timeout exceeded")
        os._exit(2)
