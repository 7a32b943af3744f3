"""In-process scheduler for the single-shot checks."""
import logging
import threading

import schedule

logger = logging.getLogger("netwatch.scheduler")


class CheckScheduler:
    def __init__(self, monitor, intervals=None):
        """
        Args:
            monitor: NetworkMonitor used to run each check
            intervals: {check_name: minutes}; defaults to the `schedule` config section
        """
        self.monitor = monitor
        self.intervals = intervals if intervals is not None else dict(monitor.config.get("schedule", {}))
        self.scheduler = schedule.Scheduler()
        self._stop = threading.Event()
        self._thread = None
        self._callbacks = []
        self.failures = {name: 0 for name in self.intervals}
        self.runs = {name: 0 for name in self.intervals}

    def on_result(self, callback):
        """Register callback called with each CheckResult."""
        self._callbacks.append(callback)

    def _register(self):
        self.scheduler.clear()
        for name, minutes in self.intervals.items():
            if not minutes:
                continue
            self.scheduler.every(minutes).minutes.do(self._run_job, name)

    def _run_job(self, name):
        self.runs[name] = self.runs.get(name, 0) + 1
        try:
            result = self.monitor.run_check(name)
        except Exception as e:
            self.failures[name] = self.failures.get(name, 0) + 1
            logger.error(f"{name} crashed: {e}", exc_info=True)
            return

        if result.ok:
            self.failures[name] = 0
        else:
            self.failures[name] = self.failures.get(name, 0) + 1
            logger.error(f"{name} failed ({self.failures[name]} consecutive): {result.error}")
            if self.failures[name] >= 5:
                logger.critical(f"{name}: 5+ consecutive failures")

        for cb in self._callbacks:
            try:
                cb(result)
            except Exception as e:
                logger.warning(f"Callback error: {e}")

    def run_all(self):
        """Run every scheduled check once, immediately."""
        for name, minutes in self.intervals.items():
            if minutes:
                self._run_job(name)

    def run_forever(self, stop_event=None, tick=1):
        """Run pending jobs until stop_event is set."""
        stop = stop_event or self._stop
        self._register()
        logger.info("Scheduler started: " + ", ".join(
            f"{name} every {m}m" for name, m in self.intervals.items() if m
        ))
        self.run_all()
        while not stop.wait(tick):
            self.scheduler.run_pending()
        self.scheduler.clear()
        logger.info("Scheduler stopped")

    def start(self):
        """Start the scheduler in a background thread."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None
