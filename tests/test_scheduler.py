"""Tests for the in-process check scheduler."""
import threading

from models.observations import CheckResult
from monitor.scheduler import CheckScheduler
from probes.base import TargetUnreachable


class StubMonitor:
    def __init__(self, fail=(), crash=()):
        self.config = {"schedule": {"dns_check": 5, "ssl_expiry": 1440, "network_health": 0}}
        self.fail = set(fail)
        self.crash = set(crash)
        self.calls = []

    def run_check(self, name, target=None):
        self.calls.append(name)
        if name in self.crash:
            raise RuntimeError("unexpected")
        result = CheckResult(check=name, target="example.com")
        if name in self.fail:
            result.error = TargetUnreachable("down")
        return result


def test_run_all_skips_disabled():
    monitor = StubMonitor()
    scheduler = CheckScheduler(monitor)
    scheduler.run_all()
    assert monitor.calls == ["dns_check", "ssl_expiry"]


def test_failures_counted_and_reset():
    monitor = StubMonitor(fail={"dns_check"})
    scheduler = CheckScheduler(monitor)
    scheduler.run_all()
    scheduler.run_all()
    assert scheduler.failures["dns_check"] == 2
    assert scheduler.failures["ssl_expiry"] == 0

    monitor.fail.clear()
    scheduler.run_all()
    assert scheduler.failures["dns_check"] == 0
    assert scheduler.runs["dns_check"] == 3


def test_crash_does_not_stop_other_checks():
    monitor = StubMonitor(crash={"dns_check"})
    scheduler = CheckScheduler(monitor)
    scheduler.run_all()
    assert monitor.calls == ["dns_check", "ssl_expiry"]
    assert scheduler.failures["dns_check"] == 1


def test_callbacks_receive_results():
    seen = []
    scheduler = CheckScheduler(StubMonitor())
    scheduler.on_result(seen.append)
    scheduler.on_result(lambda r: 1 / 0)
    scheduler.run_all()
    assert [r.check for r in seen] == ["dns_check", "ssl_expiry"]


def test_register_jobs():
    scheduler = CheckScheduler(StubMonitor())
    scheduler._register()
    assert len(scheduler.scheduler.get_jobs()) == 2


def test_run_forever_stops():
    monitor = StubMonitor()
    scheduler = CheckScheduler(monitor)
    stop = threading.Event()
    scheduler.on_result(lambda r: stop.set())
    scheduler.run_forever(stop, tick=0)
    assert "dns_check" in monitor.calls
    assert scheduler.scheduler.get_jobs() == []


def test_start_stop_thread():
    scheduler = CheckScheduler(StubMonitor(), intervals={"dns_check": 5})
    scheduler.start()
    scheduler.stop()
    assert scheduler._thread is None
