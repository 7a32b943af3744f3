"""Shared test fixtures."""
import logging
import os
import sys
import pytest
from datetime import datetime, timedelta, timezone

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import load_config
from probes.base import ProbeResult

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock; advances by `step` seconds on every call."""

    def __init__(self, start=NOW, step=0):
        self.now = start
        self.step = timedelta(seconds=step)

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current


class FakeProbe:
    """NetworkProbe stand-in. Configure attributes; exceptions are raised when returned."""

    def __init__(self):
        self.addresses = []
        self.resolve_result = ProbeResult(("dig", "+short", "example.com"), 0,
                                          "93.184.216.34\n", "", elapsed_ms=100)
        self.echo_result = ProbeResult(("ping", "-c", "5", "google.com"), 0,
                                       "5 packets transmitted, 5 received, 0% packet loss\n")
        self.throughput_result = ProbeResult(("iperf3", "-c", "google.com", "-t", "5"), 0,
                                             "[  5]   0.00-5.00   sec  56.2 MBytes  94.3 Mbits/sec\n")
        self.firewall_result = ProbeResult(("iptables", "-L", "-n", "-v"), 0,
                                           "Chain INPUT (policy ACCEPT 0 packets, 0 bytes)\n")
        self.sockets_result = ProbeResult(("ss", "-tuln"), 0,
                                          "Netid State  Local Address:Port\ntcp   LISTEN 0.0.0.0:22\n")
        self.certificate = {"notAfter": "Jan 16 12:00:00 2027 GMT"}
        self.calls = []

    @staticmethod
    def _give(value):
        if isinstance(value, Exception):
            raise value
        return value

    def interface_address(self, interface):
        self.calls.append(("interface_address", interface))
        if not self.addresses:
            raise AssertionError("FakeProbe ran out of addresses")
        return self._give(self.addresses.pop(0))

    def resolve(self, domain):
        self.calls.append(("resolve", domain))
        return self._give(self.resolve_result)

    def echo(self, host, count):
        self.calls.append(("echo", host, count))
        return self._give(self.echo_result)

    def throughput(self, server, duration):
        self.calls.append(("throughput", server, duration))
        return self._give(self.throughput_result)

    def firewall_rules(self):
        self.calls.append(("firewall_rules",))
        return self._give(self.firewall_result)

    def listening_sockets(self):
        self.calls.append(("listening_sockets",))
        return self._give(self.sockets_result)

    def tls_certificate(self, host, port):
        self.calls.append(("tls_certificate", host, port))
        return self._give(self.certificate)


def cert_expiring_in(days, now=NOW):
    """A getpeercert()-style dict whose notAfter is `days` after `now`."""
    return {"notAfter": (now + timedelta(days=days)).strftime("%b %d %H:%M:%S %Y GMT")}


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep the rich console handler out of CliRunner output."""
    logger = logging.getLogger("netwatch")
    handler = logging.NullHandler()
    logger.addHandler(handler)
    yield
    logger.removeHandler(handler)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def config(tmp_path):
    cfg = load_config()
    cfg["paths"]["log_dir"] = str(tmp_path)
    return cfg


@pytest.fixture
def monitor(config, probe, clock):
    from monitor.monitor import NetworkMonitor
    from alerts.channels import LogChannel
    return NetworkMonitor(config, probe=probe, channels=[LogChannel()], clock=clock)
