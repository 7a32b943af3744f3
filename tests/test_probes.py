"""Tests for SystemProbe with subprocess, psutil and ssl mocked out."""
import socket
import ssl
import subprocess
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from probes.base import NetworkProbe, ParseFailure, ProbeResult, ProbeUnavailable, TargetUnreachable
from probes.system import SystemProbe
from checks.cert_expiry import parse_not_after


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def sysprobe():
    return SystemProbe(timeout=3)


def test_system_probe_satisfies_protocol(sysprobe, probe):
    assert isinstance(sysprobe, NetworkProbe)
    assert isinstance(probe, NetworkProbe)


def test_resolve_measures_elapsed_ms(sysprobe):
    with patch("probes.system.subprocess.run", return_value=_completed(stdout="93.184.216.34\n")) as run, \
         patch("probes.system.time.perf_counter", side_effect=[10.0, 10.75] + [11.0] * 10):
        result = sysprobe.resolve("example.com")
    run.assert_called_once()
    assert run.call_args.args[0] == ["dig", "+short", "example.com"]
    assert run.call_args.kwargs["timeout"] == 3
    assert result.elapsed_ms == 750
    assert result.ok


def test_commands(sysprobe):
    with patch("probes.system.subprocess.run", return_value=_completed()) as run:
        sysprobe.echo("google.com", 5)
        sysprobe.throughput("google.com", 5)
        sysprobe.firewall_rules()
        sysprobe.listening_sockets()
    argvs = [c.args[0] for c in run.call_args_list]
    assert argvs == [
        ["ping", "-c", "5", "google.com"],
        ["iperf3", "-c", "google.com", "-t", "5"],
        ["iptables", "-L", "-n", "-v"],
        ["ss", "-tuln"],
    ]
    # iperf3 gets its run time on top of the probe timeout
    assert run.call_args_list[1].kwargs["timeout"] == 8


def test_nonzero_exit_returned_not_raised(sysprobe):
    with patch("probes.system.subprocess.run",
               return_value=_completed(2, "", "ping: unknown host\n")):
        result = sysprobe.echo("nope.invalid", 5)
    assert result.returncode == 2
    assert result.output == "ping: unknown host"


def test_missing_binary(sysprobe):
    with patch("probes.system.subprocess.run", side_effect=FileNotFoundError()):
        with pytest.raises(ProbeUnavailable, match="iperf3 not found"):
            sysprobe.throughput("google.com", 5)


def test_permission_error(sysprobe):
    with patch("probes.system.subprocess.run", side_effect=PermissionError("denied")):
        with pytest.raises(ProbeUnavailable):
            sysprobe.firewall_rules()


def test_timeout(sysprobe):
    with patch("probes.system.subprocess.run", side_effect=subprocess.TimeoutExpired(["dig"], 3)):
        with pytest.raises(TargetUnreachable, match="timed out"):
            sysprobe.resolve("example.com")


def test_timeout_keeps_partial_output(sysprobe):
    expired = subprocess.TimeoutExpired(["ping"], 3, output=b"PING google.com 56 data bytes\n", stderr=b"")
    with patch("probes.system.subprocess.run", side_effect=expired):
        with pytest.raises(TargetUnreachable) as exc:
            sysprobe.echo("google.com")
    assert exc.value.output == "PING google.com 56 data bytes"


def test_timeout_of_real_process_keeps_output():
    sp = SystemProbe(timeout=1)
    script = "import time; print('PING 64 bytes from host', flush=True); time.sleep(5)"
    with pytest.raises(TargetUnreachable, match="timed out") as exc:
        sp._run([sys.executable, "-c", script], target="host")
    assert "PING 64 bytes from host" in exc.value.output


def test_configured_commands():
    sp = SystemProbe(config={"probes": {"timeout": 5, "ss": "/usr/sbin/ss"}})
    with patch("probes.system.subprocess.run", return_value=_completed()) as run:
        sp.listening_sockets()
    assert run.call_args.args[0][0] == "/usr/sbin/ss"
    assert run.call_args.kwargs["timeout"] == 5


def test_probe_result_output():
    r = ProbeResult(("ping",), 1, "partial\n", "error\n")
    assert r.output == "partial\nerror"
    assert r.command_line == "ping"
    assert not r.ok


# ── interface address ──────────────────────────────────

def _addr(family, address):
    return SimpleNamespace(family=family, address=address)


def test_interface_address(sysprobe):
    addrs = {"eth0": [_addr(socket.AF_INET6, "fe80::1"), _addr(socket.AF_INET, "10.0.0.5")]}
    with patch("probes.system.psutil.net_if_addrs", return_value=addrs):
        assert sysprobe.interface_address("eth0") == "10.0.0.5"


def test_interface_without_ipv4(sysprobe):
    addrs = {"eth0": [_addr(socket.AF_INET6, "fe80::1")]}
    with patch("probes.system.psutil.net_if_addrs", return_value=addrs):
        assert sysprobe.interface_address("eth0") is None


def test_interface_not_found(sysprobe):
    with patch("probes.system.psutil.net_if_addrs", return_value={"lo": []}):
        with pytest.raises(TargetUnreachable, match="eth0 not found"):
            sysprobe.interface_address("eth0")


# ── TLS ────────────────────────────────────────────────

def test_tls_certificate(sysprobe):
    tls = MagicMock()
    tls.__enter__.return_value.getpeercert.return_value = {"notAfter": "Jan 16 12:00:00 2027 GMT"}
    context = MagicMock()
    context.wrap_socket.return_value = tls
    with patch("probes.system.socket.create_connection") as conn, \
         patch("probes.system.ssl.create_default_context", return_value=context):
        cert = sysprobe.tls_certificate("example.com", 443)
    conn.assert_called_once_with(("example.com", 443), timeout=3)
    assert context.wrap_socket.call_args.kwargs["server_hostname"] == "example.com"
    assert cert["notAfter"] == "Jan 16 12:00:00 2027 GMT"


def test_tls_handshake_failure(sysprobe):
    context = MagicMock()
    context.wrap_socket.side_effect = ssl.SSLError("certificate verify failed")
    with patch("probes.system.socket.create_connection"), \
         patch("probes.system.ssl.create_default_context", return_value=context):
        with pytest.raises(TargetUnreachable, match="handshake"):
            sysprobe.tls_certificate("self-signed.badssl.com", 443)


def test_tls_connect_failure(sysprobe):
    with patch("probes.system.socket.create_connection", side_effect=ConnectionRefusedError()):
        with pytest.raises(TargetUnreachable, match="cannot connect"):
            sysprobe.tls_certificate("example.com", 443)


def test_parse_not_after():
    expires = parse_not_after({"notAfter": "Jan 16 12:00:00 2027 GMT"})
    assert (expires.year, expires.month, expires.day, expires.hour) == (2027, 1, 16, 12)
    assert expires.utcoffset().total_seconds() == 0
    with pytest.raises(ParseFailure):
        parse_not_after({})
    with pytest.raises(ParseFailure):
        parse_not_after({"notAfter": "not a date"})


def test_tls_connect_timeout(sysprobe):
    with patch("probes.system.socket.create_connection", side_effect=socket.timeout("timed out")):
        with pytest.raises(TargetUnreachable, match="cannot connect"):
            sysprobe.tls_certificate("example.com", 443)
