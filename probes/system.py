"""NetworkProbe backed by the host's diagnostic tools.

Every external command runs with an argument list (no shell) and an explicit
timeout. Non-zero exits are returned in the ProbeResult so callers can log the
tool's own error output; only a missing binary, a permission error, or a
timeout raises.
"""
import logging
import socket
import ssl
import subprocess
import time

import psutil

from probes.base import ProbeResult, ProbeUnavailable, TargetUnreachable

logger = logging.getLogger("netwatch.probes")


def _decode(data):
    # TimeoutExpired carries bytes on POSIX even when text=True
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return data or ""


class SystemProbe:
    def __init__(self, timeout=30, config=None):
        cfg = (config or {}).get("probes", {})
        self.timeout = cfg.get("timeout", timeout)
        self.commands = {
            "dig": cfg.get("dig", "dig"),
            "ping": cfg.get("ping", "ping"),
            "iperf3": cfg.get("iperf3", "iperf3"),
            "iptables": cfg.get("iptables", "iptables"),
            "ss": cfg.get("ss", "ss"),
        }

    def _run(self, args, target=None, timeout=None):
        timeout = timeout or self.timeout
        start = time.perf_counter()
        try:
            proc = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            raise ProbeUnavailable(f"{args[0]} not found", target=target)
        except PermissionError as e:
            raise ProbeUnavailable(f"{args[0]}: {e}", target=target)
        except subprocess.TimeoutExpired as e:
            partial = ProbeResult(tuple(args), -1, _decode(e.stdout), _decode(e.stderr))
            raise TargetUnreachable(
                f"{args[0]} timed out after {timeout}s",
                target=target,
                output=partial.output or None,
            )
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(f"{' '.join(args)} -> {proc.returncode} ({elapsed_ms}ms)")
        return ProbeResult(
            command=tuple(args),
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            elapsed_ms=elapsed_ms,
        )

    def interface_address(self, interface):
        """IPv4 address of `interface`, or None if it has none."""
        try:
            addrs = psutil.net_if_addrs()
        except OSError as e:
            raise ProbeUnavailable(f"cannot read interfaces: {e}", target=interface)
        if interface not in addrs:
            raise TargetUnreachable(f"interface {interface} not found", target=interface)
        for addr in addrs[interface]:
            if addr.family == socket.AF_INET:
                return addr.address
        return None

    def resolve(self, domain):
        return self._run([self.commands["dig"], "+short", domain], target=domain)

    def echo(self, host, count=5):
        return self._run([self.commands["ping"], "-c", str(count), host], target=host)

    def throughput(self, server, duration=5):
        return self._run(
            [self.commands["iperf3"], "-c", server, "-t", str(duration)],
            target=server,
            timeout=duration + self.timeout,
        )

    def firewall_rules(self):
        return self._run([self.commands["iptables"], "-L", "-n", "-v"], target="firewall")

    def listening_sockets(self):
        return self._run([self.commands["ss"], "-tuln"], target="sockets")

    def tls_certificate(self, host, port=443):
        """Handshake with the default context and return the peer certificate."""
        context = ssl.create_default_context()
        try:
            with socket.create_connection((host, port), timeout=self.timeout) as sock:
                with context.wrap_socket(sock, server_hostname=host) as tls:
                    cert = tls.getpeercert()
        except ssl.SSLError as e:
            raise TargetUnreachable(f"TLS handshake with {host}:{port} failed: {e}", target=host)
        except OSError as e:
            raise TargetUnreachable(f"cannot connect to {host}:{port}: {e}", target=host)
        return cert or {}
