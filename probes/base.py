"""Probe capability interface, raw results, and the probe error taxonomy."""
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from models.enums import ErrorKind


class ProbeError(Exception):
    """A single probe failed. Carries the target and a classified kind."""

    kind = ErrorKind.TARGET_UNREACHABLE.value

    def __init__(self, message, target=None, output=None):
        super().__init__(message)
        self.target = target
        self.output = output


class ProbeUnavailable(ProbeError):
    """Tool or library missing, or permission denied."""
    kind = ErrorKind.PROBE_UNAVAILABLE.value


class TargetUnreachable(ProbeError):
    """Network, DNS, or TLS failure, timeout, or unknown interface."""
    kind = ErrorKind.TARGET_UNREACHABLE.value


class ParseFailure(ProbeError):
    """Expected field absent from probe output."""
    kind = ErrorKind.PARSE_FAILURE.value


@dataclass(frozen=True)
class ProbeResult:
    command: tuple
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0

    @property
    def ok(self):
        return self.returncode == 0

    @property
    def output(self):
        """Combined stdout and stderr, as a shell redirect `2>&1` would show it."""
        parts = [p.rstrip("\n") for p in (self.stdout, self.stderr) if p and p.strip()]
        return "\n".join(parts)

    @property
    def command_line(self):
        return " ".join(self.command)


@runtime_checkable
class NetworkProbe(Protocol):
    def interface_address(self, interface: str) -> Optional[str]: ...

    def resolve(self, domain: str) -> ProbeResult: ...

    def echo(self, host: str, count: int) -> ProbeResult: ...

    def throughput(self, server: str, duration: int) -> ProbeResult: ...

    def firewall_rules(self) -> ProbeResult: ...

    def listening_sockets(self) -> ProbeResult: ...

    def tls_certificate(self, host: str, port: int) -> dict: ...
