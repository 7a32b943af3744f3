"""Dataclasses for observations, poll state, and check results."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def utcnow():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Observation:
    check: str
    target: str
    metric: str = ""
    value: object = None
    raw: str = ""
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self):
        """Flatten into a JSON-friendly dict."""
        value = self.value.isoformat() if isinstance(self.value, datetime) else self.value
        return {
            "timestamp": self.timestamp.isoformat(),
            "check": self.check,
            "target": self.target,
            "metric": self.metric,
            "value": value,
            "raw": self.raw,
        }


@dataclass(frozen=True)
class ChangeEvent:
    interface: str
    old: Optional[str]
    new: Optional[str]
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class PollerConfig:
    interface: str = "eth0"
    interval: float = 10.0
    log_file: str = "ip_changes.log"


@dataclass
class PollState:
    """Last known address for one polling loop. Never persisted."""
    last_value: Optional[str] = None
    initialized: bool = False
    changes: int = 0
    failures: int = 0


@dataclass
class CheckResult:
    check: str
    target: str
    observations: list = field(default_factory=list)
    alerts: list = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def exit_code(self):
        return 0 if self.error is None else 1

    @property
    def ok(self):
        return self.error is None

    def to_dict(self):
        return {
            "check": self.check,
            "target": self.target,
            "ok": self.ok,
            "error": str(self.error) if self.error else None,
            "error_kind": getattr(self.error, "kind", None),
            "observations": [o.to_dict() for o in self.observations],
            "alerts": [a.to_dict() for a in self.alerts],
        }
