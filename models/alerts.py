"""Dataclasses for threshold rules and alert records."""
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class ThresholdRule:
    id: str = ""
    name: str = ""
    metric: str = ""
    operator: str = ">"
    threshold: float = 0.0
    severity: str = "WARNING"
    description: str = ""


@dataclass
class AlertRecord:
    rule_id: str = ""
    rule_name: str = ""
    target: str = ""
    metric_value: float = 0.0
    threshold: float = 0.0
    severity: str = "WARNING"
    message: str = ""
    triggered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "timestamp": self.triggered_at.isoformat(),
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "target": self.target,
            "severity": self.severity,
            "metric_value": self.metric_value,
            "threshold": self.threshold,
            "message": self.message,
        }
