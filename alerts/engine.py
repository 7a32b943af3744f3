"""Threshold evaluation and alert dispatch."""
import logging
from datetime import datetime, timezone

from alerts.channels import AlertChannel
from models.alerts import AlertRecord

logger = logging.getLogger("netwatch.alerts.engine")

OPERATOR_MAP = {
    "<": lambda v, t: v < t,
    ">": lambda v, t: v > t,
    "<=": lambda v, t: v <= t,
    ">=": lambda v, t: v >= t,
    "==": lambda v, t: v == t,
    "!=": lambda v, t: v != t,
}


class ThresholdEvaluator:
    def __init__(self, channels=None, clock=None):
        for channel in channels or []:
            if not isinstance(channel, AlertChannel):
                raise TypeError(f"{channel!r} is not an alert channel")
        self.channels = channels or []
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _evaluate_condition(self, value, operator, threshold):
        if value is None:
            return False
        func = OPERATOR_MAP.get(operator)
        if func is None:
            logger.warning(f"Unknown operator {operator!r}")
            return False
        return func(value, threshold)

    def evaluate(self, rule, value, target, message=None, sink=None):
        """Compare one value against one rule. Returns an AlertRecord or None.

        When the rule fires the record is dispatched to every channel; `sink`
        is passed through so log channels can write into the check's own log.
        """
        if not self._evaluate_condition(value, rule.operator, rule.threshold):
            return None

        record = AlertRecord(
            rule_id=rule.id,
            rule_name=rule.name,
            target=target,
            metric_value=value,
            threshold=rule.threshold,
            severity=rule.severity,
            message=message or f"{rule.metric} = {value} {rule.operator} {rule.threshold}",
            triggered_at=self.clock(),
        )
        self._dispatch(record, sink)
        return record

    def _dispatch(self, record, sink=None):
        for channel in self.channels:
            try:
                channel.send(record, sink=sink)
            except Exception as e:
                logger.warning(f"Channel dispatch error: {e}")
