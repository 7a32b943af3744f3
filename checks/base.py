"""Shared shape of the single-shot checks.

A check resolves its target, probes, appends the observation to its own log
and evaluates its threshold rule. Probe failures are classified, written to
the same log as an ERROR line, and reported through a non-zero exit code.
"""
import logging
from datetime import datetime, timezone

from models.observations import CheckResult
from probes.base import ProbeError

logger = logging.getLogger("netwatch.checks")


class BaseCheck:
    name = ""
    section = ""
    default_target = ""
    target_key = "target"

    def __init__(self, probe, sink, config=None, evaluator=None, rules=None, clock=None):
        self.probe = probe
        self.sink = sink
        self.config = config or {}
        self.evaluator = evaluator
        self.rules = rules
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def settings(self):
        return self.config.get(self.section, {})

    def resolve_target(self, target=None):
        return target or self.settings.get(self.target_key) or self.default_target

    def run(self, target=None):
        target = self.resolve_target(target)
        result = CheckResult(check=self.name, target=target)
        try:
            self.observe(target, result)
        except ProbeError as e:
            result.error = e
            self.log_error(target, e)
        return result

    def observe(self, target, result):
        raise NotImplementedError

    def log_error(self, target, error, raw=None):
        logger.error(f"{self.name} {target}: [{error.kind}] {error}")
        self.sink.record(self.clock(), target, f"ERROR [{error.kind}]: {error}",
                         raw=raw or getattr(error, "output", None))

    def check_threshold(self, rule_id, value, target, message, result):
        if self.evaluator is None or self.rules is None:
            return None
        rule = self.rules.get_rule(rule_id)
        if rule is None:
            return None
        alert = self.evaluator.evaluate(rule, value, target, message=message, sink=self.sink)
        if alert is not None:
            logger.warning(f"{target}: {message}")
            result.alerts.append(alert)
        return alert
