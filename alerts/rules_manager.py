"""Threshold rules built from config."""
import logging

from models.alerts import ThresholdRule
from models.enums import Severity

logger = logging.getLogger("netwatch.alerts.rules")

SECONDS_PER_DAY = 86400
VALID_OPERATORS = {"<", ">", "<=", ">=", "==", "!="}


class RulesManager:
    def __init__(self, config=None):
        self.config = config or {}
        self.rules = {}
        self.load()

    def load(self):
        dns_cfg = self.config.get("dns_check", {})
        ssl_cfg = self.config.get("ssl_expiry", {})

        threshold_ms = dns_cfg.get("threshold_ms", 500)
        warn_days = ssl_cfg.get("warn_days", 30)

        self.rules = {
            "dns_slow": ThresholdRule(
                id="dns_slow",
                name="Slow DNS lookup",
                metric="duration_ms",
                operator=dns_cfg.get("operator", ">"),
                threshold=float(threshold_ms),
                severity=Severity.WARNING.value,
                description=f"DNS resolution slower than {threshold_ms} ms",
            ),
            # Strictly less than: a certificate with exactly warn_days left does not fire.
            "cert_expiring": ThresholdRule(
                id="cert_expiring",
                name="Certificate expiring",
                metric="seconds_remaining",
                operator=ssl_cfg.get("operator", "<"),
                threshold=float(warn_days * SECONDS_PER_DAY),
                severity=Severity.WARNING.value,
                description=f"Certificate expires within {warn_days} days",
            ),
        }
        for rule in list(self.rules.values()):
            if rule.operator not in VALID_OPERATORS:
                logger.warning(f"Invalid operator in rule {rule.id}: {rule.operator}")
                del self.rules[rule.id]

    def get_rule(self, rule_id):
        return self.rules.get(rule_id)

    def get_all_rules(self):
        return list(self.rules.values())
