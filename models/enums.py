"""Enums for checks, severity, and probe error kinds."""
from enum import Enum


class CheckName(str, Enum):
    INTERFACE = "interface_poller"
    DNS = "dns_check"
    HEALTH = "network_health"
    AUDIT = "firewall_audit"
    SSL = "ssl_expiry"


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class ErrorKind(str, Enum):
    PROBE_UNAVAILABLE = "probe-unavailable"
    TARGET_UNREACHABLE = "target-unreachable"
    PARSE_FAILURE = "parse-failure"
