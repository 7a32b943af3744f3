"""Single-shot network checks."""
from checks.base import BaseCheck
from checks.dns_latency import DNSLatencyCheck
from checks.network_health import NetworkHealthCheck
from checks.exposure_audit import ExposureAuditCheck
from checks.cert_expiry import CertExpiryCheck

CHECKS = {
    "dns_check": DNSLatencyCheck,
    "network_health": NetworkHealthCheck,
    "firewall_audit": ExposureAuditCheck,
    "ssl_expiry": CertExpiryCheck,
}
