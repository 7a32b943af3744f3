"""Certificate-expiry checker: handshake, read notAfter, warn when close."""
import logging
import ssl
from datetime import datetime, timezone

from checks.base import BaseCheck
from models.enums import CheckName
from models.observations import Observation
from probes.base import ParseFailure
from utils.formatters import format_days, format_timestamp

logger = logging.getLogger("netwatch.checks.ssl")

SECONDS_PER_DAY = 86400


def parse_not_after(cert, target=None):
    """Return the certificate's notAfter as an aware UTC datetime."""
    not_after = (cert or {}).get("notAfter")
    if not not_after:
        raise ParseFailure("certificate has no notAfter field", target=target)
    try:
        epoch = ssl.cert_time_to_seconds(not_after)
    except (ValueError, TypeError) as e:
        raise ParseFailure(f"malformed notAfter {not_after!r}: {e}", target=target)
    return datetime.fromtimestamp(epoch, tz=timezone.utc)


class CertExpiryCheck(BaseCheck):
    name = CheckName.SSL.value
    section = "ssl_expiry"
    default_target = "example.com"
    target_key = "domain"

    def observe(self, domain, result):
        port = self.settings.get("port", 443)
        cert = self.probe.tls_certificate(domain, port)
        expires = parse_not_after(cert, target=domain)

        now = self.clock()
        seconds_remaining = (expires - now).total_seconds()
        days_remaining = int(seconds_remaining // SECONDS_PER_DAY)

        self.sink.record(
            now, domain,
            f"certificate expires {format_timestamp(expires)} ({format_days(days_remaining)} remaining)",
        )
        result.observations.append(Observation(
            check=self.name,
            target=domain,
            metric="not_after",
            value=expires,
            raw=cert.get("notAfter", ""),
            timestamp=now,
        ))
        logger.info(f"{domain}:{port} certificate expires {format_timestamp(expires)}")

        warn_days = self.settings.get("warn_days", 30)
        self.check_threshold(
            "cert_expiring", seconds_remaining, domain,
            f"certificate for {domain} expires in {format_days(days_remaining)} "
            f"(threshold {warn_days} days)",
            result,
        )
