"""Resolution latency checker: one lookup, timed, with a slow-lookup warning."""
import logging

from checks.base import BaseCheck
from models.enums import CheckName
from models.observations import Observation
from probes.base import TargetUnreachable
from utils.formatters import format_ms

logger = logging.getLogger("netwatch.checks.dns")


class DNSLatencyCheck(BaseCheck):
    name = CheckName.DNS.value
    section = "dns_check"
    default_target = "example.com"
    target_key = "domain"

    def observe(self, domain, result):
        probe_result = self.probe.resolve(domain)
        records = probe_result.stdout.strip()
        if not probe_result.ok or not records:
            detail = probe_result.output or "no records returned"
            raise TargetUnreachable(f"DNS resolution of {domain} failed", target=domain, output=detail)

        duration_ms = int(probe_result.elapsed_ms)
        now = self.clock()
        self.sink.record(now, domain, f"DNS lookup took {duration_ms} ms", raw=records)
        result.observations.append(Observation(
            check=self.name,
            target=domain,
            metric="duration_ms",
            value=duration_ms,
            raw=records,
            timestamp=now,
        ))
        logger.info(f"{domain} resolved in {format_ms(duration_ms)}")

        threshold = self.settings.get("threshold_ms", 500)
        self.check_threshold(
            "dns_slow", duration_ms, domain,
            f"DNS lookup took {duration_ms} ms (threshold {threshold} ms)",
            result,
        )
