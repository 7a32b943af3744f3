"""Exposure auditor: point-in-time snapshot of firewall rules and listening sockets."""
import logging

from checks.base import BaseCheck
from models.enums import CheckName
from models.observations import Observation
from probes.base import ProbeError, ProbeUnavailable

logger = logging.getLogger("netwatch.checks.audit")


class ExposureAuditCheck(BaseCheck):
    name = CheckName.AUDIT.value
    section = "firewall_audit"
    default_target = "localhost"

    def observe(self, target, result):
        failed = []
        for label, call in (
            ("firewall rules", self.probe.firewall_rules),
            ("listening sockets", self.probe.listening_sockets),
        ):
            now = self.clock()
            try:
                probe_result = call()
            except ProbeError as e:
                self.log_error(target, e)
                failed.append(e)
                continue
            self.sink.record(
                now, target,
                f"{label}: {probe_result.command_line} (exit {probe_result.returncode})",
                raw=probe_result.output,
            )
            result.observations.append(Observation(
                check=self.name,
                target=target,
                metric=label.replace(" ", "_"),
                value=probe_result.returncode,
                raw=probe_result.output,
                timestamp=now,
            ))
            if not probe_result.ok:
                # iptables exits non-zero without root
                error = ProbeUnavailable(
                    f"{probe_result.command[0]} exited {probe_result.returncode}", target=target,
                )
                self.log_error(target, error)
                failed.append(error)

        if failed:
            result.error = failed[0]
            logger.error(f"audit incomplete: {failed[0]}")
