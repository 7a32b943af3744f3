"""Latency/throughput probe: ping and iperf3 output, logged verbatim."""
import logging

from checks.base import BaseCheck
from models.enums import CheckName
from models.observations import Observation
from probes.base import ProbeError, TargetUnreachable

logger = logging.getLogger("netwatch.checks.health")


class NetworkHealthCheck(BaseCheck):
    name = CheckName.HEALTH.value
    section = "network_health"
    default_target = "google.com"
    target_key = "host"

    def observe(self, host, result):
        count = self.settings.get("ping_count", 5)
        duration = self.settings.get("iperf_duration", 5)
        server = self.settings.get("iperf_server") or host

        failed = []
        for label, call in (
            ("latency probe", lambda: self.probe.echo(host, count)),
            ("throughput probe", lambda: self.probe.throughput(server, duration)),
        ):
            now = self.clock()
            try:
                probe_result = call()
            except ProbeError as e:
                # one probe failing does not stop the other from being recorded
                self.log_error(host, e)
                failed.append(e)
                continue
            self.sink.record(
                now, host,
                f"{label}: {probe_result.command_line} (exit {probe_result.returncode})",
                raw=probe_result.output,
            )
            result.observations.append(Observation(
                check=self.name,
                target=host,
                metric=label.replace(" ", "_"),
                value=probe_result.returncode,
                raw=probe_result.output,
                timestamp=now,
            ))
            if not probe_result.ok:
                error = TargetUnreachable(
                    f"{probe_result.command[0]} exited {probe_result.returncode}", target=host,
                )
                self.log_error(host, error)
                failed.append(error)

        if failed:
            # every failure is already in the log; keep the first for the exit code
            result.error = failed[0]
            logger.error(f"{host}: {len(failed)} of 2 probes failed")
