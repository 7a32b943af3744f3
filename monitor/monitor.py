"""NetworkMonitor - wires probes, log sinks, rules and channels into checks."""
import logging
import sys
from pathlib import Path
from datetime import datetime, timezone

from alerts.channels import ConsoleChannel, FileChannel, LogChannel
from alerts.engine import ThresholdEvaluator
from alerts.rules_manager import RulesManager
from checks import CHECKS
from config import log_path
from models.observations import PollerConfig
from monitor.poller import InterfacePoller
from probes.system import SystemProbe
from utils.log_sink import LogSink

logger = logging.getLogger("netwatch.monitor")


class NetworkMonitor:
    def __init__(self, config, probe=None, channels=None, clock=None):
        self.config = config
        self.probe = probe or SystemProbe(config=config)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.rules = RulesManager(config)

        if channels is None:
            channels = [LogChannel()]
            alerts_file = config.get("paths", {}).get("alerts_file")
            if alerts_file:
                channels.append(FileChannel(self._resolve(alerts_file)))
            if sys.stderr.isatty():
                channels.append(ConsoleChannel())
        self.evaluator = ThresholdEvaluator(channels, clock=self.clock)

    def _resolve(self, filename):
        path = Path(filename)
        if path.is_absolute():
            return path
        return Path(self.config["paths"]["log_dir"]).expanduser() / path

    def sink_for(self, section):
        return LogSink(log_path(self.config, section))

    def get_check(self, name):
        if name not in CHECKS:
            raise KeyError(f"Unknown check: {name}")
        return CHECKS[name](
            self.probe,
            self.sink_for(name),
            config=self.config,
            evaluator=self.evaluator,
            rules=self.rules,
            clock=self.clock,
        )

    def run_check(self, name, target=None):
        """Run one single-shot check and return its CheckResult."""
        result = self.get_check(name).run(target)
        if result.ok:
            logger.debug(f"{name} {result.target}: ok ({len(result.alerts)} alert(s))")
        return result

    def get_poller(self, interface=None, interval=None):
        cfg = self.config["poller"]
        poller_config = PollerConfig(
            interface=interface or cfg.get("interface", "eth0"),
            interval=interval or cfg.get("interval", 10),
            log_file=cfg.get("log_file", "ip_changes.log"),
        )
        return InterfacePoller(self.probe, self.sink_for("poller"), poller_config, clock=self.clock)
