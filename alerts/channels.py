"""Alert notification channels."""
import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from rich.markup import escape

from utils.log_sink import LogSink

logger = logging.getLogger("netwatch.alerts.channels")


@runtime_checkable
class AlertChannel(Protocol):
    def send(self, alert, sink=None) -> None: ...


class LogChannel:
    """Write the warning line into the observation log of the check that fired."""

    def send(self, alert, sink=None):
        if sink is None:
            return
        sink.record(alert.triggered_at, alert.target, f"{alert.severity}: {alert.message}")


class ConsoleChannel:
    """Print alerts to terminal with rich formatting."""

    def __init__(self, console=None):
        from rich.console import Console
        self.console = console or Console(stderr=True)

    def send(self, alert, sink=None):
        severity_styles = {
            "CRITICAL": "bold white on red",
            "WARNING": "bold yellow",
            "INFO": "bold blue",
        }
        style = severity_styles.get(alert.severity, "bold")
        text = escape(f"[{alert.severity}] {alert.target}: {alert.message}")
        self.console.print(f"[{style}]{text}[/]")


class FileChannel:
    """Append alerts to a JSON lines file for downstream ingestion."""

    def __init__(self, log_path="alerts.jsonl"):
        self.log_path = Path(log_path)
        self._sink = LogSink(self.log_path)

    def send(self, alert, sink=None):
        try:
            self._sink.append(json.dumps(alert.to_dict(), default=str))
        except OSError as e:
            logger.warning(f"Failed to write alert to {self.log_path}: {e}")
