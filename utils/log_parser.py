"""Parse observation logs back into structured entries."""
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from utils.formatters import parse_address

LINE_RE = re.compile(
    r"^(?P<timestamp>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[+-]\d{2}:\d{2}|Z)?)"
    r" - (?P<target>\S+) - (?P<message>.*)$"
)

FIELD_PATTERNS = [
    re.compile(r"^IP changed from (?P<old>\S+) to (?P<new>\S+)$"),
    re.compile(r"^DNS lookup took (?P<duration_ms>\d+) ms$"),
    re.compile(r"^certificate expires (?P<expires>\S+) \((?P<days_remaining>-?\d+) days? remaining\)$"),
    re.compile(r"^WARNING: (?P<warning>.*)$"),
    re.compile(r"^ERROR \[(?P<error_kind>[a-z-]+)\]: (?P<error>.*)$"),
    re.compile(r"^(?P<section>[a-z][a-z ]+): (?P<command>.+?)(?: \(exit (?P<exit_code>-?\d+)\))?$"),
]

INT_FIELDS = {"duration_ms", "days_remaining", "exit_code"}


@dataclass
class LogEntry:
    timestamp: datetime
    target: str
    message: str
    raw_lines: list = field(default_factory=list)
    fields: dict = field(default_factory=dict)

    @property
    def level(self):
        if "warning" in self.fields:
            return "WARNING"
        if "error" in self.fields:
            return "ERROR"
        return "INFO"

    @property
    def raw(self):
        return "\n".join(self.raw_lines)


def extract_fields(message):
    for pattern in FIELD_PATTERNS:
        m = pattern.match(message)
        if not m:
            continue
        fields = {k: v for k, v in m.groupdict().items() if v is not None}
        for key in INT_FIELDS & fields.keys():
            fields[key] = int(fields[key])
        if "expires" in fields:
            fields["expires"] = datetime.fromisoformat(fields["expires"])
        for key in ("old", "new"):
            if key in fields:
                fields[key] = parse_address(fields[key])
        return fields
    return {}


def parse_line(line):
    """Parse one header line. Returns None for raw or unrecognised lines."""
    m = LINE_RE.match(line.rstrip("\n"))
    if not m:
        return None
    ts = m.group("timestamp").replace("Z", "+00:00")
    message = m.group("message")
    return LogEntry(
        timestamp=datetime.fromisoformat(ts),
        target=m.group("target"),
        message=message,
        fields=extract_fields(message),
    )


def parse_lines(lines):
    entries = []
    current = None
    for line in lines:
        line = line.rstrip("\n")
        if not line:
            continue
        if line.startswith("    ") and current is not None:
            current.raw_lines.append(line[4:])
            continue
        entry = parse_line(line)
        if entry is not None:
            entries.append(entry)
            current = entry
    return entries


def parse_log(path):
    path = Path(path)
    if not path.exists():
        return []
    with open(path, encoding="utf-8") as f:
        return parse_lines(f)
