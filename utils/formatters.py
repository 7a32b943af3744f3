"""Formatting utilities for log lines and display."""
from datetime import datetime, timezone

NO_ADDRESS = "none"


def format_timestamp(ts):
    """ISO-8601 timestamp, second precision, as written to observation logs."""
    if ts is None:
        return "N/A"
    if isinstance(ts, str):
        return ts
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.isoformat(timespec="seconds")


def format_address(addr):
    """Render an interface address; a missing address becomes 'none'."""
    return addr if addr else NO_ADDRESS


def parse_address(text):
    return None if text == NO_ADDRESS else text


def format_ms(value):
    if value is None:
        return "N/A"
    return f"{int(value)} ms"


def format_days(days):
    """'1 day', '12 days', '-3 days'."""
    if days is None:
        return "N/A"
    unit = "day" if abs(days) == 1 else "days"
    return f"{days} {unit}"


def indent_raw(text, prefix="    "):
    """Indent raw tool output so it can't be mistaken for a log header line."""
    if not text:
        return []
    return [f"{prefix}{line}" for line in text.rstrip("\n").splitlines()]


def time_ago(dt):
    """Return human-readable time since dt. E.g., '3h ago', '2d ago'."""
    if dt is None:
        return "N/A"
    now = datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = now - dt
    seconds = max(0, int(delta.total_seconds()))

    if seconds < 60:
        return f"{seconds}s ago"
    elif seconds < 3600:
        return f"{seconds // 60}m ago"
    elif seconds < 86400:
        return f"{seconds // 3600}h ago"
    else:
        return f"{seconds // 86400}d ago"
