"""Utility modules for netwatch."""
from utils.logger import setup_logging
from utils.formatters import format_timestamp, format_address, format_ms, format_days, time_ago
from utils.log_sink import LogSink
from utils.log_parser import parse_log, parse_line, LogEntry
