"""Logging configuration."""
import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level="INFO", log_file=None):
    """Configure the netwatch logger with a rich console and optional file handler."""
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    root = logging.getLogger("netwatch")
    root.setLevel(numeric_level)

    if not root.handlers:
        console_handler = RichHandler(
            level=numeric_level,
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
        )
        root.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(numeric_level)
            file_formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            file_handler.setFormatter(file_formatter)
            root.addHandler(file_handler)

    return root
