"""Configuration management."""
import os
import yaml
from pathlib import Path

_DEFAULT_CONFIG = Path(__file__).parent / "default_config.yaml"

ENV_MAP = {
    "NETWATCH_LOG_DIR": ("paths", "log_dir", str),
    "NETWATCH_POLL_INTERVAL": ("poller", "interval", float),
    "NETWATCH_PROBE_TIMEOUT": ("probes", "timeout", float),
    "NETWATCH_LOG_LEVEL": ("logging", "level", str),
}


def load_config(path=None):
    """Load config from YAML, merging defaults with optional overrides."""
    with open(_DEFAULT_CONFIG) as f:
        config = yaml.safe_load(f)

    if path:
        if not Path(path).exists():
            raise ValueError(f"Config file not found: {path}")
        with open(path) as f:
            overrides = yaml.safe_load(f) or {}
        config = _deep_merge(config, overrides)

    _apply_env(config, os.environ)
    _validate_config(config)
    return config


def log_path(config, section):
    """Absolute path of a check's log file, resolved against paths.log_dir."""
    log_file = Path(config[section]["log_file"])
    if log_file.is_absolute():
        return log_file
    return Path(config["paths"]["log_dir"]).expanduser() / log_file


def _apply_env(config, environ):
    for env_key, (section, key, convert) in ENV_MAP.items():
        value = environ.get(env_key)
        if not value:
            continue
        try:
            config.setdefault(section, {})[key] = convert(value)
        except ValueError:
            raise ValueError(f"{env_key} must be a number, got {value!r}")


def _deep_merge(base, override):
    """Merge user overrides into the defaults without mutating either."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = _deep_merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def _validate_config(config):
    """Basic config validation."""
    required_sections = ["paths", "probes", "poller", "dns_check", "network_health",
                         "firewall_audit", "ssl_expiry"]
    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required config section: {section}")

    if not isinstance(config["poller"]["interval"], (int, float)) or config["poller"]["interval"] < 1:
        raise ValueError("poller.interval must be >= 1 second")
    if config["probes"]["timeout"] <= 0:
        raise ValueError("probes.timeout must be positive")
    if config["dns_check"]["threshold_ms"] <= 0:
        raise ValueError("dns_check.threshold_ms must be positive")
    if config["ssl_expiry"]["warn_days"] <= 0:
        raise ValueError("ssl_expiry.warn_days must be positive")
