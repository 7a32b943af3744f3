"""Data models."""
from models.enums import CheckName, Severity, ErrorKind
from models.observations import Observation, ChangeEvent, PollerConfig, PollState, CheckResult
from models.alerts import ThresholdRule, AlertRecord
