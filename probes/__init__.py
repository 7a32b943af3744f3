"""Network probes."""
from probes.base import (
    NetworkProbe, ProbeResult, ProbeError, ProbeUnavailable, TargetUnreachable, ParseFailure,
)
from probes.system import SystemProbe
