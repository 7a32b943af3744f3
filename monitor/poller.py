"""Interface-state poller.

Reads the address of one interface on a fixed interval and logs every change.
The last known value lives in a PollState passed in by the caller, and the
loop stops when the caller sets the stop event.
"""
import logging
import threading
from datetime import datetime, timezone

from models.observations import ChangeEvent, PollerConfig, PollState
from probes.base import ProbeError
from utils.formatters import format_address

logger = logging.getLogger("netwatch.poller")


class InterfacePoller:
    def __init__(self, probe, sink, config=None, clock=None):
        self.probe = probe
        self.sink = sink
        self.config = config or PollerConfig()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def read(self, state):
        """One probe read. Returns (ok, value); failures are logged, not raised."""
        iface = self.config.interface
        try:
            return True, self.probe.interface_address(iface)
        except ProbeError as e:
            state.failures += 1
            logger.error(f"{iface}: [{e.kind}] {e} ({state.failures} failed reads)")
            self.sink.record(self.clock(), iface, f"ERROR [{e.kind}]: {e}")
            return False, None

    def poll_once(self, state):
        """Read the interface and compare with the remembered value.

        The first successful read only sets the baseline. Returns the
        ChangeEvent that was logged, or None.
        """
        ok, value = self.read(state)
        if not ok:
            return None

        if not state.initialized:
            state.last_value = value
            state.initialized = True
            logger.info(f"{self.config.interface}: baseline {format_address(value)}")
            return None

        if value == state.last_value:
            return None

        event = ChangeEvent(
            interface=self.config.interface,
            old=state.last_value,
            new=value,
            timestamp=self.clock(),
        )
        self.sink.record(
            event.timestamp, event.interface,
            f"IP changed from {format_address(event.old)} to {format_address(event.new)}",
        )
        logger.info(f"{event.interface}: {format_address(event.old)} -> {format_address(event.new)}")
        state.last_value = value
        state.changes += 1
        return event

    def run(self, stop_event=None, state=None, on_change=None):
        """Poll until stop_event is set. Returns the final PollState."""
        stop_event = stop_event or threading.Event()
        state = state or PollState()
        logger.info(f"Polling {self.config.interface} every {self.config.interval}s")

        # startup read is the baseline
        self.poll_once(state)
        while not stop_event.wait(self.config.interval):
            event = self.poll_once(state)
            if event is not None and on_change is not None:
                try:
                    on_change(event)
                except Exception as e:
                    logger.warning(f"Change callback error: {e}")

        logger.info(f"Poller stopped after {state.changes} change(s)")
        return state
