"""
Change debounce gate.

The file watcher reports a single write to the configuration file as two
consecutive modification events. The gate remembers when it last accepted a
change and suppresses any further change that arrives within the debounce
window, so one edit of the file evicts the cache once.

There is no timer: the gate is evaluated lazily when a notification arrives.
"""

import enum
import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0


class ChangeOp(enum.Enum):
    """Kinds of change reported for a watched configuration file."""
    WRITE = 'WRITE'
    CREATE = 'CREATE'
    REMOVE = 'REMOVE'
    RENAME = 'RENAME'


class ChangeGate:
    """
    Single-timestamp debounce gate shared by configuration accessors.

    The timestamp starts at the gate's creation time, so a change reported
    within the first window after creation is suppressed as well.
    """

    def __init__(self, window: float = DEFAULT_DEBOUNCE_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the gate.

        Args:
            window: Minimum seconds between two accepted changes
            clock: Monotonic time source in seconds
        """
        self.window = window
        self._clock = clock
        self._lock = threading.Lock()
        self._last_change = clock()

    @property
    def last_change(self) -> float:
        """Clock reading of the last accepted change."""
        with self._lock:
            return self._last_change

    def accept(self, op: ChangeOp, on_accept: Callable[[], object]) -> bool:
        """
        Offer a change notification to the gate.

        The notification is accepted when it is a WRITE and at least `window`
        seconds have passed since the last accepted one. On acceptance
        `on_accept` runs first, then the timestamp moves to the current time;
        if `on_accept` raises, the timestamp is left unchanged.

        Args:
            op: Kind of change reported by the watcher
            on_accept: Callback run when the change is accepted

        Returns:
            True if the change was accepted
        """
        with self._lock:
            if self._clock() - self._last_change < self.window:
                logger.debug(f"Suppressed {op.value} notification inside debounce window")
                return False
            if op is not ChangeOp.WRITE:
                return False
            on_accept()
            self._last_change = self._clock()
            return True


# Module-level gate shared by every accessor in the process
_default_gate: ChangeGate = ChangeGate()


def get_change_gate() -> ChangeGate:
    """Get the process-wide change gate."""
    return _default_gate


def set_change_gate(gate: ChangeGate):
    """
    Replace the process-wide change gate.

    Accessors created afterwards use the new gate; existing ones keep theirs.
    """
    global _default_gate
    _default_gate = gate
