"""
Per-control value memory for a Launch Control session.

ControlState keeps the last stored value byte of every registered control.
It is owned by one session and mutated only by classification. It does no
locking of its own; a session that receives messages on more than one
thread must serialize access to it.
"""

from collections import deque
from typing import Iterable, Optional

from launchcontrol.controls import Control, PreconditionViolation

HISTORY_SIZE = 1000


class ControlState:
    """
    Stored value (0-127) for each control, plus a short update history.

    Update rules:
    - Knobs overwrite the stored value with the incoming value.
    - Pads store abs(stored - incoming). With the device sending 127 on
      press and 0 on release, press/release leaves 127 and the next press
      brings it back to 0.
    """

    def __init__(self, controls: Iterable[Control], initial_value: int = 0):
        """
        Initialize state for a set of controls.

        Args:
            controls: Controls to track (UNKNOWN is ignored)
            initial_value: Starting stored value for every control
        """
        if not 0 <= initial_value <= 127:
            raise ValueError(f"initial_value must be 0-127, got {initial_value}")

        self._initial_value = initial_value
        self._values: dict[Control, int] = {
            control: initial_value for control in controls if control is not Control.UNKNOWN
        }
        self._history: deque[tuple[Control, int]] = deque(maxlen=HISTORY_SIZE)

    @property
    def controls(self) -> tuple[Control, ...]:
        """Tracked controls."""
        return tuple(self._values)

    def apply(self, control: Control, value: int) -> int:
        """
        Fold an incoming value byte into a control's stored value.

        Args:
            control: Tracked pad or knob
            value: Incoming value byte

        Returns:
            New stored value

        Raises:
            PreconditionViolation: If control is not tracked
        """
        previous = self.get_value(control)

        if control.is_pad:
            stored = abs(previous - value)
        else:
            stored = value

        self._values[control] = stored
        self._history.append((control, stored))
        return stored

    def get_value(self, control: Control) -> int:
        """
        Get a control's stored value.

        Raises:
            PreconditionViolation: If control is not tracked
        """
        try:
            return self._values[control]
        except KeyError:
            raise PreconditionViolation(f"Control {control.name} has no state") from None

    def is_on(self, control: Control) -> bool:
        """True when the stored value is 127 (pad lit / knob fully open)."""
        return self.get_value(control) == 127

    def snapshot(self) -> dict[Control, int]:
        """Copy of all stored values."""
        return dict(self._values)

    def get_history(self, limit: Optional[int] = None) -> list[tuple[Control, int]]:
        """
        Get recent updates.

        Args:
            limit: Maximum number of entries (None for all)

        Returns:
            (control, stored_value) tuples, most recent last
        """
        history = list(self._history)
        if limit:
            return history[-limit:]
        return history

    def reset(self) -> None:
        """Return every control to its initial value and clear history."""
        for control in self._values:
            self._values[control] = self._initial_value
        self._history.clear()

    def __contains__(self, control: object) -> bool:
        return control in self._values
