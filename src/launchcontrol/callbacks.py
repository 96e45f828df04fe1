"""
Error-isolated callback dispatch for control events.

A callback that raises is logged and skipped; the remaining callbacks still
run and the session keeps processing messages.
"""

import threading
from collections import defaultdict
from typing import Callable, Literal

from launchcontrol.controls import Control, ControlEvent
from launchcontrol.logging_config import get_logger

logger = get_logger(__name__)

ControlKind = Literal["pad", "knob"]

EventCallback = Callable[[ControlEvent], None]
SysExCallback = Callable[[float, bytes], None]


class CallbackManager:
    """
    Holds callbacks and dispatches events to them.

    Dispatch order for a control event, most specific first:
    1. Per-control callbacks
    2. Per-kind callbacks (all pads / all knobs)
    3. Global callbacks

    SysEx callbacks receive messages longer than a channel message.
    """

    def __init__(self):
        self._control_callbacks: defaultdict[Control, list[EventCallback]] = defaultdict(list)
        self._kind_callbacks: defaultdict[str, list[EventCallback]] = defaultdict(list)
        self._global_callbacks: list[EventCallback] = []
        self._sysex_callbacks: list[SysExCallback] = []

        self._lock = threading.RLock()

    # Registration

    def register_control(self, control: Control, callback: EventCallback) -> None:
        """Call callback for events from one control."""
        with self._lock:
            self._control_callbacks[control].append(callback)
            logger.debug(f"Registered callback for {control.name}: {_callback_name(callback)}")

    def register_kind(self, kind: ControlKind, callback: EventCallback) -> None:
        """
        Call callback for all pads or all knobs.

        Raises:
            ValueError: If kind is not "pad" or "knob"
        """
        if kind not in ("pad", "knob"):
            raise ValueError(f"kind must be 'pad' or 'knob', got {kind!r}")
        with self._lock:
            self._kind_callbacks[kind].append(callback)
            logger.debug(f"Registered {kind} callback: {_callback_name(callback)}")

    def register_global(self, callback: EventCallback) -> None:
        """Call callback for every event, UNKNOWN included."""
        with self._lock:
            self._global_callbacks.append(callback)
            logger.debug(f"Registered global callback: {_callback_name(callback)}")

    def register_sysex(self, callback: SysExCallback) -> None:
        """Call callback(timestamp, data) for every SysEx message."""
        with self._lock:
            self._sysex_callbacks.append(callback)
            logger.debug(f"Registered SysEx callback: {_callback_name(callback)}")

    def unregister(self, callback: Callable) -> bool:
        """
        Remove a callback from every list it was registered in.

        Returns:
            True if it was registered anywhere
        """
        removed = False
        with self._lock:
            lists = [
                *self._control_callbacks.values(),
                *self._kind_callbacks.values(),
                self._global_callbacks,
                self._sysex_callbacks,
            ]
            for callbacks in lists:
                while callback in callbacks:
                    callbacks.remove(callback)
                    removed = True
        if removed:
            logger.debug(f"Unregistered callback: {_callback_name(callback)}")
        return removed

    # Dispatch

    def dispatch(self, event: ControlEvent) -> None:
        """Run every callback interested in event."""
        # Copy under lock, call without it
        with self._lock:
            callbacks = list(self._control_callbacks[event.control])
            if event.control.is_pad:
                callbacks.extend(self._kind_callbacks["pad"])
            elif event.control.is_knob:
                callbacks.extend(self._kind_callbacks["knob"])
            callbacks.extend(self._global_callbacks)

        for callback in callbacks:
            self._safe_call(callback, event)

    def dispatch_sysex(self, timestamp: float, data: bytes) -> None:
        """Run every SysEx callback."""
        with self._lock:
            callbacks = list(self._sysex_callbacks)

        for callback in callbacks:
            self._safe_call(callback, timestamp, data)

    def _safe_call(self, callback: Callable, *args) -> None:
        try:
            callback(*args)
        except Exception as e:
            logger.exception(f"Error in callback '{_callback_name(callback)}': {e}")

    def clear_all(self) -> None:
        """Remove every callback."""
        with self._lock:
            self._control_callbacks.clear()
            self._kind_callbacks.clear()
            self._global_callbacks.clear()
            self._sysex_callbacks.clear()

    def get_callback_counts(self) -> dict[str, int]:
        """Number of registered callbacks per category."""
        with self._lock:
            return {
                "control": sum(len(cbs) for cbs in self._control_callbacks.values()),
                "kind": sum(len(cbs) for cbs in self._kind_callbacks.values()),
                "global": len(self._global_callbacks),
                "sysex": len(self._sysex_callbacks),
            }


def _callback_name(callback: Callable) -> str:
    return getattr(callback, "__name__", repr(callback))
