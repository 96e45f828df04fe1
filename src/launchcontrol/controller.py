"""
LaunchControl session: transport, codec and control state wired together.

The session owns the control state and is the only place it is mutated. All
classification happens under one lock, so messages may be handed in from a
transport callback thread and from a polling loop at the same time.
"""

import threading
from typing import Optional, Sequence

from launchcontrol.callbacks import CallbackManager, ControlKind, EventCallback, SysExCallback
from launchcontrol.codec import (
    CHANNEL_MESSAGE_LENGTH,
    RawMessage,
    classify,
    describe_message,
    encode_reset,
    encode_set_led,
    encode_set_template,
    name_of,
)
from launchcontrol.config import LaunchControlConfig
from launchcontrol.controls import (
    ColorBrightness,
    Control,
    ControlEvent,
    MalformedMessageError,
)
from launchcontrol.logging_config import get_logger
from launchcontrol.midi_io import MIDIInterface, Transport
from launchcontrol.registry import ControlRegistry, factory_registry
from launchcontrol.state import ControlState

logger = get_logger(__name__)


class LaunchControl:
    """
    Session with one Novation Launch Control.

    Example:
        >>> with LaunchControl(LaunchControlConfig(toggle_mode=True)) as lc:
        ...     lc.on_kind("pad", lambda event: print(event.name, event.is_on))
        ...     while True:
        ...         lc.process_events()
    """

    def __init__(
        self,
        config: Optional[LaunchControlConfig] = None,
        transport: Optional[Transport] = None,
        registry: ControlRegistry = factory_registry,
    ):
        """
        Initialize the session.

        Args:
            config: Session settings (defaults if None)
            transport: Already-open transport. If None, connect() opens the
                device ports with mido.
            registry: Address table
        """
        self._config = config or LaunchControlConfig()
        self._registry = registry
        self._state = ControlState(registry.controls, initial_value=self._config.initial_value)
        self._state_lock = threading.RLock()
        self._callbacks = CallbackManager()
        self._transport: Optional[Transport] = transport
        self._owns_transport = False
        self._connected = False

    @property
    def config(self) -> LaunchControlConfig:
        return self._config

    @property
    def registry(self) -> ControlRegistry:
        return self._registry

    @property
    def state(self) -> ControlState:
        """
        The session's control state.

        Reads that must not race with incoming messages should go through
        value_of() and is_on() instead.
        """
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._connected

    # Connection

    def connect(self) -> None:
        """
        Open the device ports and bring the device to a known state.

        Raises:
            DeviceNotFoundError: If no port matches config.port_pattern
            IOError: If the ports cannot be opened
        """
        if self._connected:
            logger.warning("Already connected")
            return

        if self._transport is None:
            midi = MIDIInterface(on_message=self.handle_message)
            midi.connect_by_pattern(self._config.port_pattern)
            self._transport = midi
            self._owns_transport = True

        self._connected = True

        if self._config.reset_on_connect:
            logger.info("Resetting Launch Control")
            self.reset()
            logger.info(f"Selecting template {self._config.template}")
            self.set_template(self._config.template)

        logger.info("Launch Control connected")

    def disconnect(self) -> None:
        """
        Turn the LEDs off (if configured) and close the ports.

        Only ports opened by connect() are closed. A transport passed to the
        constructor is left open, so the session can connect again.
        """
        if not self._connected:
            return

        if self._config.reset_on_disconnect:
            self.reset()

        # An injected transport belongs to the caller and stays open
        if self._owns_transport:
            self._transport.disconnect()
            self._transport = None
            self._owns_transport = False

        self._connected = False
        logger.info("Launch Control disconnected")

    # Inbound

    def handle_message(self, timestamp: float, data: RawMessage) -> Optional[ControlEvent]:
        """
        Process one inbound message.

        Messages longer than a channel message go to SysEx callbacks.
        Malformed messages are logged and dropped.

        Args:
            timestamp: Transport timestamp
            data: Raw message bytes

        Returns:
            The dispatched event, or None for SysEx and malformed messages
        """
        raw = bytes(data)
        logger.debug(describe_message(raw, timestamp, self._registry))

        if len(raw) > CHANNEL_MESSAGE_LENGTH:
            self._callbacks.dispatch_sysex(timestamp, raw)
            return None

        with self._state_lock:
            try:
                control, value = classify(raw, timestamp, self._state, self._registry)
            except MalformedMessageError as e:
                logger.warning(f"Dropping malformed message {raw.hex(' ')}: {e}")
                return None

            stored = self._state.get_value(control) if control is not Control.UNKNOWN else None

        event = ControlEvent(
            control=control,
            name=name_of(control),
            value=value,
            stored_value=stored,
            timestamp=timestamp,
            raw=raw,
        )

        if self._config.toggle_mode and control.is_pad:
            self._apply_toggle_feedback(control, stored)

        self._callbacks.dispatch(event)
        return event

    def process_events(self) -> int:
        """
        Process queued inbound messages.

        Call regularly from the main loop.

        Returns:
            Number of messages processed
        """
        if self._transport is None:
            return 0
        return self._transport.process_pending_messages()

    def value_of(self, control: Control) -> int:
        """Stored value of a control."""
        with self._state_lock:
            return self._state.get_value(control)

    def is_on(self, control: Control) -> bool:
        """True when the control's stored value is 127."""
        with self._state_lock:
            return self._state.is_on(control)

    # Outbound

    def set_pad_color(self, pad_index: int, color: ColorBrightness) -> None:
        """
        Set a pad (0-7) or button (8-11) LED in the configured template.
        """
        self.send_bytes(
            encode_set_led(pad_index, color, self._config.template, self._config.manufacturer_id),
        )

    def set_template(self, template_number: int) -> None:
        """Select the active template on the device."""
        self.send_bytes(encode_set_template(template_number, self._config.manufacturer_id))

    def reset(self, template_number: Optional[int] = None) -> None:
        """
        Turn all LEDs off for a template (configured template if None).
        """
        if template_number is None:
            template_number = self._config.template
        self.send_bytes(encode_reset(template_number))

    def send_bytes(self, data: Sequence[int]) -> bool:
        """
        Send raw bytes through the transport.

        Raises:
            RuntimeError: If no transport is attached
        """
        if self._transport is None:
            raise RuntimeError("Launch Control not connected. Call connect() first.")
        return self._transport.send_bytes(data)

    # Callbacks

    def on_control(self, control: Control, callback: EventCallback) -> None:
        self._callbacks.register_control(control, callback)

    def on_kind(self, kind: ControlKind, callback: EventCallback) -> None:
        """Register callback for all pads ("pad") or all knobs ("knob")."""
        self._callbacks.register_kind(kind, callback)

    def on_global(self, callback: EventCallback) -> None:
        self._callbacks.register_global(callback)

    def on_sysex(self, callback: SysExCallback) -> None:
        self._callbacks.register_sysex(callback)

    def remove_callback(self, callback) -> bool:
        return self._callbacks.unregister(callback)

    # Internal

    def _apply_toggle_feedback(self, control: Control, stored: int) -> None:
        """Mirror a pad's stored value on its LED."""
        if stored == 127:
            color = self._config.pad_on_color
        elif stored == 0:
            color = self._config.pad_off_color
        else:
            return

        if self._transport is None:
            logger.debug(f"No transport, skipping LED feedback for {control.name}")
            return

        self.set_pad_color(control.value, color)

    def __enter__(self):
        if not self._connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
