"""
launchcontrol: Novation Launch Control protocol library

Decodes the messages the Launch Control sends (8 pads, 16 knobs in factory
template 1) into logical controls with per-control state, and encodes the
SysEx and channel messages that set pad LEDs, select templates and reset the
device.
"""

__version__ = "0.1.0"

# Protocol codec
from .codec import (
    FACTORY_TEMPLATE_1,
    NOVATION_ID,
    classify,
    describe_message,
    encode_reset,
    encode_set_led,
    encode_set_template,
    name_of,
    strip_sysex_frame,
    sysex_frame,
    to_mido,
)

# Configuration
from .config import LaunchControlConfig

# Session
from .controller import LaunchControl

# Controls, colors and errors
from .controls import (
    COLOR_CYCLE,
    KNOBS,
    PADS,
    Address,
    ColorBrightness,
    Control,
    ControlEvent,
    LaunchControlError,
    MalformedMessageError,
    PreconditionViolation,
)

# Logging configuration
from .logging_config import (
    get_logger,
    set_module_level,
    setup_logging,
)

# Transport
from .midi_io import DeviceNotFoundError, MIDIInterface
from .registry import ControlRegistry, factory_registry
from .state import ControlState

__all__ = [
    "__version__",
    # Session
    "LaunchControl",
    "LaunchControlConfig",
    # Controls
    "Control",
    "Address",
    "ColorBrightness",
    "COLOR_CYCLE",
    "PADS",
    "KNOBS",
    "ControlEvent",
    "ControlState",
    "ControlRegistry",
    "factory_registry",
    # Codec
    "classify",
    "name_of",
    "describe_message",
    "sysex_frame",
    "strip_sysex_frame",
    "encode_set_led",
    "encode_set_template",
    "encode_reset",
    "to_mido",
    "NOVATION_ID",
    "FACTORY_TEMPLATE_1",
    # Transport
    "MIDIInterface",
    # Errors
    "LaunchControlError",
    "MalformedMessageError",
    "PreconditionViolation",
    "DeviceNotFoundError",
    # Logging
    "setup_logging",
    "get_logger",
    "set_module_level",
]
