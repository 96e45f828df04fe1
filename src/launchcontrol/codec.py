"""
Launch Control wire protocol: inbound classification and outbound encoding.

Inbound
-------

The device sends 3-byte channel messages::

    [status] [data1] [value]
    └──── address ────┘

The address identifies the control (see launchcontrol.registry), the third
byte is the value: 127 on pad press, 0 on pad release, 0-127 knob position.

Outbound
--------

LED color and template selection are SysEx messages::

    F0 00 20 29 02 0A 78 <template> <index> <color> F7    set LED
    F0 00 20 29 02 0A 77 <template> F7                    select template
    └┘ └──┬───┘ └───┬──┘                         └┘
    start  Novation  fixed                        end

Template is 00h-07h for the 8 user templates and 08h-0Fh for the 8 factory
templates. LED index is 00h-07h for pads and 08h-0Bh for the buttons. The
color byte is one of ColorBrightness.

Reset is a plain channel message, not SysEx::

    (B0h + template) 00 00

It turns all LEDs off and restores the default buffer settings and duty
cycle for that template.

All functions here are pure apart from classify(), which updates the
ControlState it is handed.
"""

from typing import Sequence, Union

import mido

from launchcontrol.controls import (
    Address,
    ColorBrightness,
    Control,
    MalformedMessageError,
    PreconditionViolation,
)
from launchcontrol.logging_config import get_logger
from launchcontrol.registry import ControlRegistry, factory_registry
from launchcontrol.state import ControlState

logger = get_logger(__name__)

SYSEX_START = 0xF0
SYSEX_END = 0xF7

# Focusrite/Novation manufacturer ID
NOVATION_ID = (0x00, 0x20, 0x29)

FACTORY_TEMPLATE_1 = 0x08

CHANNEL_MESSAGE_LENGTH = 3

# Fixed command prefixes following the manufacturer ID
SET_LED_COMMAND = (0x02, 0x0A, 0x78)
SET_TEMPLATE_COMMAND = (0x02, 0x0A, 0x77)

RESET_STATUS = 0xB0

TEMPLATE_COUNT = 16

RawMessage = Union[bytes, bytearray, Sequence[int]]


def classify(
    raw_bytes: RawMessage,
    timestamp: float,
    state: ControlState,
    registry: ControlRegistry = factory_registry,
) -> tuple[Control, int]:
    """
    Identify the control that sent a message and update its stored value.

    Args:
        raw_bytes: Exactly 3 bytes (status, data1, value)
        timestamp: Transport timestamp, used for logging only
        state: Session state to update on a match
        registry: Address table

    Returns:
        (control, value) where value is the incoming value byte. control is
        Control.UNKNOWN when the address is not registered; state is then
        left untouched.

    Raises:
        MalformedMessageError: If raw_bytes is not exactly 3 bytes long.
            Longer messages (SysEx) have to be routed elsewhere by the caller.
    """
    length = len(raw_bytes)
    if length > CHANNEL_MESSAGE_LENGTH:
        raise MalformedMessageError(
            f"{length}-byte message is not a channel message and cannot be classified",
        )
    if length < CHANNEL_MESSAGE_LENGTH:
        raise MalformedMessageError(f"{length}-byte message has no value byte")

    status, data1, value = raw_bytes[0], raw_bytes[1], raw_bytes[2]
    control = registry.control_of(Address(status=status, data1=data1))

    if control is not Control.UNKNOWN:
        stored = state.apply(control, value)
        logger.debug(f"t={timestamp:.4f} {name_of(control)} value={value} stored={stored}")
    else:
        logger.debug(f"t={timestamp:.4f} unmapped message {status}, {data1}, {value}")

    return (control, value)


def name_of(control: Control) -> str:
    """
    Human-readable control label.

    Returns:
        "PAD 1"-"PAD 8", "KNOB 1"-"KNOB 16", or "UNKNOWN"
    """
    if control.is_pad:
        return f"PAD {control.number}"
    if control.is_knob:
        return f"KNOB {control.number}"
    return "UNKNOWN"


def describe_message(
    raw_bytes: RawMessage,
    timestamp: float,
    registry: ControlRegistry = factory_registry,
) -> str:
    """
    One-line description of an inbound message, for logs and consoles.

    Does not touch any state.

    Example:
        >>> describe_message([152, 9, 127], 0.25)
        'Bytes[3]: 152, 9, 127, Timestamp = 0.25 -> PAD 1 value=127'
    """
    data = list(raw_bytes)
    line = f"Bytes[{len(data)}]: {', '.join(str(b) for b in data)}"
    if data:
        line += f", Timestamp = {timestamp}"

    if len(data) == CHANNEL_MESSAGE_LENGTH:
        control = registry.control_of(Address(status=data[0], data1=data[1]))
        line += f" -> {name_of(control)} value={data[2]}"

    return line


def sysex_frame(manufacturer_id: Sequence[int], payload: Sequence[int]) -> bytes:
    """
    Wrap a payload in SysEx framing.

    Args:
        manufacturer_id: 3-byte manufacturer ID
        payload: Message body (may be empty)

    Returns:
        F0 id0 id1 id2 payload... F7

    Raises:
        ValueError: If manufacturer_id is not 3 bytes long
    """
    if len(manufacturer_id) != 3:
        raise ValueError(f"manufacturer_id must be 3 bytes, got {len(manufacturer_id)}")

    return bytes([SYSEX_START, *manufacturer_id, *payload, SYSEX_END])


def strip_sysex_frame(message: RawMessage, manufacturer_id: Sequence[int] = NOVATION_ID) -> bytes:
    """
    Recover the payload of a framed SysEx message.

    Args:
        message: Complete message including F0 and F7
        manufacturer_id: Expected 3-byte manufacturer ID

    Returns:
        Payload bytes

    Raises:
        MalformedMessageError: If the framing or manufacturer ID does not match
    """
    data = bytes(message)
    header = bytes([SYSEX_START, *manufacturer_id])

    if len(data) < len(header) + 1 or data[-1] != SYSEX_END:
        raise MalformedMessageError(f"Not a complete SysEx frame: {data.hex(' ')}")
    if not data.startswith(header):
        raise MalformedMessageError(f"Unexpected SysEx header: {data[:len(header)].hex(' ')}")

    return data[len(header):-1]


def encode_set_led(
    pad_index: int,
    color: ColorBrightness,
    template: int = FACTORY_TEMPLATE_1,
    manufacturer_id: Sequence[int] = NOVATION_ID,
) -> bytes:
    """
    Build the SysEx message that sets one pad or button LED.

    The LED can be set in any template, whether or not it is the active one.

    Args:
        pad_index: 0-7 for pads, 8-11 for buttons. Not range-checked; the
            device decides what other indices do.
        color: LED velocity byte
        template: Target template (factory 1 by default)
        manufacturer_id: 3-byte manufacturer ID

    Returns:
        Complete SysEx message

    Raises:
        PreconditionViolation: If template is not 0-15
    """
    _check_template(template)
    payload = [*SET_LED_COMMAND, template, pad_index, int(color)]
    return sysex_frame(manufacturer_id, payload)


def encode_set_template(template_number: int, manufacturer_id: Sequence[int] = NOVATION_ID) -> bytes:
    """Build the SysEx message that selects the active template."""
    _check_template(template_number)
    payload = [*SET_TEMPLATE_COMMAND, template_number]
    return sysex_frame(manufacturer_id, payload)


def encode_reset(template_number: int) -> bytes:
    """
    Build the reset message for a template.

    The template number doubles as the MIDI channel, so the status byte is
    B0h + template_number.

    Args:
        template_number: 0-15

    Returns:
        3-byte channel message (not SysEx)

    Raises:
        PreconditionViolation: If template_number is not 0-15. Anything
            higher would spill into the next status nibble.
    """
    _check_template(template_number)
    return bytes([RESET_STATUS + template_number, 0x00, 0x00])


def _check_template(template_number: int) -> None:
    if not 0 <= template_number < TEMPLATE_COUNT:
        raise PreconditionViolation(f"Template must be 0-{TEMPLATE_COUNT - 1}, got {template_number}")


def to_mido(data: RawMessage) -> mido.Message:
    """
    Convert encoded bytes into a mido message for sending.

    Raises:
        ValueError: If the bytes are not a valid MIDI message
    """
    return mido.Message.from_bytes(list(data))
