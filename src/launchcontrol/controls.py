"""
Control identities, addresses and LED color values for the Launch Control.

This module defines the fixed set of logical controls (8 pads, 16 knobs),
the two-byte address that identifies a control's MIDI message, the LED
color/brightness bytes the device understands, and the exception types
raised by the protocol layer.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Control(int, Enum):
    """
    Logical controls of factory template 1.

    The value of each member is the index the device uses for that control,
    so pads are 0-7, knobs 8-23 and UNKNOWN sits past the last real control.
    """

    PAD1 = 0x00
    PAD2 = 0x01
    PAD3 = 0x02
    PAD4 = 0x03
    PAD5 = 0x04
    PAD6 = 0x05
    PAD7 = 0x06
    PAD8 = 0x07
    KNOB1 = 0x08
    KNOB2 = 0x09
    KNOB3 = 0x0A
    KNOB4 = 0x0B
    KNOB5 = 0x0C
    KNOB6 = 0x0D
    KNOB7 = 0x0E
    KNOB8 = 0x0F
    KNOB9 = 0x10
    KNOB10 = 0x11
    KNOB11 = 0x12
    KNOB12 = 0x13
    KNOB13 = 0x14
    KNOB14 = 0x15
    KNOB15 = 0x16
    KNOB16 = 0x17
    UNKNOWN = 0x18

    @property
    def is_pad(self) -> bool:
        """True for PAD1-PAD8."""
        return Control.PAD1 <= self <= Control.PAD8

    @property
    def is_knob(self) -> bool:
        """True for KNOB1-KNOB16."""
        return Control.KNOB1 <= self <= Control.KNOB16

    @property
    def number(self) -> Optional[int]:
        """
        1-based number of the control within its kind.

        Pads are numbered 1-8, knobs 1-16 (lower bank first). UNKNOWN has
        no number.
        """
        if self.is_pad:
            return self.value - Control.PAD1.value + 1
        if self.is_knob:
            return self.value - Control.KNOB1.value + 1
        return None


PADS: tuple[Control, ...] = tuple(c for c in Control if c.is_pad)
KNOBS: tuple[Control, ...] = tuple(c for c in Control if c.is_knob)


class Address(BaseModel):
    """
    Two-byte message prefix identifying a control.

    The value byte is never part of the address, so the same address
    matches every message a control sends.
    """

    status: int = Field(ge=0, le=255)
    data1: int = Field(ge=0, le=255)

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"({self.status:#04x}, {self.data1})"


class ColorBrightness(int, Enum):
    """
    LED velocity bytes for pad and button LEDs.

    Each byte encodes both the red and green LED brightness. Only ever sent
    to the device, never received.
    """

    OFF = 0x0C
    RED_LOW = 0x0D
    RED_FULL = 0x0F
    AMBER_LOW = 0x1D
    AMBER_FULL = 0x3F
    YELLOW_FULL = 0x3E
    GREEN_LOW = 0x1C
    GREEN_FULL = 0x3C


# Iteration order for animations: off, then greens, ambers, yellow, reds
COLOR_CYCLE: tuple[ColorBrightness, ...] = (
    ColorBrightness.OFF,
    ColorBrightness.GREEN_LOW,
    ColorBrightness.GREEN_FULL,
    ColorBrightness.AMBER_LOW,
    ColorBrightness.AMBER_FULL,
    ColorBrightness.YELLOW_FULL,
    ColorBrightness.RED_LOW,
    ColorBrightness.RED_FULL,
)


class ControlEvent(BaseModel):
    """
    Immutable record of one classified inbound message.

    Delivered to callbacks after the control state has been updated.
    """

    control: Control
    name: str
    value: int = Field(ge=0, le=255)  # Value byte as received
    stored_value: Optional[int] = None  # State after the update (None for UNKNOWN)
    timestamp: float = 0.0  # Transport timestamp (seconds)
    received_at: datetime = Field(default_factory=datetime.now)
    raw: bytes = b""

    model_config = {"frozen": True}

    @property
    def is_on(self) -> bool:
        """True when the stored value is fully on (127)."""
        return self.stored_value == 127


class LaunchControlError(Exception):
    """Base class for all errors raised by launchcontrol."""

    pass


class MalformedMessageError(LaunchControlError, ValueError):
    """
    Raised when a message cannot be decoded.

    Covers messages that are too short to carry a value byte, messages too
    long to be a channel message, and SysEx frames with the wrong framing.
    Callers are expected to recover and keep the session running.
    """

    pass


class PreconditionViolation(LaunchControlError):
    """
    Raised on a programming error, such as asking for the address of UNKNOWN.

    Not meant to be caught and recovered from.
    """

    pass
