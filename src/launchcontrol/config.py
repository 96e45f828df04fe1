"""
Pydantic configuration model for a Launch Control session.
"""

from pydantic import BaseModel, Field, field_validator

from .codec import FACTORY_TEMPLATE_1, NOVATION_ID
from .controls import ColorBrightness

DEVICE_NAME = "Launch Control"


class LaunchControlConfig(BaseModel):
    """
    Session settings.

    Attributes:
        port_pattern: Substring matched (case-insensitive) against MIDI port names
        template: Template LED messages and resets are sent to (0-7 user, 8-15 factory)
        manufacturer_id: SysEx manufacturer ID
        toggle_mode: Light pad LEDs from the stored pad value after every press
        pad_on_color: LED color for a pad whose stored value is 127
        pad_off_color: LED color for a pad whose stored value is 0
        initial_value: Stored value every control starts with
        reset_on_connect: Reset LEDs and select the template when connecting
        reset_on_disconnect: Reset LEDs before closing the ports
    """

    port_pattern: str = Field(default=DEVICE_NAME, min_length=1)
    template: int = Field(default=FACTORY_TEMPLATE_1, ge=0, le=15)
    manufacturer_id: tuple[int, int, int] = NOVATION_ID
    toggle_mode: bool = False
    pad_on_color: ColorBrightness = ColorBrightness.RED_FULL
    pad_off_color: ColorBrightness = ColorBrightness.OFF
    initial_value: int = Field(default=0, ge=0, le=127)
    reset_on_connect: bool = True
    reset_on_disconnect: bool = True

    model_config = {"frozen": True}

    @field_validator("manufacturer_id")
    @classmethod
    def validate_manufacturer_id(cls, v):
        """SysEx data bytes must be 7-bit."""
        if any(not 0 <= b <= 127 for b in v):
            raise ValueError(f"manufacturer_id bytes must be 0-127, got {v}")
        return v
