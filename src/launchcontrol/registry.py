"""
Address table for the Launch Control's factory template 1.

Maps each logical control to the (status, data1) prefix of the messages it
sends, and back. The table is built once and never changes.
"""

from typing import Iterable, Iterator

from launchcontrol.controls import Address, Control, PreconditionViolation
from launchcontrol.logging_config import get_logger

logger = get_logger(__name__)

# Factory template 1 sends on MIDI channel 9: note on for pads, CC for knobs
PAD_STATUS = 0x98
KNOB_STATUS = 0xB8

# Pad notes in pad order (top row 9-12, bottom row 25-28)
PAD_NOTES = (9, 10, 11, 12, 25, 26, 27, 28)

# Knob CC numbers: the lower row is KNOB1-8, the upper row KNOB9-16
KNOB_LOWER_CCS = (41, 42, 43, 44, 45, 46, 47, 48)
KNOB_UPPER_CCS = (21, 22, 23, 24, 25, 26, 27, 28)


class ControlRegistry:
    """
    Bidirectional, injective mapping between controls and addresses.

    Lookups are dictionary lookups keyed by Address or Control. The
    insertion order of the entries is kept and exposed through `controls`.
    """

    def __init__(self, entries: Iterable[tuple[Control, Address]]):
        """
        Build the registry.

        Args:
            entries: (control, address) pairs in registration order

        Raises:
            ValueError: If UNKNOWN is registered, or a control or an
                address appears twice
        """
        self._by_address: dict[Address, Control] = {}
        self._by_control: dict[Control, Address] = {}

        for control, address in entries:
            if control is Control.UNKNOWN:
                raise ValueError("UNKNOWN cannot be registered")
            if control in self._by_control:
                raise ValueError(f"Control {control.name} registered twice")
            if address in self._by_address:
                existing = self._by_address[address]
                raise ValueError(f"Address {address} already used by {existing.name}")

            self._by_control[control] = address
            self._by_address[address] = control

        logger.debug(f"Built control registry with {len(self._by_control)} controls")

    @classmethod
    def factory_template(cls) -> "ControlRegistry":
        """
        Registry for factory template 1 (the device default).

        Returns:
            Registry with 8 pads and 16 knobs
        """
        entries: list[tuple[Control, Address]] = []

        for index, note in enumerate(PAD_NOTES):
            entries.append((Control(Control.PAD1 + index), Address(status=PAD_STATUS, data1=note)))

        for index, cc in enumerate(KNOB_LOWER_CCS + KNOB_UPPER_CCS):
            entries.append((Control(Control.KNOB1 + index), Address(status=KNOB_STATUS, data1=cc)))

        return cls(entries)

    @property
    def controls(self) -> tuple[Control, ...]:
        """Registered controls in registration order."""
        return tuple(self._by_control)

    def address_of(self, control: Control) -> Address:
        """
        Get the address a control sends on.

        Args:
            control: Registered control

        Returns:
            The control's address

        Raises:
            PreconditionViolation: If control is UNKNOWN or not registered
        """
        try:
            return self._by_control[control]
        except KeyError:
            raise PreconditionViolation(f"No address for control {control.name}") from None

    def control_of(self, address: Address) -> Control:
        """
        Get the control that sends on an address.

        Args:
            address: (status, data1) prefix

        Returns:
            Matching control, or Control.UNKNOWN if nothing matches
        """
        return self._by_address.get(address, Control.UNKNOWN)

    def __contains__(self, control: object) -> bool:
        return control in self._by_control

    def __iter__(self) -> Iterator[tuple[Control, Address]]:
        return iter(self._by_control.items())

    def __len__(self) -> int:
        return len(self._by_control)


# Shared registry for the factory template
factory_registry = ControlRegistry.factory_template()
