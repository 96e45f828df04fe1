#!/usr/bin/env python3
"""
Demo script for the Novation Launch Control.

This script demonstrates:
- Connecting to the controller and selecting factory template 1
- Cycling pad LEDs through the color palette
- Toggle mode: pads light up red on press and turn off on the next press
- Printing pad and knob events in real-time
"""

import argparse
import logging
import time

from launchcontrol import (
    COLOR_CYCLE,
    PADS,
    ControlEvent,
    DeviceNotFoundError,
    LaunchControl,
    LaunchControlConfig,
)
from launchcontrol.logging_config import get_logger, set_module_level, setup_logging

logger = get_logger(__name__)


def on_pad(event: ControlEvent):
    """Callback for pad events."""
    state = "ON " if event.is_on else "off"
    print(f"[PAD]  {event.name:8s} -> {state} (value={event.value}, stored={event.stored_value})")


def on_knob(event: ControlEvent):
    """Callback for knob events."""
    bar = "█" * (event.value // 4)
    print(f"[KNOB] {event.name:8s} {event.value:3d}/127 [{bar:<31s}]")


def on_any(event: ControlEvent):
    """Callback for any message, including unmapped ones."""
    logger.debug(f"[ANY] {event.name}: {list(event.raw)} t={event.timestamp:.4f}")


def on_sysex(timestamp: float, data: bytes):
    """Callback for SysEx messages (e.g. template buttons)."""
    print(f"[SYSEX] {data.hex(' ')}")


def flash_pads(controller: LaunchControl, rounds: int, delay: float):
    """Light each pad in turn, moving one step through the palette per round."""
    steps = rounds * len(PADS)
    for i in range(steps):
        color = COLOR_CYCLE[(i // len(PADS)) % len(COLOR_CYCLE)]
        controller.set_pad_color(i % len(PADS), color)
        time.sleep(delay)


def main():
    """Main demo function."""
    parser = argparse.ArgumentParser(description="Novation Launch Control demo")
    parser.add_argument("--port", default="Launch Control", help="MIDI port name substring")
    parser.add_argument("--rounds", type=int, default=2, help="Palette rounds to flash on start")
    parser.add_argument("--debug", action="store_true", help="Log every inbound message")
    args = parser.parse_args()

    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    if args.debug:
        set_module_level("launchcontrol.controller", logging.DEBUG)

    config = LaunchControlConfig(port_pattern=args.port, toggle_mode=True)
    controller = LaunchControl(config)

    controller.on_kind("pad", on_pad)
    controller.on_kind("knob", on_knob)
    controller.on_global(on_any)
    controller.on_sysex(on_sysex)

    print("\nConnecting to Launch Control...")
    try:
        controller.connect()
    except DeviceNotFoundError as e:
        print(f"✗ {e}")
        return

    try:
        print("Flashing pads...")
        flash_pads(controller, args.rounds, delay=0.1)

        print("\nListening for events... (Press Ctrl+C to exit)")
        print("  - Press pads to toggle their LEDs")
        print("  - Turn knobs to see their values (0-127)")
        while True:
            controller.process_events()
            time.sleep(0.01)

    except KeyboardInterrupt:
        print("\n\nShutting down...")

    finally:
        controller.disconnect()
        print("✓ Disconnected from controller")


if __name__ == "__main__":
    main()
