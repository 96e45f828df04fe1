"""
mido-backed transport with background input reading.

Finds the Launch Control ports by name, reads input on a background thread
into a queue, and hands (timestamp, bytes) pairs to the session when the
application calls process_pending_messages(). Classification never runs on
the reader thread.
"""

import queue
import threading
import time
from typing import Callable, Optional, Protocol, Sequence

import mido

from launchcontrol.controls import LaunchControlError
from launchcontrol.logging_config import get_logger

logger = get_logger(__name__)

MessageHandler = Callable[[float, bytes], None]


class DeviceNotFoundError(LaunchControlError, IOError):
    """Raised when no MIDI port name contains the requested pattern."""

    pass


class Transport(Protocol):
    """What a session needs from a connected transport."""

    def send_bytes(self, data: Sequence[int]) -> bool: ...

    def process_pending_messages(self) -> int: ...

    def disconnect(self) -> None: ...


class MIDIInterface:
    """
    Thread-safe MIDI port pair with queued input.

    Timestamps handed to the message handler are the seconds elapsed since
    the previous inbound message (0.0 for the first one).
    """

    def __init__(self, on_message: MessageHandler):
        """
        Args:
            on_message: Called as on_message(timestamp, data) for each inbound
                message, from process_pending_messages()
        """
        self._on_message = on_message

        self._input_port: Optional[mido.ports.BaseInput] = None
        self._output_port: Optional[mido.ports.BaseOutput] = None
        self._port_lock = threading.Lock()

        self._running = threading.Event()
        self._input_thread: Optional[threading.Thread] = None
        self._message_queue: queue.Queue[tuple[float, bytes]] = queue.Queue(maxsize=1000)
        self._last_receive: Optional[float] = None
        self._dropped_messages = 0

    @property
    def is_connected(self) -> bool:
        with self._port_lock:
            return self._input_port is not None or self._output_port is not None

    @property
    def dropped_messages(self) -> int:
        """Inbound messages lost because the queue was full."""
        return self._dropped_messages

    def connect_by_pattern(self, pattern: str) -> None:
        """
        Open the first input and output ports whose names contain pattern.

        Args:
            pattern: Case-insensitive port name substring

        Raises:
            DeviceNotFoundError: If no input or no output port matches
            IOError: If a matching port cannot be opened
        """
        input_ports, output_ports = self.find_ports(pattern)

        if not input_ports or not output_ports:
            raise DeviceNotFoundError(
                f"It was not possible to locate a MIDI controller containing the name '{pattern}'. "
                f"Please make sure the device is connected.",
            )

        self.connect(input_ports[0], output_ports[0])

    def connect(self, input_port_name: Optional[str] = None, output_port_name: Optional[str] = None) -> None:
        """
        Open ports by exact name and start the input thread.

        Raises:
            ValueError: If both port names are None
            IOError: If ports cannot be opened
        """
        if input_port_name is None and output_port_name is None:
            raise ValueError("At least one port (input or output) must be specified")

        with self._port_lock:
            try:
                if input_port_name:
                    logger.info(f"Opening input port {input_port_name}")
                    self._input_port = mido.open_input(input_port_name)
                if output_port_name:
                    logger.info(f"Opening output port {output_port_name}")
                    self._output_port = mido.open_output(output_port_name)
            except Exception as e:
                self._close_ports()
                raise IOError(f"Failed to open MIDI ports: {e}") from e

            start_reader = self._input_port is not None

        if start_reader:
            self._last_receive = None
            self._running.set()
            self._input_thread = threading.Thread(target=self._input_loop, daemon=True, name="LaunchControlInput")
            self._input_thread.start()

    def disconnect(self) -> None:
        """Stop the input thread, close ports, hand over anything still queued."""
        self._running.clear()
        if self._input_thread is not None:
            self._input_thread.join(timeout=2.0)
            if self._input_thread.is_alive():
                logger.warning("Input thread did not stop gracefully")
            self._input_thread = None

        with self._port_lock:
            self._close_ports()

        self.process_pending_messages()

    def _close_ports(self) -> None:
        """Close both ports. Caller holds the port lock."""
        for port in (self._input_port, self._output_port):
            if port is None:
                continue
            try:
                port.close()
                logger.info(f"Closed MIDI port {port.name}")
            except Exception as e:
                logger.error(f"Error closing MIDI port {port.name}: {e}")

        self._input_port = None
        self._output_port = None

    def _input_loop(self) -> None:
        """Reader thread: poll the input port and queue (timestamp, bytes)."""
        while self._running.is_set():
            try:
                with self._port_lock:
                    if not self._input_port:
                        break

                    for msg in self._input_port.iter_pending():
                        self._enqueue(bytes(msg.bytes()))

                # iter_pending() does not block
                time.sleep(0.001)

            except Exception as e:
                logger.exception(f"Error in MIDI input loop: {e}")

    def _enqueue(self, data: bytes) -> None:
        now = time.perf_counter()
        delta = 0.0 if self._last_receive is None else now - self._last_receive
        self._last_receive = now

        try:
            self._message_queue.put_nowait((delta, data))
        except queue.Full:
            self._dropped_messages += 1
            if self._dropped_messages % 100 == 0:
                logger.warning(f"Dropped {self._dropped_messages} MIDI messages (queue full)")

    def process_pending_messages(self) -> int:
        """
        Hand every queued message to the handler (call from the main thread).

        Returns:
            Number of messages processed
        """
        count = 0

        while True:
            try:
                timestamp, data = self._message_queue.get_nowait()
            except queue.Empty:
                break

            try:
                self._on_message(timestamp, data)
            except Exception as e:
                logger.exception(f"Error processing MIDI message: {e}")

            count += 1

        return count

    def send_bytes(self, data: Sequence[int]) -> bool:
        """
        Send raw bytes to the output port.

        Returns:
            True if sent, False if no output port is open or the send failed
        """
        with self._port_lock:
            if not self._output_port:
                logger.warning("Cannot send message: no output port connected")
                return False

            try:
                self._output_port.send(mido.Message.from_bytes(list(data)))
                return True
            except Exception as e:
                logger.error(f"Error sending MIDI message {bytes(data).hex(' ')}: {e}")
                return False

    @staticmethod
    def find_ports(pattern: str) -> tuple[list[str], list[str]]:
        """
        Find ports whose names contain pattern (case-insensitive).

        A backend that cannot enumerate ports is logged and treated as having
        none, so the caller sees DeviceNotFoundError rather than a driver error.

        Returns:
            (input_ports, output_ports)
        """
        pattern_lower = pattern.lower()

        def matching(list_names: Callable[[], list[str]]) -> list[str]:
            try:
                names = list_names()
            except Exception as e:
                logger.error(f"Failed to list MIDI ports: {e}")
                return []
            return [name for name in names if pattern_lower in name.lower()]

        input_ports = matching(mido.get_input_names)
        output_ports = matching(mido.get_output_names)

        logger.debug(f"Ports matching '{pattern}': inputs={input_ports}, outputs={output_ports}")
        return (input_ports, output_ports)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
