"""Pytest fixtures for tests."""

import pytest

from launchcontrol import ControlRegistry, ControlState, LaunchControl, LaunchControlConfig


class FakeTransport:
    """Records sent bytes instead of talking to a device."""

    def __init__(self):
        self.sent: list[bytes] = []
        self.disconnected = False
        self.pending: list[tuple[float, bytes]] = []
        self.handler = None

    def send_bytes(self, data) -> bool:
        self.sent.append(bytes(data))
        return True

    def process_pending_messages(self) -> int:
        count = 0
        while self.pending:
            timestamp, data = self.pending.pop(0)
            self.handler(timestamp, data)
            count += 1
        return count

    def disconnect(self) -> None:
        self.disconnected = True


@pytest.fixture
def registry():
    """Factory template registry."""
    return ControlRegistry.factory_template()


@pytest.fixture
def state(registry):
    """Fresh control state, all values 0."""
    return ControlState(registry.controls)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def session(transport):
    """Session on a fake transport, toggle mode off."""
    lc = LaunchControl(LaunchControlConfig(), transport=transport)
    transport.handler = lc.handle_message
    return lc


@pytest.fixture
def toggle_session(transport):
    """Session on a fake transport with pad LED feedback."""
    lc = LaunchControl(LaunchControlConfig(toggle_mode=True), transport=transport)
    transport.handler = lc.handle_message
    return lc
