"""Unit tests for the protocol codec."""

import mido
import pytest

from launchcontrol import (
    COLOR_CYCLE,
    ColorBrightness,
    Control,
    MalformedMessageError,
    NOVATION_ID,
    PreconditionViolation,
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


class TestClassify:
    """Test inbound classification and state updates."""

    def test_pad_press(self, state, registry):
        control, value = classify([152, 9, 127], 0.0, state, registry)

        assert control is Control.PAD1
        assert value == 127
        assert state.get_value(Control.PAD1) == 127

    def test_pad_press_then_release(self, state, registry):
        """Pads store abs(old - new): press then release leaves 127, not 0."""
        classify([152, 9, 127], 0.0, state, registry)
        control, value = classify([152, 9, 0], 0.1, state, registry)

        assert control is Control.PAD1
        assert value == 0
        assert state.get_value(Control.PAD1) == 127

    def test_pad_second_press_returns_to_zero(self, state, registry):
        """A second press (127) after press/release stores abs(127 - 127) = 0."""
        for value in (127, 0, 127):
            classify([152, 26, value], 0.0, state, registry)

        assert state.get_value(Control.PAD6) == 0
        assert not state.is_on(Control.PAD6)

    def test_knob_overwrites(self, state, registry):
        classify([184, 41, 10], 0.0, state, registry)
        control, value = classify([184, 41, 77], 0.0, state, registry)

        assert control is Control.KNOB1
        assert value == 77
        assert state.get_value(Control.KNOB1) == 77

    def test_knob_can_decrease(self, state, registry):
        classify([184, 28, 100], 0.0, state, registry)
        classify([184, 28, 3], 0.0, state, registry)

        assert state.get_value(Control.KNOB16) == 3

    def test_upper_bank_knob(self, state, registry):
        control, _ = classify([184, 21, 64], 0.0, state, registry)

        assert control is Control.KNOB9
        assert name_of(control) == "KNOB 9"

    def test_unknown_leaves_state_unchanged(self, state, registry):
        before = state.snapshot()

        control, value = classify([176, 41, 55], 0.0, state, registry)

        assert control is Control.UNKNOWN
        assert value == 55
        assert state.snapshot() == before
        assert state.get_history() == []

    def test_accepts_bytes(self, state, registry):
        control, value = classify(bytes([0x98, 0x0C, 0x7F]), 0.0, state, registry)

        assert control is Control.PAD4
        assert value == 127

    def test_uses_shared_registry_by_default(self, state):
        control, _ = classify([152, 28, 127], 0.0, state)
        assert control is Control.PAD8

    @pytest.mark.parametrize("raw", [[], [152], [152, 9]])
    def test_short_message(self, state, registry, raw):
        with pytest.raises(MalformedMessageError):
            classify(raw, 0.0, state, registry)

    def test_long_message(self, state, registry):
        """SysEx and other long messages must be routed elsewhere."""
        with pytest.raises(MalformedMessageError):
            classify([0xF0, 0x00, 0x20, 0x29, 0xF7], 0.0, state, registry)

    def test_malformed_is_value_error(self, state, registry):
        with pytest.raises(ValueError):
            classify([152, 9], 0.0, state, registry)

    def test_deterministic(self, registry):
        """Same state and input produce the same output and transition."""
        from launchcontrol import ControlState

        a = ControlState(registry.controls)
        b = ControlState(registry.controls)
        for raw in ([152, 9, 127], [184, 45, 12], [152, 9, 0], [1, 2, 3]):
            assert classify(raw, 0.0, a, registry) == classify(raw, 0.0, b, registry)
        assert a.snapshot() == b.snapshot()


class TestNaming:
    """Test control labels."""

    def test_pads(self):
        assert name_of(Control.PAD1) == "PAD 1"
        assert name_of(Control.PAD3) == "PAD 3"
        assert name_of(Control.PAD8) == "PAD 8"

    def test_knobs(self):
        assert name_of(Control.KNOB1) == "KNOB 1"
        assert name_of(Control.KNOB8) == "KNOB 8"
        assert name_of(Control.KNOB9) == "KNOB 9"
        assert name_of(Control.KNOB16) == "KNOB 16"

    def test_unknown(self):
        assert name_of(Control.UNKNOWN) == "UNKNOWN"

    def test_total(self):
        names = {name_of(c) for c in Control}
        assert len(names) == 25

    def test_describe_message(self, registry):
        line = describe_message([152, 9, 127], 0.25, registry)
        assert line == "Bytes[3]: 152, 9, 127, Timestamp = 0.25 -> PAD 1 value=127"

    def test_describe_unknown(self, registry):
        assert describe_message([1, 2, 3], 0.0, registry).endswith("-> UNKNOWN value=3")

    def test_describe_sysex(self, registry):
        line = describe_message([0xF0, 0x00, 0x20, 0x29, 0xF7], 1.5, registry)
        assert line == "Bytes[5]: 240, 0, 32, 41, 247, Timestamp = 1.5"

    def test_describe_does_not_touch_state(self, state, registry):
        describe_message([152, 9, 127], 0.0, registry)
        assert state.get_value(Control.PAD1) == 0


class TestSysExFrame:
    """Test SysEx framing."""

    def test_frame(self):
        assert sysex_frame(NOVATION_ID, [0x01, 0x02]) == bytes([0xF0, 0x00, 0x20, 0x29, 0x01, 0x02, 0xF7])

    def test_empty_payload(self):
        assert sysex_frame(NOVATION_ID, []) == bytes([0xF0, 0x00, 0x20, 0x29, 0xF7])

    def test_bad_manufacturer_id(self):
        with pytest.raises(ValueError):
            sysex_frame([0x41], [0x01])

    def test_strip_recovers_payload(self):
        payload = bytes([0x02, 0x0A, 0x78, 0x08, 0x03, 0x3C])
        assert strip_sysex_frame(sysex_frame(NOVATION_ID, payload)) == payload

    def test_strip_empty_payload(self):
        assert strip_sysex_frame(sysex_frame(NOVATION_ID, [])) == b""

    def test_strip_wrong_manufacturer(self):
        with pytest.raises(MalformedMessageError):
            strip_sysex_frame(sysex_frame((0x00, 0x20, 0x32), [0x01]))

    def test_strip_missing_end(self):
        with pytest.raises(MalformedMessageError):
            strip_sysex_frame([0xF0, 0x00, 0x20, 0x29, 0x01])


class TestEncoding:
    """Test outbound message construction."""

    def test_set_led_red_full(self):
        msg = encode_set_led(0, ColorBrightness.RED_FULL)
        assert msg == bytes.fromhex("F0 00 20 29 02 0A 78 08 00 0F F7")

    def test_set_led_button_and_template(self):
        msg = encode_set_led(11, ColorBrightness.GREEN_FULL, template=0x0F)
        assert list(msg) == [0xF0, 0x00, 0x20, 0x29, 0x02, 0x0A, 0x78, 0x0F, 0x0B, 0x3C, 0xF7]

    def test_set_led_out_of_range_index_passed_through(self):
        msg = encode_set_led(20, ColorBrightness.OFF)
        assert msg[8] == 20

    def test_set_template(self):
        assert encode_set_template(0x08) == bytes.fromhex("F0 00 20 29 02 0A 77 08 F7")

    def test_reset(self):
        assert encode_reset(0x08) == bytes([0xB8, 0x00, 0x00])
        assert encode_reset(0) == bytes([0xB0, 0x00, 0x00])

    def test_reset_is_not_sysex(self):
        assert encode_reset(0x0F)[0] != 0xF0
        assert len(encode_reset(0x0F)) == 3

    @pytest.mark.parametrize("template", [-1, 16, 0x7F])
    def test_reset_rejects_template_out_of_range(self, template):
        with pytest.raises(PreconditionViolation, match="Template must be 0-15"):
            encode_reset(template)

    def test_template_out_of_range_rejected_by_sysex_encoders(self):
        with pytest.raises(PreconditionViolation):
            encode_set_template(16)
        with pytest.raises(PreconditionViolation):
            encode_set_led(0, ColorBrightness.RED_FULL, template=16)

    def test_color_values(self):
        assert ColorBrightness.OFF == 0x0C
        assert ColorBrightness.RED_LOW == 0x0D
        assert ColorBrightness.RED_FULL == 0x0F
        assert ColorBrightness.AMBER_LOW == 0x1D
        assert ColorBrightness.AMBER_FULL == 0x3F
        assert ColorBrightness.YELLOW_FULL == 0x3E
        assert ColorBrightness.GREEN_LOW == 0x1C
        assert ColorBrightness.GREEN_FULL == 0x3C

    def test_color_cycle(self):
        assert len(COLOR_CYCLE) == 8
        assert set(COLOR_CYCLE) == set(ColorBrightness)
        assert COLOR_CYCLE[0] is ColorBrightness.OFF
        assert COLOR_CYCLE[-1] is ColorBrightness.RED_FULL


class TestToMido:
    """Test conversion of encoded bytes to mido messages."""

    def test_sysex(self):
        msg = to_mido(encode_set_led(2, ColorBrightness.AMBER_FULL))

        assert msg.type == "sysex"
        assert list(msg.data) == [0x00, 0x20, 0x29, 0x02, 0x0A, 0x78, 0x08, 0x02, 0x3F]

    def test_reset(self):
        msg = to_mido(encode_reset(0x08))

        assert msg.type == "control_change"
        assert msg.channel == 8
        assert msg.control == 0
        assert msg.value == 0

    def test_bytes_round_trip(self):
        data = encode_set_template(0x03)
        assert bytes(to_mido(data).bytes()) == data
        assert isinstance(to_mido(data), mido.Message)
