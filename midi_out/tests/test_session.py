"""Tests for the host-facing session commands."""

from __future__ import annotations

from dataclasses import dataclass, field

from midi_out.configuration import AppConfig, MidiConfig
from midi_out.errors import NoEndpoint, TransportFailure
from midi_out.midi_io import MidoTransport
from midi_out.session import DENIED, GRANTED, MidiSession


@dataclass
class FakePort:
    name: str
    messages: list = field(default_factory=list)

    def send(self, message) -> None:
        self.messages.append(message)

    def close(self) -> None:
        pass


class FakeBackend:
    def __init__(self, names: list[str]) -> None:
        self.names = list(names)
        self.ports: dict[str, FakePort] = {}

    def list_names(self) -> list[str]:
        return list(self.names)

    def open(self, name: str) -> FakePort:
        return self.ports.setdefault(name, FakePort(name))

    def sent_bytes(self, name: str) -> list:
        return [message.bytes() for message in self.ports[name].messages]


def make_session(
    names: list[str], default_output: str | None = None
) -> tuple[MidiSession, FakeBackend]:
    backend = FakeBackend(names)
    transport = MidoTransport(list_names=backend.list_names, opener=backend.open)
    config = AppConfig(midi=MidiConfig(default_output=default_output, poll_interval_s=0))
    return MidiSession(config, transport=transport), backend


def test_request_access_granted_lists_outputs() -> None:
    session, _ = make_session(["Piano 20:0", "Drums 24:0"])
    assert session.request_access() == GRANTED
    assert session.granted
    assert session.list_outputs() == "Piano, Drums"


def test_request_access_denied_when_backend_fails() -> None:
    def broken() -> list[str]:
        raise OSError("no MIDI backend")

    session = MidiSession(AppConfig(), transport=MidoTransport(list_names=broken))
    assert session.request_access() == DENIED
    assert not session.granted
    assert session.list_outputs() == ""


def test_default_output_selected_on_access() -> None:
    session, _ = make_session(["Piano 20:0", "Drums 24:0"], default_output="Drums")
    session.request_access()
    assert session.registry.selected == "Drums 24:0"


def test_note_on_with_defaults_and_loose_values() -> None:
    session, backend = make_session(["Piano"])
    session.request_access()
    assert session.select_output("0")

    assert session.send_note_on().ok
    assert session.send_note_on("62", "100.7", "2").ok
    assert session.send_note_off(note=62).ok
    assert backend.sent_bytes("Piano") == [
        [0x90, 60, 127],
        [0x91, 62, 100],
        [0x80, 62, 64],
    ]


def test_non_numeric_values_coerce_to_zero() -> None:
    session, backend = make_session(["Piano"])
    session.request_access()
    session.select_output("Piano")

    result = session.send_note_on("abc", "", "nope")
    assert result.data == [0x90, 0, 0]


def test_control_and_program_change() -> None:
    session, backend = make_session(["Piano"])
    session.request_access()
    session.select_output("Piano")

    session.send_control_change(1, 127)
    session.send_program_change(5, channel=10)
    assert backend.sent_bytes("Piano") == [[0xB0, 1, 127], [0xC9, 5]]


def test_send_raw_text_and_sequence() -> None:
    session, backend = make_session(["Piano"])
    session.request_access()
    session.select_output("Piano")

    assert session.send_raw().data == [0x90, 60, 127]
    assert session.send_raw("240,126,127,9,1,247").ok
    assert session.send_raw([0xB0, "7", 100.0]).data == [0xB0, 7, 100]
    assert backend.sent_bytes("Piano")[1] == [240, 126, 127, 9, 1, 247]


def test_send_to_explicit_output_by_name() -> None:
    session, backend = make_session(["Piano 20:0", "Drums 24:0"])
    session.request_access()

    result = session.send_note_on(36, 100, 10, output="Drums")
    assert result.ok
    assert result.endpoint_id == "Drums 24:0"
    assert backend.sent_bytes("Drums 24:0") == [[0x99, 36, 100]]


def test_send_without_selection_is_no_endpoint() -> None:
    session, _ = make_session(["Piano"])
    session.request_access()
    assert isinstance(session.send_note_on().error, NoEndpoint)


def test_unknown_selection_returns_false() -> None:
    session, _ = make_session(["Piano"])
    session.request_access()
    session.select_output("Piano")
    assert session.select_output("Organ") is False
    assert session.registry.selected is None
    assert session.select_output("") is True


def test_incomplete_raw_bytes_are_a_transport_failure() -> None:
    session, _ = make_session(["Piano"])
    session.request_access()
    session.select_output("Piano")

    result = session.send_raw("60,127")
    assert isinstance(result.error, TransportFailure)
    assert isinstance(result.error.cause, ValueError)


def test_refresh_follows_unplugged_selection() -> None:
    session, backend = make_session(["Piano", "Drums"])
    session.request_access()
    session.select_output("Piano")

    backend.names = ["Drums"]
    assert session.refresh() == 1
    assert session.registry.selected == "Piano"
    assert isinstance(session.send_note_on().error, NoEndpoint)

    backend.names = ["Drums", "Piano"]
    session.refresh()
    assert session.send_note_on().ok


def test_repeated_access_and_close() -> None:
    backend = FakeBackend(["Piano"])
    transport = MidoTransport(list_names=backend.list_names, opener=backend.open)
    config = AppConfig(midi=MidiConfig(poll_interval_s=0.05))
    with MidiSession(config, transport=transport) as session:
        assert session.request_access() == GRANTED
        assert session.request_access() == GRANTED
    assert session.registry.count() == 1


def test_partially_framed_raw_bytes_are_not_sent() -> None:
    session, backend = make_session(["Piano"])
    session.request_access()
    session.select_output("Piano")

    result = session.send_raw("0x90,60,127,0x80,60")
    assert isinstance(result.error, TransportFailure)
    assert "Piano" not in backend.ports


def test_send_raw_single_number() -> None:
    session, backend = make_session(["Piano"])
    session.request_access()
    session.select_output("Piano")

    result = session.send_raw(0xF8)
    assert result.ok
    assert result.data == [0xF8]
    assert backend.sent_bytes("Piano") == [[0xF8]]


def test_non_ascii_digit_reference_does_not_raise() -> None:
    session, _ = make_session(["Piano"])
    session.request_access()

    assert session.select_output("²") is False
    assert isinstance(session.send_note_on(output="²").error, NoEndpoint)
