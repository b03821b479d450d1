"""Host-facing MIDI output session accepting loosely-typed command values."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from .configuration import AppConfig
from .dispatch import MidiDispatch, SendResult
from .encoder import parse_raw_bytes
from .errors import EndpointNotFound
from .intents import (
    ControlChange,
    MidiIntent,
    NoteOff,
    NoteOn,
    ProgramChange,
    Raw,
    to_channel,
    to_int,
)
from .midi_io import MidoEndpoint, MidoTransport, PortWatcher
from .registry import OutputRegistry

LOGGER = logging.getLogger(__name__)

GRANTED = "granted"
DENIED = "denied"


class MidiSession:
    """Owns the transport, registry and dispatch for one host session.

    Every command coerces its arguments into a typed intent before handing it
    to :class:`MidiDispatch`; send and select failures are logged and returned,
    never raised.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        transport: Optional[MidoTransport] = None,
        registry: Optional[OutputRegistry] = None,
    ) -> None:
        self._config = config or AppConfig()
        self._transport = transport or MidoTransport()
        self._registry = registry or OutputRegistry()
        self._dispatch = MidiDispatch(self._registry)
        self._watcher: Optional[PortWatcher] = None
        self._granted = False

    def __enter__(self) -> "MidiSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def registry(self) -> OutputRegistry:
        return self._registry

    @property
    def dispatch(self) -> MidiDispatch:
        return self._dispatch

    @property
    def granted(self) -> bool:
        return self._granted

    # Access and topology ------------------------------------------------------

    def request_access(self) -> str:
        """Enumerate outputs and start following hot-plug changes."""
        try:
            names = self._transport.port_names()
        except Exception as exc:
            LOGGER.warning("MIDI access denied: %s", exc)
            self._granted = False
            return DENIED
        self._registry.refresh(self._transport.discover(names))
        self._granted = True
        LOGGER.info("MIDI access granted: %d output(s)", self._registry.count())

        interval = self._config.midi.poll_interval_s
        if interval > 0 and self._watcher is None:
            self._watcher = PortWatcher(self._transport, self._on_topology_change, interval)
            self._watcher.start(known_names=names)

        default_output = self._config.midi.default_output
        if default_output and self._registry.selected is None:
            self.select_output(default_output)
        return GRANTED

    def refresh(self) -> int:
        """Re-enumerate outputs on demand; returns the number now known."""
        self._registry.refresh(self._transport.discover())
        return self._registry.count()

    def _on_topology_change(self, endpoints: List[MidoEndpoint]) -> None:
        self._registry.refresh(endpoints)

    # Commands -----------------------------------------------------------------

    def list_outputs(self) -> str:
        """Comma-separated output names in registry order."""
        return ", ".join(endpoint.name for endpoint in self._registry.list())

    def select_output(self, reference: Any) -> bool:
        """Select by id, index or name; blank clears the selection."""
        text = "" if reference is None else str(reference)
        try:
            endpoint = self._dispatch.select_output(text)
        except EndpointNotFound as exc:
            LOGGER.warning("%s", exc)
            return False
        if endpoint is None:
            LOGGER.info("MIDI output selection cleared")
        return True

    def send(self, intent: MidiIntent, output: Any = None) -> SendResult:
        reference = None if output is None else str(output)
        if reference is not None and reference.strip():
            endpoint = self._dispatch.lookup(reference)
            if endpoint is not None:
                reference = endpoint.id
        return self._dispatch.send(intent, reference)

    def send_note_on(
        self,
        note: Any = None,
        velocity: Any = None,
        channel: Any = None,
        output: Any = None,
    ) -> SendResult:
        defaults = self._config.defaults
        intent = NoteOn(
            note=to_int(defaults.note if note is None else note),
            velocity=to_int(defaults.note_on_velocity if velocity is None else velocity),
            channel=to_channel(defaults.channel if channel is None else channel),
        )
        return self.send(intent, output)

    def send_note_off(
        self,
        note: Any = None,
        velocity: Any = None,
        channel: Any = None,
        output: Any = None,
    ) -> SendResult:
        defaults = self._config.defaults
        intent = NoteOff(
            note=to_int(defaults.note if note is None else note),
            velocity=to_int(defaults.note_off_velocity if velocity is None else velocity),
            channel=to_channel(defaults.channel if channel is None else channel),
        )
        return self.send(intent, output)

    def send_control_change(
        self, controller: Any, value: Any, channel: Any = None, output: Any = None
    ) -> SendResult:
        intent = ControlChange(
            controller=to_int(controller),
            value=to_int(value),
            channel=to_channel(self._config.defaults.channel if channel is None else channel),
        )
        return self.send(intent, output)

    def send_program_change(
        self, program: Any, channel: Any = None, output: Any = None
    ) -> SendResult:
        intent = ProgramChange(
            program=to_int(program),
            channel=to_channel(self._config.defaults.channel if channel is None else channel),
        )
        return self.send(intent, output)

    def send_raw(self, data: Any = None, output: Any = None) -> SendResult:
        """Send literal bytes.

        Accepts ``"0x90,60,127"`` text, a single number or a sequence of values;
        anything else is parsed from its string form.
        """
        if data is None:
            data = self._config.defaults.raw_bytes
        if isinstance(data, str):
            values = parse_raw_bytes(data)
        elif isinstance(data, (bytes, bytearray)):
            values = list(data)
        elif isinstance(data, (int, float)):
            values = [to_int(data)]
        elif isinstance(data, Iterable):
            values = [to_int(value) for value in data]
        else:
            values = parse_raw_bytes(str(data))
        return self.send(Raw(tuple(values)), output)

    def close(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None
        self._transport.close()


__all__ = ["DENIED", "GRANTED", "MidiSession"]
