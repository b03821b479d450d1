"""mido-backed MIDI output endpoints, discovery and hot-plug polling."""

from __future__ import annotations

import logging
import re
import threading
from typing import Callable, Dict, List, Optional, Protocol, Sequence

import mido

from .state import EndpointState

LOGGER = logging.getLogger(__name__)

# ALSA appends "client:port" numbers to port names, e.g. "Synth:Synth MIDI 1 20:0".
_ALSA_SUFFIX = re.compile(r"\s+\d+:\d+$")


class MidiPort(Protocol):
    """Subset of the mido output port API used by the endpoints."""

    def send(self, message: mido.Message) -> None:
        ...

    def close(self) -> None:
        ...


def display_name(port_name: str) -> str:
    """Strip backend numbering from a port name for display."""
    return _ALSA_SUFFIX.sub("", port_name) or port_name


def _open_output(port_name: str) -> MidiPort:
    """Open a single MIDI output port with user-friendly errors."""
    try:
        return mido.open_output(port_name)
    except IOError as exc:
        available = ", ".join(mido.get_output_names())
        raise RuntimeError(
            f"Failed to open MIDI output '{port_name}'. Available ports: {available}"
        ) from exc


def to_messages(data: Sequence[int]) -> List[mido.Message]:
    """Parse a byte sequence into one or more complete mido messages."""
    values = list(data)
    messages = mido.parse_all(values)
    if not messages:
        raise ValueError(f"Bytes do not form a complete MIDI message: {values}")
    framed = [value for message in messages for value in message.bytes()]
    if framed != values:
        raise ValueError(f"Bytes do not frame as complete MIDI messages: {values}")
    return messages


class MidoEndpoint:
    """One mido output port, opened lazily on the first send."""

    def __init__(
        self,
        port_name: str,
        opener: Callable[[str], MidiPort] = _open_output,
    ) -> None:
        self.id = port_name
        self.name = display_name(port_name)
        self.state = EndpointState.DISCONNECTED
        self._opener = opener
        self._port: Optional[MidiPort] = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"MidoEndpoint(id={self.id!r}, state={self.state.value})"

    @property
    def is_open(self) -> bool:
        return self._port is not None

    def send(self, data: Sequence[int]) -> None:
        """Send raw bytes; raises if the port cannot be opened or the bytes are invalid."""
        messages = to_messages(data)
        with self._lock:
            if self._port is None:
                self._port = self._opener(self.id)
                self.state = EndpointState.CONNECTED
                LOGGER.info("Opened MIDI output %r", self.id)
            for message in messages:
                self._port.send(message)

    def close(self) -> None:
        with self._lock:
            port, self._port = self._port, None
            self.state = EndpointState.DISCONNECTED
        if port is not None:
            port.close()
            LOGGER.info("Closed MIDI output %r", self.id)


class MidoTransport:
    """Discovery feed over ``mido.get_output_names``.

    Endpoint objects are reused for ports that stay present so an open port
    survives a refresh; ports that vanish are closed.
    """

    def __init__(
        self,
        list_names: Callable[[], List[str]] = mido.get_output_names,
        opener: Callable[[str], MidiPort] = _open_output,
    ) -> None:
        self._list_names = list_names
        self._opener = opener
        self._endpoints: Dict[str, MidoEndpoint] = {}
        self._lock = threading.Lock()

    def port_names(self) -> List[str]:
        return list(self._list_names())

    def discover(self, names: Optional[Sequence[str]] = None) -> List[MidoEndpoint]:
        """Return endpoints for the currently available output ports."""
        if names is None:
            names = self.port_names()
        with self._lock:
            current: Dict[str, MidoEndpoint] = {}
            for name in names:
                endpoint = self._endpoints.get(name) or MidoEndpoint(name, self._opener)
                if not endpoint.is_open:
                    endpoint.state = EndpointState.CONNECTED
                current[name] = endpoint
            vanished = [ep for name, ep in self._endpoints.items() if name not in current]
            self._endpoints = current
        for endpoint in vanished:
            try:
                endpoint.close()
            except Exception as exc:
                LOGGER.warning("Error closing vanished MIDI output %r: %s", endpoint.id, exc)
        return list(current.values())

    def close(self) -> None:
        with self._lock:
            endpoints, self._endpoints = list(self._endpoints.values()), {}
        for endpoint in endpoints:
            endpoint.close()


class PortWatcher:
    """Polls the transport and reports topology changes from a daemon thread."""

    def __init__(
        self,
        transport: MidoTransport,
        on_change: Callable[[List[MidoEndpoint]], None],
        interval_s: float = 1.0,
    ) -> None:
        self._transport = transport
        self._on_change = on_change
        self._interval_s = max(0.05, float(interval_s))
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_names: Optional[List[str]] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, known_names: Optional[Sequence[str]] = None) -> None:
        if self.running:
            return
        self._last_names = list(known_names) if known_names is not None else None
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="midi-port-watcher", daemon=True)
        self._thread.start()
        LOGGER.info("Watching MIDI outputs every %.2fs", self._interval_s)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self._interval_s + 1.0)
            self._thread = None

    def poll(self) -> bool:
        """Check once for a topology change; returns ``True`` when one was reported."""
        names = self._transport.port_names()
        if names == self._last_names:
            return False
        self._last_names = names
        self._on_change(self._transport.discover(names))
        return True

    def _run(self) -> None:
        while not self._stop.wait(self._interval_s):
            try:
                self.poll()
            except Exception as exc:
                LOGGER.warning("MIDI output poll failed: %s", exc)


__all__ = [
    "MidiPort",
    "MidoEndpoint",
    "MidoTransport",
    "PortWatcher",
    "display_name",
    "to_messages",
]
