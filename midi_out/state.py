"""Types describing MIDI output endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, Sequence


class EndpointState(Enum):
    """Live availability of an output endpoint."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Endpoint(Protocol):
    """Subset of an output endpoint used by the registry and dispatch."""

    id: str
    name: str
    state: EndpointState

    def send(self, data: Sequence[int]) -> None:
        ...


__all__ = ["Endpoint", "EndpointState"]
