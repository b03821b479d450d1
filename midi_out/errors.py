"""Error types reported by the MIDI output core."""

from __future__ import annotations

from typing import Optional


class MidiOutError(Exception):
    """Base class for MIDI output errors."""


class EndpointNotFound(MidiOutError, KeyError):
    """``select`` was given an id that is not in the current registry snapshot."""

    def __init__(self, reference: str) -> None:
        super().__init__(reference)
        self.reference = reference

    def __str__(self) -> str:
        return f"No MIDI output with id {self.reference!r}"


class NoEndpoint(MidiOutError):
    """No target endpoint could be determined for a send."""

    def __init__(self, reference: Optional[str] = None) -> None:
        self.reference = reference
        if reference:
            message = f"No MIDI output matches {reference!r}"
        else:
            message = "No MIDI output selected"
        super().__init__(message)


class TransportFailure(MidiOutError):
    """The endpoint's send primitive raised; ``cause`` holds the original error."""

    def __init__(self, endpoint_id: str, cause: BaseException) -> None:
        super().__init__(f"Send to {endpoint_id!r} failed: {cause}")
        self.endpoint_id = endpoint_id
        self.cause = cause


class MalformedToken(MidiOutError, ValueError):
    """A raw-byte token could not be parsed as an integer."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Malformed MIDI byte token: {token!r}")
        self.token = token


__all__ = [
    "EndpointNotFound",
    "MalformedToken",
    "MidiOutError",
    "NoEndpoint",
    "TransportFailure",
]
