"""Resolve an endpoint, encode an intent and hand the bytes to the transport."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .encoder import encode, format_bytes
from .errors import EndpointNotFound, NoEndpoint, TransportFailure
from .intents import MidiIntent
from .registry import OutputRegistry
from .state import Endpoint

LOGGER = logging.getLogger(__name__)

SendError = Union[NoEndpoint, TransportFailure]


@dataclass(frozen=True)
class SendResult:
    """Outcome of a single send; ``error`` is ``None`` on success."""

    data: List[int] = field(default_factory=list)
    endpoint_id: Optional[str] = None
    error: Optional[SendError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MidiDispatch:
    """Composes the registry and the encoder for individual sends."""

    def __init__(self, registry: OutputRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> OutputRegistry:
        return self._registry

    def send(self, intent: MidiIntent, reference: Optional[str] = None) -> SendResult:
        """Send ``intent`` to ``reference`` (or the selected endpoint).

        Failures are returned in the result, never raised, so one bad send
        cannot stop the host.
        """
        endpoint = self._registry.resolve(reference)
        if endpoint is None:
            error = NoEndpoint(reference)
            LOGGER.warning("%s", error)
            return SendResult(error=error)

        data = encode(intent)
        try:
            endpoint.send(data)
        except Exception as exc:
            failure = TransportFailure(endpoint.id, exc)
            failure.__cause__ = exc
            LOGGER.warning("%s", failure)
            return SendResult(data=data, endpoint_id=endpoint.id, error=failure)
        LOGGER.debug("Sent [%s] to %r", format_bytes(data), endpoint.id)
        return SendResult(data=data, endpoint_id=endpoint.id)

    # Name/index convenience ---------------------------------------------------

    def lookup(self, reference: Optional[str]) -> Optional[Endpoint]:
        """Find an endpoint by id, list index, exact name or case-insensitive name."""
        if reference is None:
            return None
        text = str(reference).strip()
        if not text:
            return None
        endpoint = self._registry.resolve(text)
        if endpoint is not None:
            return endpoint
        endpoints = self._registry.list()
        if text.isdecimal():
            index = int(text)
            if index < len(endpoints):
                return endpoints[index]
        for candidate in endpoints:
            if candidate.name == text:
                return candidate
        folded = text.casefold()
        for candidate in endpoints:
            if candidate.name.casefold() == folded:
                return candidate
        return None

    def select_output(self, reference: Optional[str]) -> Optional[Endpoint]:
        """Select by id, index or name; a blank reference clears the selection.

        Raises :class:`EndpointNotFound` when nothing matches.
        """
        if reference is None or not str(reference).strip():
            self._registry.select(None)
            return None
        endpoint = self.lookup(reference)
        if endpoint is None:
            self._registry.select(None)
            raise EndpointNotFound(str(reference))
        self._registry.select(endpoint.id)
        return endpoint


__all__ = ["MidiDispatch", "SendError", "SendResult"]
