"""Registry of the MIDI output endpoints currently known to the host."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Optional

from .errors import EndpointNotFound
from .state import Endpoint

LOGGER = logging.getLogger(__name__)


def _is_blank(reference: Optional[str]) -> bool:
    return reference is None or not str(reference).strip()


class OutputRegistry:
    """Live id -> endpoint mapping plus the sticky default selection.

    ``refresh`` swaps the whole mapping in one assignment so readers never see
    a partially rebuilt view. The selection is kept across refreshes even when
    its endpoint disappears; resolution treats such a dangling id as absent.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._endpoints: Dict[str, Endpoint] = {}
        self._selected: Optional[str] = None

    @property
    def selected(self) -> Optional[str]:
        return self._selected

    def refresh(self, live_endpoints: Iterable[Endpoint]) -> None:
        """Replace the known endpoints with ``live_endpoints``."""
        snapshot: Dict[str, Endpoint] = {}
        for endpoint in live_endpoints:
            snapshot[endpoint.id] = endpoint
        with self._lock:
            previous = set(self._endpoints)
            self._endpoints = snapshot
            selected = self._selected
        added = set(snapshot) - previous
        removed = previous - set(snapshot)
        if added or removed:
            LOGGER.info(
                "MIDI outputs changed: %d known (+%d/-%d)", len(snapshot), len(added), len(removed)
            )
        if selected is not None and selected not in snapshot:
            LOGGER.debug("Selected MIDI output %r is no longer available", selected)

    def select(self, reference: Optional[str]) -> None:
        """Set the default endpoint by id; a blank reference clears it.

        Raises :class:`EndpointNotFound` when the id is unknown, leaving the
        selection cleared.
        """
        with self._lock:
            if _is_blank(reference):
                self._selected = None
                return
            if reference not in self._endpoints:
                self._selected = None
                raise EndpointNotFound(str(reference))
            self._selected = reference
        LOGGER.info("Selected MIDI output %r", reference)

    def resolve(self, reference: Optional[str] = None) -> Optional[Endpoint]:
        """Return the endpoint for an explicit id, or for the selection when omitted.

        An explicit reference never falls back to the selection.
        """
        endpoints = self._endpoints
        if not _is_blank(reference):
            return endpoints.get(str(reference))
        selected = self._selected
        if selected is None:
            return None
        return endpoints.get(selected)

    def list(self) -> List[Endpoint]:
        return list(self._endpoints.values())

    def count(self) -> int:
        return len(self._endpoints)


__all__ = ["OutputRegistry"]
