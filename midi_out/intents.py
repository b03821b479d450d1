"""Typed MIDI intents and coercion of loosely-typed front-end values."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class NoteOn:
    note: int
    velocity: int
    channel: int = 1


@dataclass(frozen=True)
class NoteOff:
    note: int
    velocity: int = 0
    channel: int = 1


@dataclass(frozen=True)
class ControlChange:
    controller: int
    value: int
    channel: int = 1


@dataclass(frozen=True)
class ProgramChange:
    program: int
    channel: int = 1


@dataclass(frozen=True)
class Raw:
    """Literal bytes sent without channel-voice framing (SysEx and friends)."""

    data: Tuple[int, ...]


MidiIntent = Union[NoteOn, NoteOff, ControlChange, ProgramChange, Raw]


def to_number(value: Any) -> float:
    """Coerce an arbitrary value to a float, falling back to ``0.0``.

    Booleans count as 1/0, numeric strings are parsed (``0x`` prefixes as
    hexadecimal) and anything else, NaN included, becomes zero.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            try:
                number = float(int(text, 16)) if text.lower().startswith("0x") else 0.0
            except ValueError:
                number = 0.0
            except OverflowError:
                number = math.inf
    else:
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def to_int(value: Any) -> int:
    """Coerce to an integer by truncation; non-finite values become ``0``."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = to_number(value)
    if math.isinf(number):
        return 0
    return int(number)


def to_channel(value: Any) -> int:
    """Coerce a user-facing channel to an integer by flooring.

    Infinite values saturate to the nearest end of the 1-16 range; the
    encoder does the final clamping.
    """
    number = to_number(value)
    if math.isinf(number):
        return 16 if number > 0 else 1
    return math.floor(number)


__all__ = [
    "ControlChange",
    "MidiIntent",
    "NoteOff",
    "NoteOn",
    "ProgramChange",
    "Raw",
    "to_channel",
    "to_int",
    "to_number",
]
