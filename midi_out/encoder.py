"""Translate MIDI intents into channel-voice byte sequences."""

from __future__ import annotations

import logging
import math
from typing import Any, List

from .errors import MalformedToken
from .intents import ControlChange, MidiIntent, NoteOff, NoteOn, ProgramChange, Raw, to_number

LOGGER = logging.getLogger(__name__)

NOTE_OFF = 0x8
NOTE_ON = 0x9
CONTROL_CHANGE = 0xB
PROGRAM_CHANGE = 0xC

DATA_MASK = 0x7F
BYTE_MASK = 0xFF


def zero_based_channel(channel: Any) -> int:
    """Map a 1-based user channel onto the 0-15 status nibble.

    Out-of-range channels are clamped rather than rejected and non-numeric
    input maps to channel nibble 0.
    """
    number = to_number(channel)
    if math.isinf(number):
        return 15 if number > 0 else 0
    return max(0, min(15, math.floor(number) - 1))


def status_byte(opcode: int, channel: Any) -> int:
    return ((opcode & 0xF) << 4) | zero_based_channel(channel)


def encode(intent: MidiIntent) -> List[int]:
    """Return the wire bytes for ``intent``."""
    if isinstance(intent, NoteOn):
        return [
            status_byte(NOTE_ON, intent.channel),
            intent.note & DATA_MASK,
            intent.velocity & DATA_MASK,
        ]
    if isinstance(intent, NoteOff):
        return [
            status_byte(NOTE_OFF, intent.channel),
            intent.note & DATA_MASK,
            intent.velocity & DATA_MASK,
        ]
    if isinstance(intent, ControlChange):
        return [
            status_byte(CONTROL_CHANGE, intent.channel),
            intent.controller & DATA_MASK,
            intent.value & DATA_MASK,
        ]
    if isinstance(intent, ProgramChange):
        # Program change carries a single data byte.
        return [status_byte(PROGRAM_CHANGE, intent.channel), intent.program & DATA_MASK]
    if isinstance(intent, Raw):
        return [value & BYTE_MASK for value in intent.data]
    raise TypeError(f"Unsupported MIDI intent: {intent!r}")


def parse_token(token: str) -> int:
    """Parse one raw-byte token, hexadecimal when prefixed with ``0x``."""
    text = token.strip()
    try:
        if text[:2].lower() == "0x":
            return int(text[2:], 16)
        return int(text, 10)
    except ValueError as exc:
        raise MalformedToken(token) from exc


def parse_raw_bytes(text: str, strict: bool = False) -> List[int]:
    """Decode a comma-separated byte list such as ``"0x90,60,127"``.

    Empty tokens are dropped. A malformed token degrades to ``0`` unless
    ``strict`` is set, in which case :class:`MalformedToken` propagates.
    Every value is masked to 8 bits.
    """
    values: List[int] = []
    for token in str(text).split(","):
        if not token.strip():
            continue
        try:
            value = parse_token(token)
        except MalformedToken:
            if strict:
                raise
            LOGGER.debug("Malformed raw byte token %r replaced with 0", token)
            value = 0
        values.append(value & BYTE_MASK)
    return values


def format_bytes(data: List[int]) -> str:
    """Render bytes as space-separated hex for log lines."""
    return " ".join(f"{value:02X}" for value in data)


__all__ = [
    "BYTE_MASK",
    "CONTROL_CHANGE",
    "DATA_MASK",
    "NOTE_OFF",
    "NOTE_ON",
    "PROGRAM_CHANGE",
    "encode",
    "format_bytes",
    "parse_raw_bytes",
    "parse_token",
    "status_byte",
    "zero_based_channel",
]
