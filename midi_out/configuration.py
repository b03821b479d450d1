"""Configuration loading and dataclasses for the MIDI output session."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


@dataclass(frozen=True)
class MidiConfig:
    default_output: Optional[str] = None
    poll_interval_s: float = 1.0


@dataclass(frozen=True)
class SendDefaults:
    note: int = 60
    note_on_velocity: int = 127
    note_off_velocity: int = 64
    channel: int = 1
    raw_bytes: str = "0x90,60,127"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    midi: MidiConfig = field(default_factory=MidiConfig)
    defaults: SendDefaults = field(default_factory=SendDefaults)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path) -> AppConfig:
    """Load configuration from a YAML file."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    return parse_config(raw)


def parse_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raw = {}
    return AppConfig(
        midi=_parse_midi(_section(raw, "midi")),
        defaults=_parse_defaults(_section(raw, "defaults")),
        logging=LoggingConfig(level=str(_section(raw, "logging").get("level", "INFO"))),
    )


def _section(raw: dict, key: str) -> dict:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


def _parse_midi(raw: dict) -> MidiConfig:
    default_output = raw.get("default_output")
    return MidiConfig(
        default_output=str(default_output) if default_output not in (None, "") else None,
        poll_interval_s=float(raw.get("poll_interval_s", 1.0)),
    )


def _parse_defaults(raw: dict) -> SendDefaults:
    return SendDefaults(
        note=int(raw.get("note", 60)),
        note_on_velocity=int(raw.get("note_on_velocity", 127)),
        note_off_velocity=int(raw.get("note_off_velocity", 64)),
        channel=int(raw.get("channel", 1)),
        raw_bytes=str(raw.get("raw_bytes", "0x90,60,127")),
    )


def load_default_config() -> AppConfig:
    """Load the default config.yaml shipped with the package."""
    path = Path(__file__).resolve().parent / "config.yaml"
    return load_config(path)


__all__ = [
    "AppConfig",
    "LoggingConfig",
    "MidiConfig",
    "SendDefaults",
    "load_config",
    "load_default_config",
    "parse_config",
]
