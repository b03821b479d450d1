"""Command-line entrypoint for sending MIDI messages to an output port."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from .configuration import AppConfig, load_config, load_default_config
from .dispatch import SendResult
from .session import DENIED, MidiSession

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SEND_FAILED = 1
EXIT_ACCESS_DENIED = 2


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send MIDI messages to a MIDI output port.")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML. Defaults to bundled config.yaml if omitted.",
    )
    parser.add_argument(
        "--output",
        help="Output id, list index or name. Defaults to midi.default_output.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("outputs", help="List available MIDI outputs.")

    for name, help_text in (("note-on", "Send a Note On."), ("note-off", "Send a Note Off.")):
        note = commands.add_parser(name, help=help_text)
        note.add_argument("note")
        note.add_argument("--velocity")
        note.add_argument("--channel")

    cc = commands.add_parser("cc", help="Send a Control Change.")
    cc.add_argument("controller")
    cc.add_argument("value")
    cc.add_argument("--channel")

    program = commands.add_parser("program", help="Send a Program Change.")
    program.add_argument("program")
    program.add_argument("--channel")

    raw = commands.add_parser("raw", help="Send comma-separated raw bytes, e.g. 0x90,60,127.")
    raw.add_argument("bytes", nargs="?")

    return parser.parse_args(list(argv) if argv is not None else None)


def run(args: argparse.Namespace, session: MidiSession) -> int:
    if session.request_access() == DENIED:
        LOGGER.error("Could not access MIDI outputs")
        return EXIT_ACCESS_DENIED

    if args.command == "outputs":
        for index, endpoint in enumerate(session.registry.list()):
            print(f"{index}: {endpoint.name} [{endpoint.id}]")
        return EXIT_OK

    if args.output is not None and not session.select_output(args.output):
        return EXIT_SEND_FAILED

    result = _dispatch_command(args, session)
    if not result.ok:
        LOGGER.error("Send failed: %s", result.error)
        return EXIT_SEND_FAILED
    LOGGER.info("Sent %s to %s", result.data, result.endpoint_id)
    return EXIT_OK


def _dispatch_command(args: argparse.Namespace, session: MidiSession) -> SendResult:
    if args.command == "note-on":
        return session.send_note_on(args.note, args.velocity, args.channel)
    if args.command == "note-off":
        return session.send_note_off(args.note, args.velocity, args.channel)
    if args.command == "cc":
        return session.send_control_change(args.controller, args.value, args.channel)
    if args.command == "program":
        return session.send_program_change(args.program, args.channel)
    if args.command == "raw":
        return session.send_raw(args.bytes)
    raise ValueError(f"Unknown command: {args.command}")


def _load(args: argparse.Namespace) -> AppConfig:
    return load_config(args.config) if args.config else load_default_config()


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    config = _load(args)
    logging.basicConfig(level=getattr(logging, config.logging.level.upper(), logging.INFO))
    with MidiSession(config) as session:
        return run(args, session)


if __name__ == "__main__":
    sys.exit(main())
