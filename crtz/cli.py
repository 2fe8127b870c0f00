"""
Command line entry point.

Usage:
    crtz [--debug] [--player NAME] [--verbose] script.crtz
    crtz --export [--output PATH] script.crtz
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from crtz.assets.pictures import PictureLibrary
from crtz.core.config import RunConfig
from crtz.core.events import Event, EventBus, ScriptEvent
from crtz.export import export_program
from crtz.lang.diagnostics import CrtzError
from crtz.lang.parser import parse_string
from crtz.runtime.console import Console
from crtz.runtime.interpreter import Interpreter

logger = logging.getLogger(__name__)


def log_event(event: Event) -> None:
    logger.debug(f"{event.type.name} {event.data}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crtz",
        description="Run a .crtz branching dialogue script",
    )
    parser.add_argument("script", help="Path to the .crtz script")
    parser.add_argument("--debug", action="store_true", help="Start in the line debugger")
    parser.add_argument("--player", default=RunConfig().player_name,
                        help="Name substituted for [@You]")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    parser.add_argument("--export", action="store_true",
                        help="Write the parsed script as JSON instead of running it")
    parser.add_argument("--output", help="Output path for --export (default: <script>.json)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors
        return 0 if e.code == 0 else 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    path = Path(args.script)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            source = f.read()
    except OSError:
        print(f"Couldn't open file: {args.script}", file=sys.stderr)
        return 1

    result = parse_string(source)
    logger.debug(f"Parsed {path}: {len(result.program.nodes)} nodes, "
                 f"{len(result.diagnostics)} diagnostics")

    if args.export:
        output = Path(args.output) if args.output else path.with_suffix('.json')
        try:
            document = export_program(result.program)
        except CrtzError as e:
            logger.error(str(e))
            return 1
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2)
        print(f"Compiled {path} -> {output}")
        return 0

    events = EventBus()
    if args.verbose:
        for event_type in ScriptEvent:
            events.subscribe(event_type, log_event)

    config = RunConfig(player_name=args.player, debug=args.debug)
    interpreter = Interpreter(
        result.program,
        config=config,
        console=Console(),
        events=events,
        pictures=PictureLibrary() if result.program.pictures else None,
    )
    interpreter.run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
