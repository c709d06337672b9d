#!/usr/bin/env python3
"""CLI tool for running the API and checking section chains offline.

Usage:
    # Run the API server
    python -m subway.cli serve --port 8000

    # Print the station order of a chain stored as JSON
    python -m subway.cli check-chain line.json

    # Try section operations against it without touching any server
    python -m subway.cli check-chain line.json --add Gangnam Yeoksam 6 --remove Seolleung

The chain file holds a list of sections keyed by station name:

    {"sections": [{"upstream": "Gangnam", "downstream": "Yangjae", "distance": 10}]}
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import uvicorn

from subway.core.config import settings
from subway.helpers.section_chain import (
    SectionChain,
    SectionTopologyError,
    apply_insert,
    apply_remove,
)
from subway.models import Section, Station


class StationRegistry:
    """Assigns ids to station names in order of first appearance."""

    def __init__(self) -> None:
        self._stations: dict[str, Station] = {}

    def get(self, name: str) -> Station:
        if name not in self._stations:
            self._stations[name] = Station(id=len(self._stations) + 1, name=name)
        return self._stations[name]


def load_chain(path: Path, registry: StationRegistry) -> SectionChain:
    """
    Load a section chain from a JSON file.

    Args:
        path: JSON file with a "sections" list
        registry: Station registry used to resolve names

    Returns:
        Chain built from the file's sections

    Raises:
        ValueError: If the file is not valid JSON or a section is malformed
        SectionTopologyError: If a section is invalid or the sections do not form a single path
    """
    try:
        data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        sections = [
            Section(registry.get(raw["upstream"]), registry.get(raw["downstream"]), int(raw["distance"]))
            for raw in data["sections"]
        ]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        msg = f"Malformed chain file {path}: {e}"
        raise ValueError(msg) from e
    return SectionChain.from_sections(sections)


def format_chain(chain: SectionChain) -> str:
    path = " -> ".join(station.name for station in chain.stations())
    return f"{path}  ({len(chain)} sections, total distance {chain.total_distance})"


def cmd_serve(args: argparse.Namespace) -> int:
    """
    Run the API server with uvicorn.

    Returns:
        Exit code (0 for success)
    """
    uvicorn.run("subway.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def cmd_check_chain(args: argparse.Namespace) -> int:
    """
    Load a chain, apply the requested operations in order and print the result.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    registry = StationRegistry()
    try:
        chain = load_chain(Path(args.file), registry)
    except (OSError, ValueError, SectionTopologyError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print(f"✅ Loaded: {format_chain(chain)}")

    for upstream, downstream, distance in args.add or []:
        try:
            chain = apply_insert(chain, Section(registry.get(upstream), registry.get(downstream), int(distance)))
        except (ValueError, SectionTopologyError) as e:
            print(f"❌ Cannot add {upstream} -> {downstream} ({distance}): {e}", file=sys.stderr)
            return 1
        print(f"✅ Added {upstream} -> {downstream}: {format_chain(chain)}")

    if args.remove:
        try:
            chain = apply_remove(chain, registry.get(args.remove))
        except SectionTopologyError as e:
            print(f"❌ Cannot remove {args.remove}: {e}", file=sys.stderr)
            return 1
        print(f"✅ Removed {args.remove}: {format_chain(chain)}")

    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI tool.

    Args:
        argv: Arguments to parse (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(description="Subway sections CLI tool")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=settings.HOST, help=f"Bind address (default: {settings.HOST})")
    serve_parser.add_argument("--port", type=int, default=settings.PORT, help=f"Port (default: {settings.PORT})")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")

    check_parser = subparsers.add_parser(
        "check-chain",
        help="Validate a section chain file and try operations on it",
    )
    check_parser.add_argument("file", help="JSON file with a 'sections' list")
    check_parser.add_argument(
        "--add",
        nargs=3,
        action="append",
        metavar=("UPSTREAM", "DOWNSTREAM", "DISTANCE"),
        help="Insert a section (may be repeated; applied in order)",
    )
    check_parser.add_argument("--remove", metavar="STATION", help="Detach the terminal station after any inserts")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    command_handlers = {
        "serve": cmd_serve,
        "check-chain": cmd_check_chain,
    }
    return command_handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
