"""Dump the header, world spaces and cells of a Skyrim plugin.

Usage:
    python -m scripts.dump_cells PLUGIN [-f json|text] [-p] [-v] [--lenient-text]

Text output is a flat report; JSON output mirrors Plugin.to_dict().
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from skyrim_cell_dump.errors import PluginParseError
from skyrim_cell_dump.models.plugin import Cell, Plugin
from skyrim_cell_dump.parser.options import ParseOptions
from skyrim_cell_dump.parser.plugin_parser import parse_plugin


FORMAT_JSON = "json"
FORMAT_TEXT = "text"

_FORMAT_ALIASES = {
    "json": FORMAT_JSON,
    "text": FORMAT_TEXT,
    "plain": FORMAT_TEXT,
    "plain_text": FORMAT_TEXT,
    "plaintext": FORMAT_TEXT,
}


def parse_format(value: str) -> str:
    """argparse type for --format; accepts a few spellings of 'text'."""
    try:
        return _FORMAT_ALIASES[value.strip().lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(f"Unrecognized format {value!r}") from None


def _opt(value) -> str:
    return "-" if value is None else str(value)


def _format_cell(cell: Cell) -> str:
    if cell.is_exterior:
        where = f"world {cell.world_form_id:#010x} ({cell.x}, {cell.y})"
    else:
        where = "interior"
    persistent = " persistent" if cell.is_persistent else ""
    return f"  {cell.form_id:#010x}  {_opt(cell.editor_id):<32} {where}{persistent}"


def format_text(plugin: Plugin) -> str:
    header = plugin.header
    lines = [
        f"Version:      {header.version:g}",
        f"Records:      {header.num_records_and_groups}",
        f"Next ID:      {header.next_object_id}",
        f"Author:       {header.author}",
        f"Description:  {_opt(header.description)}",
        f"Masters:      {', '.join(header.masters) if header.masters else '-'}",
        "",
        f"Worlds ({len(plugin.worlds)}):",
    ]
    for world in plugin.worlds.values():
        lines.append(f"  {world.form_id:#010x}  {_opt(world.editor_id)}")
    lines.append("")
    lines.append(f"Cells ({len(plugin.cells)}):")
    lines.extend(_format_cell(cell) for cell in plugin.cells)
    return "\n".join(lines)


def format_json(plugin: Plugin, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(plugin.to_dict(), indent=2, ensure_ascii=False)
    return json.dumps(plugin.to_dict(), separators=(",", ":"), ensure_ascii=False)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Extract world and cell data from a Skyrim plugin (.esp/.esm/.esl)"
    )
    parser.add_argument("plugin", type=Path, help="Path to the plugin to parse.")
    parser.add_argument("-f", "--format", type=parse_format, default=FORMAT_TEXT,
                        help="Output format: json or text (default: text).")
    parser.add_argument("-p", "--pretty", action="store_true",
                        help="Pretty-print JSON output.")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress to stderr; repeat for debug output.")
    parser.add_argument("--lenient-text", action="store_true",
                        help="Replace undecodable string bytes instead of failing.")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    try:
        data = args.plugin.read_bytes()
    except OSError as exc:
        print(f"Failed to read from plugin file {args.plugin}: {exc}", file=sys.stderr)
        return 1

    options = ParseOptions(text_errors="replace" if args.lenient_text else "strict")
    try:
        plugin = parse_plugin(data, options)
    except PluginParseError as exc:
        print(f"Failed to parse plugin file {args.plugin}: {exc}", file=sys.stderr)
        return 1

    if args.format == FORMAT_JSON:
        print(format_json(plugin, pretty=args.pretty))
    else:
        print(format_text(plugin))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
