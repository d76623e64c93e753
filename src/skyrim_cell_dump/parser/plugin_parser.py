"""Parse a whole plugin into its header, world spaces and cells.

Usage:
    plugin = parse_plugin(Path("Plugin.esp").read_bytes())

The TES4 record comes first, then top-level GRUPs until the end of the
buffer. Only WRLD and CELL top groups are descended into.
"""

import logging

from skyrim_cell_dump.models.plugin import Cell, Plugin, World
from skyrim_cell_dump.parser.binary_reader import BinaryReader
from skyrim_cell_dump.parser.group_walker import TraversalContext, walk_items
from skyrim_cell_dump.parser.options import DEFAULT_OPTIONS, ParseOptions
from skyrim_cell_dump.parser.record_reader import read_plugin_header


logger = logging.getLogger(__name__)


def parse_plugin(data: bytes, options: ParseOptions | None = None) -> Plugin:
    """Parse plugin bytes into a Plugin.

    Later WRLD records with an already-seen form id replace earlier ones;
    cells are kept in file order, duplicates included.

    Raises:
        PluginParseError: Any malformed input. Nothing partial is returned.
    """
    options = options or DEFAULT_OPTIONS
    reader = BinaryReader(data)

    _, header = read_plugin_header(reader, options)

    worlds: dict[int, World] = {}
    cells: list[Cell] = []
    for entity in walk_items(reader, reader.end, TraversalContext(), options):
        if isinstance(entity, World):
            if entity.form_id in worlds:
                logger.debug("WRLD %#010x appears twice; keeping the later one", entity.form_id)
            worlds[entity.form_id] = entity
        else:
            cells.append(entity)

    logger.info(
        "Parsed plugin by %r: %d masters, %d worlds, %d cells",
        header.author, len(header.masters), len(worlds), len(cells),
    )
    return Plugin(header=header, worlds=worlds, cells=cells)
