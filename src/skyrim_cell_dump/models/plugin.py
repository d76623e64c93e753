"""Extracted plugin data: TES4 header, world spaces and cells.

Form ids are plugin-relative. The top byte indexes into the header's
``masters`` list; a value equal to ``len(masters)`` means the plugin
itself owns the record. No load-order resolution happens here.
"""

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True, slots=True)
class PluginHeader:
    """Fields from the TES4 record at the start of every plugin."""
    version: float
    num_records_and_groups: int
    next_object_id: int
    author: str
    description: str | None = None
    masters: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        data = asdict(self)
        data["masters"] = list(self.masters)
        return data


@dataclass(frozen=True, slots=True)
class World:
    """A WRLD record."""
    form_id: int
    editor_id: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class Cell:
    """A CELL record.

    x, y and world_form_id are set together for exterior cells and are all
    None for interior cells. is_persistent comes from the enclosing
    persistent/temporary children group, not from the record flags.
    """
    form_id: int
    editor_id: str | None = None
    x: int | None = None
    y: int | None = None
    world_form_id: int | None = None
    is_persistent: bool = False

    @property
    def is_exterior(self) -> bool:
        return self.world_form_id is not None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class Plugin:
    """Everything extracted from one plugin file."""
    header: PluginHeader
    worlds: dict[int, World] = field(default_factory=dict)
    cells: list[Cell] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Structured form used for JSON output (worlds in discovery order)."""
        return {
            "header": self.header.to_dict(),
            "worlds": [w.to_dict() for w in self.worlds.values()],
            "cells": [c.to_dict() for c in self.cells],
        }
