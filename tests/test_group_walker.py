"""Tests for group_walker: enter/skip decisions, context and size checks."""

import logging
import struct

import pytest

from skyrim_cell_dump.errors import GroupSizeMismatchError, UnexpectedEofError
from skyrim_cell_dump.models.constants import GroupType
from skyrim_cell_dump.models.plugin import Cell, World
from skyrim_cell_dump.models.records import GroupHeader, RecordHeader
from skyrim_cell_dump.parser.binary_reader import BinaryReader
from skyrim_cell_dump.parser.group_walker import (
    GroupAction,
    TraversalContext,
    build_cell,
    child_context,
    group_action,
    read_group_header,
    walk_group,
    walk_items,
)

from plugin_builder import cell, cell_children, group, raw_record, refr, world


def _walk(data: bytes, context: TraversalContext = TraversalContext()) -> list:
    reader = BinaryReader(data)
    entities = list(walk_group(reader, context))
    assert reader.remaining == 0
    return entities


def _group_header(group_type: int, label: bytes = b"\x00\x00\x00\x00") -> GroupHeader:
    return GroupHeader(size=24, label=label, group_type=group_type, timestamp=0, version_control=0)


# --- decision table ---

@pytest.mark.parametrize("label", [b"WRLD", b"CELL"])
def test_top_groups_entered(label):
    assert group_action(GroupType.TOP, label) is GroupAction.ENTER


@pytest.mark.parametrize("label", [b"WEAP", b"NPC_", b"DIAL", b"REFR"])
def test_other_top_groups_skipped(label):
    assert group_action(GroupType.TOP, label) is GroupAction.SKIP


def test_topic_children_skipped():
    assert group_action(GroupType.TOPIC_CHILDREN, b"\x01\x00\x00\x00") is GroupAction.SKIP


def test_unknown_group_type_skipped():
    assert group_action(42, b"\x00\x00\x00\x00") is GroupAction.SKIP
    assert group_action(-1, b"\x00\x00\x00\x00") is GroupAction.SKIP


@pytest.mark.parametrize("group_type", [1, 2, 3, 4, 5, 6, 8, 9, 10])
def test_cell_structure_groups_entered(group_type):
    assert group_action(group_type, b"\x00\x00\x00\x00") is GroupAction.ENTER


# --- context ---

def test_persistent_children_context():
    ctx = child_context(TraversalContext(world_form_id=5), _group_header(8))
    assert ctx == TraversalContext(world_form_id=5, is_persistent=True)


@pytest.mark.parametrize("group_type", [9, 10])
def test_temporary_and_distant_children_clear_persistence(group_type):
    ctx = child_context(TraversalContext(is_persistent=True), _group_header(group_type))
    assert ctx.is_persistent is False


def test_world_children_uses_last_world_record():
    header = _group_header(1, struct.pack("<I", 99))
    assert child_context(TraversalContext(), header, last_world_id=60).world_form_id == 60


def test_world_children_without_world_record_has_no_world():
    header = _group_header(1, struct.pack("<I", 99))
    assert child_context(TraversalContext(), header).world_form_id is None


def test_top_group_resets_context():
    ctx = TraversalContext(world_form_id=60, is_persistent=True)
    assert child_context(ctx, _group_header(0, b"CELL")) == TraversalContext()


def test_block_groups_keep_context():
    ctx = TraversalContext(world_form_id=60, is_persistent=True)
    assert child_context(ctx, _group_header(4)) is ctx


def test_build_cell_interior_drops_grid():
    header = RecordHeader(type="CELL", data_size=0, flags=0, form_id=7, revision=0, version=44)
    c = build_cell(header, "Interior", (1, 2), TraversalContext())
    assert (c.x, c.y, c.world_form_id) == (None, None, None)


def test_build_cell_exterior_without_xclc_at_origin():
    header = RecordHeader(type="CELL", data_size=0, flags=0, form_id=7, revision=0, version=44)
    c = build_cell(header, None, None, TraversalContext(world_form_id=60, is_persistent=True))
    assert (c.x, c.y, c.world_form_id, c.is_persistent) == (0, 0, 60, True)


def test_build_cell_ignores_record_persistent_flag():
    header = RecordHeader(type="CELL", data_size=0, flags=0x400, form_id=7, revision=0, version=44)
    assert build_cell(header, None, None, TraversalContext()).is_persistent is False


# --- walking ---

def test_read_group_header():
    data = struct.pack("<I4siHHI", 48, b"WRLD", 0, 0x1234, 0x5678, 9)
    header = read_group_header(BinaryReader(data))
    assert header.size == 48
    assert header.label_signature == "WRLD"
    assert header.kind is GroupType.TOP
    assert header.timestamp == 0x1234
    assert header.version_control == 0x5678
    assert header.unknown == 9


def test_skipped_group_contents_are_never_read():
    garbage = b"\xff" * 100
    data = group("NPC_", 0, [garbage])
    assert _walk(data) == []


def test_interior_cells():
    data = group("CELL", 0, [
        group(0, 2, [group(0, 3, [cell(1, "A"), cell(2, "B", flags=0x0004_0000)])]),
    ])
    cells = _walk(data)
    assert [c.form_id for c in cells] == [1, 2]
    assert all(c.world_form_id is None and c.x is None for c in cells)


def test_world_cells_get_world_id():
    data = group("WRLD", 0, [
        world(60, "Tamriel"),
        group(60, 1, [
            group(b"\x00\x00\x00\x00", 4, [group(b"\x00\x00\x00\x00", 5, [cell(10, None, (5, -3))])]),
        ]),
    ])
    entities = _walk(data)
    assert entities[0] == World(form_id=60, editor_id="Tamriel")
    assert entities[1] == Cell(form_id=10, x=5, y=-3, world_form_id=60, is_persistent=False)


def test_world_id_follows_most_recent_world_record():
    data = group("WRLD", 0, [
        world(60, "Tamriel"),
        group(60, 1, [cell(10, None, (0, 0))]),
        world(70, "Sovngarde"),
        group(70, 1, [cell(11, None, (1, 1))]),
    ])
    cells = [e for e in _walk(data) if isinstance(e, Cell)]
    assert [(c.form_id, c.world_form_id) for c in cells] == [(10, 60), (11, 70)]


def test_world_context_cleared_after_world_children():
    # A cell after the world children group (malformed but possible) is interior.
    data = group("WRLD", 0, [
        world(60, "Tamriel"),
        group(60, 1, [cell(10, None, (0, 0))]),
        cell(11, None, (2, 2)),
    ])
    cells = [e for e in _walk(data) if isinstance(e, Cell)]
    assert cells[0].world_form_id == 60
    assert cells[1].world_form_id is None
    assert cells[1].x is None


def test_persistence_restored_after_group():
    data = group("WRLD", 0, [
        world(60),
        group(60, 1, [
            group(1, 8, [cell(1, None, (0, 0))]),
            cell(2, None, (0, 1)),
            group(1, 9, [cell(3, None, (0, 2))]),
            group(1, 10, [cell(4, None, (0, 3))]),
        ]),
    ])
    cells = [e for e in _walk(data) if isinstance(e, Cell)]
    assert [(c.form_id, c.is_persistent) for c in cells] == [
        (1, True), (2, False), (3, False), (4, False),
    ]


def test_persistence_inherited_by_nested_groups():
    data = group("CELL", 0, [group(1, 8, [group(0, 2, [group(0, 3, [cell(5)])])])])
    assert _walk(data)[0].is_persistent is True


def test_cell_children_records_skipped():
    data = group("CELL", 0, [
        group(0, 2, [group(0, 3, [
            cell(1, "Room"),
            cell_children(1, persistent=[refr(0x100)], temporary=[refr(0x101), refr(0x102)]),
            cell(2, "Hall"),
        ])]),
    ])
    assert [c.editor_id for c in _walk(data)] == ["Room", "Hall"]


def test_topic_children_contents_never_read():
    data = group("CELL", 0, [group(5, 7, [b"\x00" * 10]), cell(1)])
    assert [c.form_id for c in _walk(data)] == [1]


def test_unrelated_records_skipped_without_decoding():
    # LAND data here is not valid subrecord data and must not be parsed.
    data = group("CELL", 0, [raw_record("LAND", 9, b"\xff" * 7), cell(1)])
    assert [c.form_id for c in _walk(data)] == [1]


def test_group_size_smaller_than_header():
    data = group("CELL", 0, [], size=10)
    with pytest.raises(GroupSizeMismatchError, match="smaller than"):
        _walk(data)


def test_record_overrunning_group():
    inner = cell(1)
    data = group("CELL", 0, [inner], size=24 + len(inner) - 4) + b"\x00" * 4
    with pytest.raises(GroupSizeMismatchError, match="declares size"):
        list(walk_group(BinaryReader(data)))


def test_nested_group_overrunning_parent():
    inner = group(0, 2, [cell(1)])
    data = group("CELL", 0, [inner], size=24 + len(inner) - 2) + b"\x00" * 2
    with pytest.raises(GroupSizeMismatchError):
        list(walk_group(BinaryReader(data)))


def test_skip_past_end_of_buffer():
    data = group("NPC_", 0, [b"\x00" * 10], size=500)
    with pytest.raises(UnexpectedEofError):
        _walk(data)


def test_walk_items_stops_at_end():
    data = cell(1) + cell(2)
    reader = BinaryReader(data)
    first_end = len(cell(1))
    assert [c.form_id for c in walk_items(reader, first_end)] == [1]
    assert reader.position == first_end


def test_walk_items_uses_given_context():
    ctx = TraversalContext(world_form_id=3, is_persistent=True)
    cells = list(walk_items(BinaryReader(cell(1, None, (7, 8))), len(cell(1, None, (7, 8))), ctx))
    assert cells == [Cell(form_id=1, x=7, y=8, world_form_id=3, is_persistent=True)]


def test_world_children_without_world_record_logged(caplog):
    header = _group_header(1, struct.pack("<I", 0x3C))
    with caplog.at_level(logging.DEBUG, logger="skyrim_cell_dump"):
        child_context(TraversalContext(), header)
    assert "0x0000003c has no WRLD" in caplog.text
