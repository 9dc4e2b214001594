from signage.editor_state import Direction, RejectionReason
from signage.grid import GridModel
from signage.keyboard import KeyboardMover
from signage.models import LayoutItem
from signage.mutations import counter_ids, next_free_id, resize_item, uuid_ids

GRID = GridModel(cols=32, rows=18)


def make_item(item_id, x, y, w, h):
    return LayoutItem(id=item_id, x=x, y=y, w=w, h=h, component_type="custom", props={"nested": {"k": 1}})


def test_move_left_at_edge_is_noop():
    items = [make_item("a", 0, 0, 2, 2)]
    result = KeyboardMover(GRID).move(items, "a", Direction.LEFT)
    assert not result.applied
    assert result.reason is None
    assert result.items == items


def test_move_right_one_cell():
    items = [make_item("a", 0, 0, 2, 2)]
    result = KeyboardMover(GRID).move(items, "a", Direction.RIGHT)
    assert result.applied
    assert (result.items[0].x, result.items[0].y) == (1, 0)


def test_move_accepts_plain_direction_string():
    items = [make_item("a", 3, 3, 2, 2)]
    result = KeyboardMover(GRID).move(items, "a", "up")
    assert result.applied
    assert result.items[0].y == 2


def test_move_blocked_by_neighbour():
    items = [make_item("a", 0, 0, 2, 2), make_item("b", 2, 0, 2, 2)]
    result = KeyboardMover(GRID).move(items, "a", Direction.RIGHT)
    assert not result.applied
    assert result.reason == RejectionReason.BLOCKED
    assert result.items == items


def test_move_without_selection():
    result = KeyboardMover(GRID).move([], None, Direction.DOWN)
    assert result.reason == RejectionReason.NOT_FOUND


def test_duplicate_near_right_edge_is_rejected():
    items = [make_item("a", 30, 0, 2, 2)]
    result = KeyboardMover(GRID, counter_ids()).duplicate(items, "a")
    assert not result.applied
    assert result.reason == RejectionReason.BLOCKED
    assert all(item.x + item.w <= GRID.cols for item in result.items)
    assert len(result.items) == 1


def test_duplicate_offsets_by_one_cell():
    items = [make_item("a", 0, 0, 1, 1)]
    result = KeyboardMover(GRID, counter_ids()).duplicate(items, "a")
    assert result.applied
    clone = result.items[-1]
    assert (clone.id, clone.x, clone.y) == ("widget-1", 1, 1)
    assert clone.props == items[0].props
    assert clone.props["nested"] is not items[0].props["nested"]


def test_duplicate_overlapping_source_is_rejected():
    items = [make_item("a", 4, 4, 2, 2)]
    result = KeyboardMover(GRID, counter_ids()).duplicate(items, "a")
    assert result.reason == RejectionReason.BLOCKED


def test_delete():
    items = [make_item("a", 0, 0, 2, 2), make_item("b", 4, 0, 2, 2)]
    mover = KeyboardMover(GRID)
    result = mover.delete(items, "a")
    assert result.applied
    assert [item.id for item in result.items] == ["b"]
    assert mover.delete(items, "zzz").reason == RejectionReason.NOT_FOUND


def test_resize_checks_bounds_and_collisions():
    items = [make_item("a", 0, 0, 2, 2), make_item("b", 4, 0, 2, 2)]
    assert resize_item(items, "a", 4, 3, GRID).applied
    assert resize_item(items, "a", 5, 2, GRID).reason == RejectionReason.BLOCKED
    assert resize_item(items, "b", 29, 2, GRID).reason == RejectionReason.OUT_OF_BOUNDS
    assert resize_item(items, "b", 0, 2, GRID).reason == RejectionReason.OUT_OF_BOUNDS


def test_id_factories():
    ids = counter_ids("w")
    assert [ids(), ids()] == ["w-1", "w-2"]
    assert uuid_ids()().startswith("widget-")
    taken = [make_item("widget-1", 0, 0, 1, 1)]
    assert next_free_id(taken, counter_ids()) == "widget-2"
