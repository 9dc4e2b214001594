from signage.editor_state import PENDING_INSERT, DragPhase, DragState
from signage.models import Footprint, LayoutItem, Position
from signage.snap import SnapEngine


def make_item(item_id, x, y, w, h):
    return LayoutItem(id=item_id, x=x, y=y, w=w, h=h, component_type="custom")


def dragging(x, y, w, h, item_id=PENDING_INSERT, valid=True):
    position = Position(x=x, y=y)
    return DragState(
        phase=DragPhase.DRAGGING,
        dragged_item_id=item_id,
        footprint=Footprint(w=w, h=h),
        snap_position=position if valid else None,
        hint_position=None if valid else position,
        is_valid_drop=valid,
    )


def test_shared_edge_produces_vertical_guide():
    items = [make_item("a", 0, 0, 2, 2), make_item("b", 2, 0, 2, 2)]
    engine = SnapEngine(60, 60)
    lines = engine.compute_snap_lines(items, dragging(2, 2, 2, 2))
    assert 2.0 in lines.vertical
    assert lines.vertical == [2.0, 4.0]
    assert lines.horizontal == [2.0]


def test_no_guides_when_idle():
    items = [make_item("a", 0, 0, 2, 2)]
    assert SnapEngine(60, 60).compute_snap_lines(items, DragState()).vertical == []


def test_dragged_item_is_ignored():
    items = [make_item("a", 0, 0, 2, 2)]
    lines = SnapEngine(60, 60).compute_snap_lines(items, dragging(0, 0, 2, 2, item_id="a"))
    assert lines.vertical == []
    assert lines.horizontal == []


def test_threshold_is_in_pixels():
    items = [make_item("a", 0, 0, 2, 2)]
    state = dragging(4, 10, 2, 2)
    # 60px cells: a 2-cell gap is 120px, far outside 5px
    assert SnapEngine(60, 60, threshold_px=5).compute_snap_lines(items, state).vertical == []
    # 2px cells: the same gap is 4px
    assert SnapEngine(2, 2, threshold_px=5).compute_snap_lines(items, state).vertical == [2.0]


def test_guides_shown_for_rejected_drop():
    items = [make_item("a", 0, 0, 2, 2)]
    lines = SnapEngine(60, 60).compute_snap_lines(items, dragging(0, 5, 2, 2, valid=False))
    assert lines.vertical == [0.0, 2.0]
