"""
Host-facing layout editor: owns the layout, the drag state machine and the
selection, and turns neutral CanvasEvents into engine calls.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Optional

from signage.collision import validate_layout
from signage.config_loader import CanvasConfig
from signage.drag_controller import DragController
from signage.editor_state import (
    CanvasEvent,
    DragState,
    EventKind,
    OperationResult,
    RejectionReason,
    SelectionState,
)
from signage.grid import GridModel
from signage.keyboard import KeyboardMover
from signage.models import LayoutItem, dump_items
from signage.mutations import IdFactory, counter_ids, find_item, reject, resize_item
from signage.registry import ComponentRegistry
from signage.snap import SnapEngine

logger = logging.getLogger(__name__)

LayoutCallback = Callable[[List[LayoutItem]], None]
SelectionCallback = Callable[[Optional[str]], None]
FeedbackCallback = Callable[[OperationResult], None]


class LayoutEditor:
    """
    Single-threaded editor session. Every dispatch runs to completion before
    the next event; committed mutations are announced through on_layout_change.
    """

    def __init__(
        self,
        items: Optional[List[LayoutItem]] = None,
        grid: Optional[GridModel] = None,
        registry: Optional[ComponentRegistry] = None,
        snap_engine: Optional[SnapEngine] = None,
        id_factory: Optional[IdFactory] = None,
        on_layout_change: Optional[LayoutCallback] = None,
        on_selection_change: Optional[SelectionCallback] = None,
        on_feedback: Optional[FeedbackCallback] = None,
    ):
        self.grid = grid or GridModel()
        self.registry = registry or ComponentRegistry()
        if snap_engine is None:
            canvas = CanvasConfig()
            snap_engine = SnapEngine(canvas.width_px / self.grid.cols, canvas.height_px / self.grid.rows)
        self.snap_engine = snap_engine
        id_factory = id_factory or counter_ids()

        self.drag = DragController(self.grid, self.registry, self.snap_engine, id_factory)
        self.keyboard = KeyboardMover(self.grid, id_factory)
        self.selection = SelectionState()
        self.items: List[LayoutItem] = list(items or [])

        self._on_layout_change = on_layout_change
        self._on_selection_change = on_selection_change
        self._on_feedback = on_feedback

        errors = validate_layout(self.items, self.grid)
        if errors:
            logger.warning(f"载入的布局不满足约束: {errors}")

    # ── 状态 ──────────────────────────────────────────

    @property
    def drag_state(self) -> DragState:
        return self.drag.state

    def snapshot(self) -> Dict[str, Any]:
        return {
            "items": dump_items(self.items),
            "drag": self.drag.state.model_dump(mode="json"),
            "selection": self.selection.model_dump(),
            "grid": {"cols": self.grid.cols, "rows": self.grid.rows},
        }

    # ── 事件分发 ──────────────────────────────────────

    def dispatch(self, event: CanvasEvent) -> Optional[OperationResult]:
        """
        Apply one input event. Returns the operation result for drops and
        keyboard/edit commands, None for pure state transitions.
        """
        kind = event.kind

        if kind == EventKind.DRAG_START:
            has_cell = self._has_cell(event)
            self.drag.start(self.items, item_id=event.item_id, component_type=event.component_type)
            if has_cell:
                self.drag.update(self.items, event.cell_x, event.cell_y)
            return None

        if kind == EventKind.DRAG_MOVE:
            if not self._has_cell(event):
                raise ValueError("drag_move needs cell_x and cell_y")
            self.drag.update(self.items, event.cell_x, event.cell_y)
            return None

        if kind == EventKind.DROP:
            if self._has_cell(event):
                return self._apply(self.drag.drop(self.items, event.cell_x, event.cell_y))
            return self._apply(self.drag.drop(self.items))

        if kind in (EventKind.DRAG_LEAVE, EventKind.CANCEL):
            self.drag.cancel()
            return None

        if kind == EventKind.SELECT:
            self.select(event.item_id)
            return None

        if kind == EventKind.DESELECT:
            self.select(None)
            return None

        if kind == EventKind.KEY_MOVE:
            if event.direction is None:
                raise ValueError("key_move needs a direction")
            return self._apply(self.keyboard.move(self.items, self.selection.selected_id, event.direction))

        if kind == EventKind.DELETE:
            target = event.item_id or self.selection.selected_id
            result = self._apply(self.keyboard.delete(self.items, target))
            if result.applied and self.selection.selected_id == target:
                self.select(None)
            return result

        if kind == EventKind.DUPLICATE:
            target = event.item_id or self.selection.selected_id
            return self._apply(self.keyboard.duplicate(self.items, target))

        raise ValueError(f"unsupported event kind: {kind}")

    # ── 直接操作 ──────────────────────────────────────

    def select(self, item_id: Optional[str]):
        if item_id is not None and find_item(self.items, item_id) is None:
            logger.warning(f"[{item_id}] 选中的组件不存在")
            return
        if self.selection.selected_id == item_id:
            return
        self.selection = SelectionState(selected_id=item_id)
        if self._on_selection_change:
            self._on_selection_change(item_id)

    def resize(self, item_id: str, w: int, h: int) -> OperationResult:
        return self._apply(resize_item(self.items, item_id, w, h, self.grid))

    def resize_to_preset(self, item_id: str, size: str) -> OperationResult:
        item = find_item(self.items, item_id)
        if item is None:
            return self._apply(reject(self.items, RejectionReason.NOT_FOUND, item_id))
        footprint = self.registry.size_footprint(item.component_type, size)
        if footprint is None:
            return self._apply(
                reject(self.items, RejectionReason.OUT_OF_BOUNDS, item_id, f"'{size}' is not a size of {item.component_type}")
            )
        return self.resize(item_id, footprint.w, footprint.h)

    def replace_items(self, items: List[LayoutItem]):
        """Host-side reload (e.g. after saving elsewhere). Cancels any drag."""
        self.drag.cancel()
        self.items = list(items)
        if self.selection.selected_id and find_item(self.items, self.selection.selected_id) is None:
            self.select(None)

    # ── 内部 ──────────────────────────────────────────

    @staticmethod
    def _has_cell(event: CanvasEvent) -> bool:
        if event.cell_x is None or event.cell_y is None:
            return False
        if not (math.isfinite(event.cell_x) and math.isfinite(event.cell_y)):
            raise ValueError(f"{event.kind.value} needs finite cell_x and cell_y")
        return True

    def _apply(self, result: OperationResult) -> OperationResult:
        if result.applied:
            self.items = list(result.items)
            if self._on_layout_change:
                self._on_layout_change(list(self.items))
        elif result.reason is not None and self._on_feedback:
            self._on_feedback(result)
        return result
