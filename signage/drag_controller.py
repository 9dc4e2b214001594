"""
Drag lifecycle state machine: idle -> dragging -> idle (commit or cancel).
"""

import logging
from typing import List, Optional

from signage.collision import find_collisions
from signage.editor_state import PENDING_INSERT, DragPhase, DragState, OperationResult, RejectionReason
from signage.grid import GridModel
from signage.models import LayoutItem
from signage.mutations import IdFactory, counter_ids, find_item, insert_item, move_item, next_free_id, reject
from signage.position_finder import find_best_drop_position
from signage.registry import ComponentRegistry
from signage.snap import SnapEngine

logger = logging.getLogger(__name__)


class DragController:
    """
    Owns the single in-progress drag. Layouts are passed in on every call and
    are never modified in place; a committed drop returns a new item list.
    """

    def __init__(
        self,
        grid: GridModel,
        registry: ComponentRegistry,
        snap_engine: SnapEngine,
        id_factory: Optional[IdFactory] = None,
    ):
        self.grid = grid
        self.registry = registry
        self.snap_engine = snap_engine
        self.id_factory = id_factory or counter_ids()
        self.state = DragState()

    @property
    def is_dragging(self) -> bool:
        return self.state.phase == DragPhase.DRAGGING

    # ── idle -> dragging ────────────────────────────

    def start(
        self,
        items: List[LayoutItem],
        item_id: Optional[str] = None,
        component_type: Optional[str] = None,
    ) -> DragState:
        """
        Begin dragging an existing item (item_id) or a new palette entry
        (component_type). Ignored while another drag is active.
        """
        if self.is_dragging:
            logger.warning(f"[{self.state.dragged_item_id}] 已有拖拽进行中，忽略新的拖拽")
            return self.state

        if item_id is not None:
            item = find_item(items, item_id)
            if item is None:
                logger.warning(f"[{item_id}] 拖拽的组件不存在")
                return self.state
            self.state = DragState(
                phase=DragPhase.DRAGGING,
                dragged_item_id=item.id,
                component_type=item.component_type,
                footprint=item.footprint,
            )
        elif component_type is not None:
            self.state = DragState(
                phase=DragPhase.DRAGGING,
                dragged_item_id=PENDING_INSERT,
                component_type=component_type,
                footprint=self.registry.footprint_for(component_type),
            )
        else:
            raise ValueError("drag start needs an item_id or a component_type")

        logger.debug(f"[{self.state.dragged_item_id}] 开始拖拽 {self.state.footprint.w}x{self.state.footprint.h}")
        return self.state

    # ── dragging ────────────────────────────────────

    def update(self, items: List[LayoutItem], cell_x: float, cell_y: float) -> DragState:
        """Recompute the drop candidate for a pointer position. Idempotent."""
        if not self.is_dragging:
            return self.state

        current = self.state
        cursor = self.grid.cell_at(cell_x, cell_y)
        exclude_id = None if current.is_new_item else current.dragged_item_id
        drop = find_best_drop_position(
            items, cursor.x, cursor.y, current.footprint.w, current.footprint.h, self.grid, exclude_id
        )
        target = self.grid.clamp(cursor.x, cursor.y, current.footprint.w, current.footprint.h)
        colliding = find_collisions(
            items, target.x, target.y, current.footprint.w, current.footprint.h, exclude_id
        )

        state = DragState(
            phase=DragPhase.DRAGGING,
            dragged_item_id=current.dragged_item_id,
            component_type=current.component_type,
            footprint=current.footprint,
            cursor_cell=cursor,
            snap_position=drop.position if drop.is_valid else None,
            is_valid_drop=drop.is_valid,
            hint_position=None if drop.is_valid else drop.position,
            reason=drop.reason,
            colliding_ids=colliding,
        )
        state.snap_lines = self.snap_engine.compute_snap_lines(items, state)
        self.state = state
        return state

    # ── dragging -> idle ────────────────────────────

    def drop(
        self,
        items: List[LayoutItem],
        cell_x: Optional[float] = None,
        cell_y: Optional[float] = None,
    ) -> OperationResult:
        """
        Commit the drag at its snap position. An invalid drop, or a commit
        that would break the layout, ends the drag as a cancel.
        """
        if not self.is_dragging:
            return reject(items, RejectionReason.NOT_DRAGGING)

        if cell_x is not None and cell_y is not None:
            self.update(items, cell_x, cell_y)

        state = self.state
        self.state = DragState()

        if not state.is_valid_drop or state.snap_position is None:
            return reject(items, state.reason or RejectionReason.INVALID_DROP, state.dragged_item_id)

        target = state.snap_position
        if state.is_new_item:
            new_item = LayoutItem(
                id=next_free_id(items, self.id_factory),
                x=target.x,
                y=target.y,
                w=state.footprint.w,
                h=state.footprint.h,
                component_type=state.component_type,
                props=self.registry.default_props(state.component_type),
            )
            result = insert_item(items, new_item, self.grid)
        else:
            result = move_item(items, state.dragged_item_id, target.x, target.y, self.grid)

        if result.applied:
            logger.info(f"[{result.item_id}] 放置于 ({target.x},{target.y})")
        return result

    def cancel(self) -> DragState:
        if self.is_dragging:
            logger.debug(f"[{self.state.dragged_item_id}] 拖拽已取消")
        self.state = DragState()
        return self.state
