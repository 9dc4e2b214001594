"""
Magnetic alignment guides. Advisory only: never changes the drop position.
"""

from typing import List, Optional

from signage.editor_state import DragPhase, DragState, SnapLines
from signage.models import LayoutItem, Position

DEFAULT_THRESHOLD_PX = 5.0


class SnapEngine:
    """Compares the dragged rectangle's edges with every other item's edges."""

    def __init__(self, cell_width_px: float, cell_height_px: float, threshold_px: float = DEFAULT_THRESHOLD_PX):
        self.cell_width_px = cell_width_px
        self.cell_height_px = cell_height_px
        self.threshold_px = threshold_px

    def _candidate(self, drag_state: DragState) -> Optional[Position]:
        # Fall back to the hint so guides still show for a rejected drop
        return drag_state.snap_position or drag_state.hint_position

    def compute_snap_lines(self, items: List[LayoutItem], drag_state: DragState) -> SnapLines:
        """
        Returns guide coordinates in grid units: vertical lines are x values,
        horizontal lines are y values. Sorted, without duplicates.
        """
        position = self._candidate(drag_state)
        if drag_state.phase != DragPhase.DRAGGING or position is None or drag_state.footprint is None:
            return SnapLines()

        w = drag_state.footprint.w
        h = drag_state.footprint.h
        drag_v = (position.x, position.x + w)
        drag_h = (position.y, position.y + h)

        vertical = set()
        horizontal = set()
        for item in items:
            if item.id == drag_state.dragged_item_id:
                continue
            for edge in (item.x, item.x + item.w):
                if any(abs(edge - d) * self.cell_width_px < self.threshold_px for d in drag_v):
                    vertical.add(float(edge))
            for edge in (item.y, item.y + item.h):
                if any(abs(edge - d) * self.cell_height_px < self.threshold_px for d in drag_h):
                    horizontal.add(float(edge))

        return SnapLines(vertical=sorted(vertical), horizontal=sorted(horizontal))
