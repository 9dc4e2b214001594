"""
Best-drop-position search: nearest collision-free, in-bounds placement
around a target cell.
"""

import logging
import math
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel

from signage.collision import collides_with
from signage.editor_state import RejectionReason
from signage.grid import GridModel
from signage.models import LayoutItem, Position

logger = logging.getLogger(__name__)


class DropPosition(BaseModel):
    """
    Result of a drop search. When is_valid is False, (x, y) is only a
    best-effort hint for visual feedback and must never be committed.
    """
    x: int
    y: int
    is_valid: bool
    reason: Optional[RejectionReason] = None

    @property
    def position(self) -> Position:
        return Position(x=self.x, y=self.y)


def ring_offsets(radius: int) -> Iterator[Tuple[int, int]]:
    """Offsets at Chebyshev distance == radius, in row-major order."""
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            if max(abs(dx), abs(dy)) == radius:
                yield dx, dy


def find_best_drop_position(
    items: List[LayoutItem],
    target_x: int,
    target_y: int,
    w: int,
    h: int,
    grid: GridModel,
    exclude_id: Optional[str] = None,
) -> DropPosition:
    """
    Find where a w x h footprint aimed at (target_x, target_y) should land.

    The target is clamped into the grid first; if that rectangle is free it is
    returned as-is. Otherwise rings of growing radius around the clamped cell
    are scanned. Within the first ring that holds any free candidate, the one
    closest (Euclidean) to the unclamped target wins, ties going to row-major
    scan order.
    """
    clamped = grid.clamp(target_x, target_y, w, h)

    if not grid.fits(w, h):
        logger.debug(f"Footprint {w}x{h} cannot fit a {grid.cols}x{grid.rows} grid")
        return DropPosition(x=clamped.x, y=clamped.y, is_valid=False, reason=RejectionReason.OUT_OF_BOUNDS)

    if not collides_with(items, clamped.x, clamped.y, w, h, exclude_id):
        return DropPosition(x=clamped.x, y=clamped.y, is_valid=True)

    max_x = grid.cols - w
    max_y = grid.rows - h
    max_radius = max(grid.cols, grid.rows)

    for radius in range(1, max_radius + 1):
        best = None
        best_dist = math.inf
        for dx, dy in ring_offsets(radius):
            cx = clamped.x + dx
            cy = clamped.y + dy
            if cx < 0 or cy < 0 or cx > max_x or cy > max_y:
                continue
            if collides_with(items, cx, cy, w, h, exclude_id):
                continue
            dist = math.hypot(cx - target_x, cy - target_y)
            if dist < best_dist:
                best = (cx, cy)
                best_dist = dist
        if best is not None:
            return DropPosition(x=best[0], y=best[1], is_valid=True)

    return DropPosition(x=clamped.x, y=clamped.y, is_valid=False, reason=RejectionReason.INVALID_DROP)
