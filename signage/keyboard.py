"""
Keyboard repositioning: one cell per key press, blocked by other items.
"""

import logging
from typing import Dict, List, Optional, Tuple

from signage.collision import collides_with
from signage.editor_state import Direction, OperationResult, RejectionReason
from signage.grid import GridModel
from signage.models import LayoutItem
from signage.mutations import IdFactory, counter_ids, delete_item, duplicate_item, find_item, move_item, reject

logger = logging.getLogger(__name__)

STEPS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class KeyboardMover:
    def __init__(self, grid: GridModel, id_factory: Optional[IdFactory] = None):
        self.grid = grid
        self.id_factory = id_factory or counter_ids()

    def move(self, items: List[LayoutItem], item_id: Optional[str], direction: Direction) -> OperationResult:
        """
        Step the selected item one cell. At the grid edge the step clamps to
        a no-op; a collision rejects it as BLOCKED.
        """
        item = find_item(items, item_id)
        if item is None:
            return reject(items, RejectionReason.NOT_FOUND, item_id)

        direction = Direction(direction)
        dx, dy = STEPS[direction]
        target = self.grid.clamp(item.x + dx, item.y + dy, item.w, item.h)
        if (target.x, target.y) == (item.x, item.y):
            return OperationResult(applied=False, items=list(items), item_id=item.id)

        if collides_with(items, target.x, target.y, item.w, item.h, exclude_id=item.id):
            return reject(items, RejectionReason.BLOCKED, item.id, f"{direction.value} to ({target.x},{target.y})")

        return move_item(items, item.id, target.x, target.y, self.grid)

    def delete(self, items: List[LayoutItem], item_id: Optional[str]) -> OperationResult:
        return delete_item(items, item_id, self.grid)

    def duplicate(self, items: List[LayoutItem], item_id: Optional[str]) -> OperationResult:
        """
        Clone the item one cell down and right. The clone is checked against
        every item including its source, so an item wider and taller than one
        cell always overlaps its own copy and is rejected as BLOCKED. Hosts
        copy such items from the palette (drag_start with their
        component_type) instead.
        """
        return duplicate_item(items, item_id, self.grid, self.id_factory)
