"""
Collision detection against a layout, plus whole-layout validation.
"""

from typing import Iterable, List, Optional

from signage.grid import GridModel, rects_overlap
from signage.models import LayoutItem


def _overlaps(item: LayoutItem, x: int, y: int, w: int, h: int) -> bool:
    return rects_overlap(item.x, item.y, item.w, item.h, x, y, w, h)


def collides_with(
    items: Iterable[LayoutItem],
    x: int,
    y: int,
    w: int,
    h: int,
    exclude_id: Optional[str] = None,
) -> bool:
    """True if any item other than exclude_id overlaps the candidate rectangle."""
    for item in items:
        if item.id == exclude_id:
            continue
        if _overlaps(item, x, y, w, h):
            return True
    return False


def find_collisions(
    items: Iterable[LayoutItem],
    x: int,
    y: int,
    w: int,
    h: int,
    exclude_id: Optional[str] = None,
) -> List[str]:
    """Ids of all items overlapping the candidate (for highlighting)."""
    return [
        item.id
        for item in items
        if item.id != exclude_id and _overlaps(item, x, y, w, h)
    ]


def validate_layout(items: List[LayoutItem], grid: GridModel) -> List[str]:
    """
    Check every layout invariant and describe each violation.
    An empty list means the layout is valid.
    """
    errors = []
    seen = set()
    for item in items:
        if item.id in seen:
            errors.append(f"Duplicate item id: {item.id}")
        seen.add(item.id)

        if not grid.is_in_bounds(item.x, item.y, item.w, item.h):
            errors.append(
                f"Item {item.id} at ({item.x},{item.y}) size {item.w}x{item.h} "
                f"extends beyond the {grid.cols}x{grid.rows} grid"
            )

    for i, a in enumerate(items):
        for b in items[i + 1:]:
            if _overlaps(a, b.x, b.y, b.w, b.h):
                errors.append(f"Items {a.id} and {b.id} overlap")
    return errors
