"""
Layout mutations. Every operation builds a new item list, validates it and
either commits it or hands back the original list untouched.
"""

import itertools
import logging
import uuid
from typing import Callable, List, Optional

from signage.collision import collides_with, validate_layout
from signage.editor_state import OperationResult, RejectionReason
from signage.grid import GridModel
from signage.models import LayoutItem

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]

DUPLICATE_OFFSET = 1


# ── Id factories ────────────────────────────────────

def counter_ids(prefix: str = "widget", start: int = 1) -> IdFactory:
    """Deterministic ids: widget-1, widget-2, ..."""
    counter = itertools.count(start)
    return lambda: f"{prefix}-{next(counter)}"


def uuid_ids(prefix: str = "widget") -> IdFactory:
    return lambda: f"{prefix}-{uuid.uuid4().hex[:12]}"


def next_free_id(items: List[LayoutItem], id_factory: IdFactory) -> str:
    """Draw ids until one is not already taken in the layout."""
    taken = {item.id for item in items}
    new_id = id_factory()
    while new_id in taken:
        new_id = id_factory()
    return new_id


# ── Helpers ─────────────────────────────────────────

def find_item(items: List[LayoutItem], item_id: Optional[str]) -> Optional[LayoutItem]:
    for item in items:
        if item.id == item_id:
            return item
    return None


def reject(
    items: List[LayoutItem],
    reason: RejectionReason,
    item_id: Optional[str] = None,
    message: Optional[str] = None,
) -> OperationResult:
    logger.info(f"[{item_id}] 操作被拒绝: {reason.value}" + (f" ({message})" if message else ""))
    return OperationResult(applied=False, items=list(items), item_id=item_id, reason=reason, message=message)


def commit(
    before: List[LayoutItem],
    after: List[LayoutItem],
    grid: GridModel,
    item_id: Optional[str] = None,
) -> OperationResult:
    """
    Apply `after` only if it satisfies every layout invariant; otherwise
    roll back to `before`.
    """
    errors = validate_layout(after, grid)
    if errors:
        logger.warning(f"[{item_id}] 提交校验失败，已回滚: {errors}")
        return OperationResult(
            applied=False,
            items=list(before),
            item_id=item_id,
            reason=RejectionReason.INVARIANT_VIOLATION,
            message="; ".join(errors),
        )
    return OperationResult(applied=True, items=after, item_id=item_id)


def _replace(items: List[LayoutItem], updated: LayoutItem) -> List[LayoutItem]:
    return [updated if item.id == updated.id else item for item in items]


# ── Operations ──────────────────────────────────────

def move_item(items: List[LayoutItem], item_id: str, x: int, y: int, grid: GridModel) -> OperationResult:
    """Move an item's top-left cell; its footprint is unchanged."""
    item = find_item(items, item_id)
    if item is None:
        return reject(items, RejectionReason.NOT_FOUND, item_id)
    if not grid.is_in_bounds(x, y, item.w, item.h):
        return reject(items, RejectionReason.OUT_OF_BOUNDS, item_id, f"({x},{y})")
    if collides_with(items, x, y, item.w, item.h, exclude_id=item_id):
        return reject(items, RejectionReason.BLOCKED, item_id, f"({x},{y})")

    return commit(items, _replace(items, item.model_copy(update={"x": x, "y": y})), grid, item_id)


def insert_item(items: List[LayoutItem], new_item: LayoutItem, grid: GridModel) -> OperationResult:
    """Append an item (end of z-order)."""
    return commit(items, list(items) + [new_item], grid, new_item.id)


def delete_item(items: List[LayoutItem], item_id: str, grid: GridModel) -> OperationResult:
    if find_item(items, item_id) is None:
        return reject(items, RejectionReason.NOT_FOUND, item_id)
    return commit(items, [item for item in items if item.id != item_id], grid, item_id)


def duplicate_item(
    items: List[LayoutItem],
    item_id: str,
    grid: GridModel,
    id_factory: IdFactory,
) -> OperationResult:
    """
    Clone an item one cell down and right, clamped into the grid. If the
    clamped spot is occupied (the original included) the duplicate is
    rejected rather than placed elsewhere.
    """
    item = find_item(items, item_id)
    if item is None:
        return reject(items, RejectionReason.NOT_FOUND, item_id)

    target = grid.clamp(item.x + DUPLICATE_OFFSET, item.y + DUPLICATE_OFFSET, item.w, item.h)
    if not grid.is_in_bounds(target.x, target.y, item.w, item.h):
        return reject(items, RejectionReason.OUT_OF_BOUNDS, item_id)
    if collides_with(items, target.x, target.y, item.w, item.h):
        return reject(items, RejectionReason.BLOCKED, item_id, f"duplicate target ({target.x},{target.y}) is occupied")

    clone = item.model_copy(
        update={"id": next_free_id(items, id_factory), "x": target.x, "y": target.y},
        deep=True,
    )
    result = insert_item(items, clone, grid)
    if result.applied:
        logger.info(f"[{item_id}] 已复制为 {clone.id} @ ({clone.x},{clone.y})")
    return result


def resize_item(items: List[LayoutItem], item_id: str, w: int, h: int, grid: GridModel) -> OperationResult:
    """Change an item's footprint, keeping its top-left cell."""
    item = find_item(items, item_id)
    if item is None:
        return reject(items, RejectionReason.NOT_FOUND, item_id)
    if w < 1 or h < 1 or not grid.is_in_bounds(item.x, item.y, w, h):
        return reject(items, RejectionReason.OUT_OF_BOUNDS, item_id, f"{w}x{h}")
    if collides_with(items, item.x, item.y, w, h, exclude_id=item_id):
        return reject(items, RejectionReason.BLOCKED, item_id, f"{w}x{h}")

    return commit(items, _replace(items, item.model_copy(update={"w": w, "h": h})), grid, item_id)
