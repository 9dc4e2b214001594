"""
编辑器运行时状态定义。
包含拖拽状态机、选中状态、中立输入事件与操作结果模型。
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from signage.models import Footprint, LayoutItem, Position

# 从组件面板拖入的新组件尚无 id
PENDING_INSERT = "__pending__"


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class RejectionReason(str, Enum):
    INVALID_DROP = "invalid_drop"  # 找不到无碰撞的位置
    OUT_OF_BOUNDS = "out_of_bounds"  # 尺寸超出整个网格
    BLOCKED = "blocked"  # 键盘移动 / 复制 / 缩放被其他组件阻挡
    INVARIANT_VIOLATION = "invariant_violation"  # 提交后校验失败，已回滚
    NOT_FOUND = "not_found"
    NOT_DRAGGING = "not_dragging"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class EventKind(str, Enum):
    DRAG_START = "drag_start"
    DRAG_MOVE = "drag_move"
    DROP = "drop"
    DRAG_LEAVE = "drag_leave"  # 拖出画布
    CANCEL = "cancel"
    SELECT = "select"
    DESELECT = "deselect"
    KEY_MOVE = "key_move"
    DELETE = "delete"
    DUPLICATE = "duplicate"


class SnapLines(BaseModel):
    """对齐辅助线（网格单位）。"""
    vertical: List[float] = Field(default_factory=list)
    horizontal: List[float] = Field(default_factory=list)


class DragState(BaseModel):
    """
    一次拖拽操作的瞬时状态。
    拖拽开始时创建，每次指针移动整体替换，放下或取消后丢弃。
    """
    phase: DragPhase = DragPhase.IDLE
    dragged_item_id: Optional[str] = None  # 已有组件 id，或 PENDING_INSERT
    component_type: Optional[str] = None  # 新组件的类型
    footprint: Optional[Footprint] = None
    cursor_cell: Optional[Position] = None
    snap_position: Optional[Position] = None
    is_valid_drop: bool = False
    hint_position: Optional[Position] = None  # 无效时的参考位置，仅用于显示
    reason: Optional[RejectionReason] = None
    colliding_ids: List[str] = Field(default_factory=list)  # 光标处与拖拽组件重叠的组件，用于高亮
    snap_lines: SnapLines = Field(default_factory=SnapLines)

    @property
    def is_new_item(self) -> bool:
        return self.dragged_item_id == PENDING_INSERT


class SelectionState(BaseModel):
    selected_id: Optional[str] = None


class CanvasEvent(BaseModel):
    """
    与 UI 框架无关的输入事件。
    坐标已由宿主从像素换算到网格单位，可以是小数。
    """
    kind: EventKind
    cell_x: Optional[float] = None
    cell_y: Optional[float] = None
    item_id: Optional[str] = None
    component_type: Optional[str] = None
    direction: Optional[Direction] = None


class OperationResult(BaseModel):
    """一次布局操作的结果。被拒绝时 items 与操作前相同。"""
    applied: bool
    items: List[LayoutItem] = Field(default_factory=list)
    item_id: Optional[str] = None
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None
