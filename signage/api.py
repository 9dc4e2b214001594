"""
FastAPI 路由：暴露布局编辑引擎的 REST API。
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from signage.collision import validate_layout
from signage.editor import LayoutEditor
from signage.editor_state import CanvasEvent
from signage.grid import GridModel
from signage.models import LayoutItem, StoredLayout
from signage.registry import ComponentSpec
from signage.snap import SnapEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# 这些全局引用会在 main.py 中注入
_config = None
_registry = None
_layout_store = None
_revision_store = None
_id_factory = None

# layout_id -> LayoutEditor
_editors: Dict[str, LayoutEditor] = {}


def init_api(config, registry, layout_store, revision_store, id_factory=None):
    """注入全局依赖（由 main.py 调用）。"""
    global _config, _registry, _layout_store, _revision_store, _id_factory
    _config = config
    _registry = registry
    _layout_store = layout_store
    _revision_store = revision_store
    _id_factory = id_factory
    _editors.clear()


class ResizeRequest(BaseModel):
    item_id: str
    w: Optional[int] = None
    h: Optional[int] = None
    size: Optional[str] = None  # 尺寸预设，优先于 w/h


# ── 组件注册表 ────────────────────────────────────────

@router.get("/components")
async def list_components() -> list[ComponentSpec]:
    """获取所有可用组件类型及其默认尺寸。"""
    return _registry.list()


# ── 布局 ──────────────────────────────────────────────

def _require_layout(layout_id: str) -> StoredLayout:
    layout = _layout_store.get_layout(layout_id)
    if layout is None:
        raise HTTPException(404, f"布局 '{layout_id}' 不存在")
    return layout


@router.get("/layouts")
async def list_layouts() -> list[dict]:
    return [layout.model_dump(by_alias=True) for layout in _layout_store.load_layouts()]


@router.post("/layouts")
async def create_layout(layout: StoredLayout) -> dict:
    """创建新的布局。"""
    return _layout_store.save_layout(layout).model_dump(by_alias=True)


@router.get("/layouts/{layout_id}")
async def get_layout(layout_id: str) -> dict:
    return _require_layout(layout_id).model_dump(by_alias=True)


@router.put("/layouts/{layout_id}")
async def update_layout(layout_id: str, layout: StoredLayout) -> dict:
    """更新布局，同时刷新已打开的编辑会话。"""
    if layout.id != layout_id:
        raise HTTPException(400, "ID mismatch")
    saved = _layout_store.save_layout(layout)
    editor = _editors.get(layout_id)
    if editor is not None:
        if (editor.grid.cols, editor.grid.rows) != (saved.cols, saved.rows):
            _editors.pop(layout_id)
        else:
            editor.replace_items(saved.items)
    return saved.model_dump(by_alias=True)


@router.delete("/layouts/{layout_id}")
async def delete_layout(layout_id: str) -> dict:
    if _layout_store.delete_layout(layout_id):
        _editors.pop(layout_id, None)
        _revision_store.clear_layout(layout_id)
        return {"message": f"Layout {layout_id} deleted"}
    raise HTTPException(404, f"Layout {layout_id} not found")


@router.get("/layouts/{layout_id}/validate")
async def validate_stored_layout(layout_id: str) -> dict:
    """检查布局是否满足边界与不重叠约束。"""
    layout = _require_layout(layout_id)
    errors = validate_layout(layout.items, GridModel(cols=layout.cols, rows=layout.rows))
    return {"layout_id": layout_id, "valid": not errors, "errors": errors}


# ── 模板 ──────────────────────────────────────────────

@router.get("/templates")
async def list_templates() -> list[dict]:
    return [t.model_dump(by_alias=True) for t in _layout_store.load_templates()]


@router.post("/templates")
async def create_template(template: StoredLayout) -> dict:
    return _layout_store.save_template(template).model_dump(by_alias=True)


@router.delete("/templates/{template_id}")
async def delete_template(template_id: str) -> dict:
    if _layout_store.delete_template(template_id):
        return {"message": f"Template {template_id} deleted"}
    raise HTTPException(404, f"Template {template_id} not found")


@router.post("/templates/{template_id}/instantiate")
async def instantiate_template(template_id: str, layout_id: str, name: Optional[str] = None) -> dict:
    """基于模板创建新布局。"""
    if _layout_store.get_layout(layout_id) is not None:
        raise HTTPException(400, f"布局 '{layout_id}' 已存在")
    layout = _layout_store.create_from_template(template_id, layout_id, name)
    if layout is None:
        raise HTTPException(404, f"Template {template_id} not found")
    return layout.model_dump(by_alias=True)


# ── 编辑会话 ──────────────────────────────────────────

def _get_editor(layout_id: str) -> LayoutEditor:
    """按需创建编辑会话，提交后的布局会自动保存并记录修订。"""
    editor = _editors.get(layout_id)
    if editor is not None:
        return editor

    layout = _require_layout(layout_id)
    grid = GridModel(cols=layout.cols, rows=layout.rows)

    def on_layout_change(items: List[LayoutItem]):
        stored = _layout_store.get_layout(layout_id) or layout
        _layout_store.save_layout(stored.model_copy(update={"items": items}))
        _revision_store.record(layout_id, items)

    editor = LayoutEditor(
        items=layout.items,
        grid=grid,
        registry=_registry,
        snap_engine=SnapEngine(
            _config.canvas.width_px / grid.cols,
            _config.canvas.height_px / grid.rows,
            _config.snap.threshold_px,
        ),
        id_factory=_id_factory,
        on_layout_change=on_layout_change,
    )
    _editors[layout_id] = editor
    logger.info(f"[{layout_id}] 编辑会话已创建 ({len(layout.items)} 个组件)")
    return editor


def _response(editor: LayoutEditor, result=None) -> dict[str, Any]:
    body = editor.snapshot()
    body["result"] = result.model_dump(mode="json", by_alias=True) if result is not None else None
    return body


@router.get("/editor/{layout_id}")
async def get_editor(layout_id: str) -> dict[str, Any]:
    return _response(_get_editor(layout_id))


@router.post("/editor/{layout_id}/events")
async def dispatch_event(layout_id: str, event: CanvasEvent) -> dict[str, Any]:
    """分发一个画布事件（拖拽 / 放下 / 键盘移动 / 删除 / 复制 / 选中）。"""
    editor = _get_editor(layout_id)
    try:
        result = editor.dispatch(event)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _response(editor, result)


@router.post("/editor/{layout_id}/resize")
async def resize_item(layout_id: str, request: ResizeRequest) -> dict[str, Any]:
    editor = _get_editor(layout_id)
    if request.size:
        result = editor.resize_to_preset(request.item_id, request.size)
    elif request.w is not None and request.h is not None:
        result = editor.resize(request.item_id, request.w, request.h)
    else:
        raise HTTPException(400, "Provide either 'size' or both 'w' and 'h'")
    return _response(editor, result)


@router.get("/editor/{layout_id}/history")
async def get_history(layout_id: str, limit: int = 100) -> list[dict]:
    """获取指定布局的修订历史。"""
    _require_layout(layout_id)
    return _revision_store.get_history(layout_id, limit=limit)
