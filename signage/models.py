"""
Data models for layout items and stored screen layouts (JSON-based management).
"""

import json
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    """Top-left grid cell of a placement."""
    x: int
    y: int


class Footprint(BaseModel):
    """A widget's size in grid cells."""
    w: int = Field(ge=1)
    h: int = Field(ge=1)


class LayoutItem(BaseModel):
    """A single widget placed on the canvas."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="i", description="Stable unique identifier")
    x: int = Field(default=0, ge=0, description="X position in grid columns")
    y: int = Field(default=0, ge=0, description="Y position in grid rows")
    w: int = Field(default=2, ge=1, description="Width in grid columns")
    h: int = Field(default=2, ge=1, description="Height in grid rows")
    component_type: str = Field(default="custom", alias="component", description="Renderer tag from the registry")
    props: Dict[str, Any] = Field(default_factory=dict, description="Opaque renderer configuration")

    @property
    def position(self) -> Position:
        return Position(x=self.x, y=self.y)

    @property
    def footprint(self) -> Footprint:
        return Footprint(w=self.w, h=self.h)


class StoredLayout(BaseModel):
    """A stored screen layout (or template)."""
    id: str
    name: str
    cols: int = Field(default=32, ge=1, description="Grid columns")
    rows: int = Field(default=18, ge=1, description="Grid rows")
    items: List[LayoutItem] = Field(default_factory=list, description="Widgets in z-order")
    is_template: bool = False


# ── Persisted format ────────────────────────────────

def dump_items(items: Iterable[LayoutItem]) -> List[Dict[str, Any]]:
    """Dump items using the persisted field names (i, component)."""
    return [item.model_dump(by_alias=True) for item in items]


def load_items(data: Iterable[Dict[str, Any]]) -> List[LayoutItem]:
    return [LayoutItem.model_validate(entry) for entry in data]


def serialize_layout(items: Iterable[LayoutItem]) -> str:
    """Serialize a layout to a JSON array of {i, x, y, w, h, component, props}."""
    return json.dumps(dump_items(items), ensure_ascii=False)


def deserialize_layout(raw: str | bytes) -> List[LayoutItem]:
    return load_items(json.loads(raw))
