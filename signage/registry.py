"""
组件注册表：组件类型 -> 默认尺寸 / 默认属性 / 可选尺寸预设。
引擎只在插入新组件时读取，不解析 props 内容。
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from signage.models import Footprint

logger = logging.getLogger(__name__)

FALLBACK_FOOTPRINT = Footprint(w=2, h=2)

SIZE_PRESETS: Dict[str, Footprint] = {
    "compact": Footprint(w=4, h=4),
    "medium": Footprint(w=6, h=4),
    "large": Footprint(w=8, h=7),
    "xlarge": Footprint(w=9, h=7),
}


class ComponentSpec(BaseModel):
    type: str
    name: str = ""
    default_footprint: Footprint = Field(default_factory=lambda: FALLBACK_FOOTPRINT.model_copy())
    default_props: Dict[str, Any] = Field(default_factory=dict)
    sizes: List[str] = Field(default_factory=list, description="Allowed size presets")


BUILTIN_COMPONENTS: List[ComponentSpec] = [
    ComponentSpec(
        type="weather",
        name="Weather",
        default_footprint=Footprint(w=4, h=4),
        default_props={"location": "New York", "showClock": True, "showAnimatedBg": False, "theme": "dark"},
        sizes=["compact", "medium", "large", "xlarge"],
    ),
    ComponentSpec(
        type="clock",
        name="Clock",
        default_footprint=Footprint(w=4, h=2),
        default_props={"timezone": "UTC", "type": "12-hour", "size": "medium"},
    ),
    ComponentSpec(
        type="news",
        name="News",
        default_footprint=Footprint(w=6, h=4),
        default_props={"category": "general", "limit": 5, "theme": "light"},
        sizes=["medium", "large"],
    ),
    ComponentSpec(
        type="web_viewer",
        name="Web Viewer",
        default_footprint=Footprint(w=8, h=6),
        default_props={"url": "https://example.com", "refreshInterval": 60000},
    ),
    ComponentSpec(
        type="pv_flow",
        name="Solar Flow",
        default_footprint=Footprint(w=6, h=4),
        default_props={"theme": "dark", "showAnimation": True},
        sizes=["medium", "large"],
    ),
    ComponentSpec(
        type="slideshow",
        name="Slideshow",
        default_footprint=Footprint(w=8, h=6),
        default_props={"images": [], "intervalMs": 3000, "animations": "fade"},
    ),
    ComponentSpec(
        type="custom",
        name="Custom Plugin",
        default_footprint=Footprint(w=4, h=4),
        default_props={"pluginName": "Custom Widget", "config": "{}"},
    ),
]


class ComponentRegistry:
    """内置组件 + 配置文件中的覆盖项。"""

    def __init__(self, overrides: Optional[List[ComponentSpec]] = None):
        self._specs: Dict[str, ComponentSpec] = {s.type: s for s in BUILTIN_COMPONENTS}
        for spec in overrides or []:
            if spec.type in self._specs:
                logger.info(f"组件 '{spec.type}' 被配置覆盖")
            self._specs[spec.type] = spec

    def list(self) -> List[ComponentSpec]:
        return list(self._specs.values())

    def get(self, component_type: str) -> Optional[ComponentSpec]:
        return self._specs.get(component_type)

    def __contains__(self, component_type: str) -> bool:
        return component_type in self._specs

    def footprint_for(self, component_type: str) -> Footprint:
        """未知类型回退到 2x2，几何与可渲染性无关。"""
        spec = self.get(component_type)
        if spec is None:
            logger.warning(f"未知组件类型 '{component_type}'，使用默认尺寸 2x2")
            return FALLBACK_FOOTPRINT.model_copy()
        return spec.default_footprint.model_copy()

    def default_props(self, component_type: str) -> Dict[str, Any]:
        spec = self.get(component_type)
        return copy.deepcopy(spec.default_props) if spec else {}

    def size_footprint(self, component_type: str, size: str) -> Optional[Footprint]:
        """
        将尺寸预设（compact/medium/large/xlarge）解析为网格尺寸。
        组件未声明该预设时返回 None。
        """
        spec = self.get(component_type)
        if spec is None or size not in spec.sizes:
            return None
        preset = SIZE_PRESETS.get(size)
        return preset.model_copy() if preset else None
