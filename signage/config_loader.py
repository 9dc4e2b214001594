"""
配置加载器：将 YAML 配置文件解析为 Pydantic 模型。
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from signage.grid import DEFAULT_COLS, DEFAULT_ROWS, GridModel
from signage.registry import ComponentSpec
from signage.snap import DEFAULT_THRESHOLD_PX

logger = logging.getLogger(__name__)

ROOT_ENV = "SIGNAGE_BOARD_ROOT"


# ── 画布配置 ──────────────────────────────────────────

class GridConfig(BaseModel):
    cols: int = Field(default=DEFAULT_COLS, ge=1)
    rows: int = Field(default=DEFAULT_ROWS, ge=1)


class CanvasConfig(BaseModel):
    """画布像素尺寸，仅用于把吸附阈值从像素换算到网格单位。"""
    width_px: float = 1920.0
    height_px: float = 1080.0


class SnapConfig(BaseModel):
    threshold_px: float = DEFAULT_THRESHOLD_PX


# ── 顶层配置 ──────────────────────────────────────────

class AppConfig(BaseModel):
    grid: GridConfig = Field(default_factory=GridConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    snap: SnapConfig = Field(default_factory=SnapConfig)
    components: List[ComponentSpec] = Field(default_factory=list)
    data_dir: str = "data"

    def grid_model(self) -> GridModel:
        return GridModel(cols=self.grid.cols, rows=self.grid.rows)

    @property
    def cell_width_px(self) -> float:
        return self.canvas.width_px / self.grid.cols

    @property
    def cell_height_px(self) -> float:
        return self.canvas.height_px / self.grid.rows


# ── Loading ──────────────────────────────────────────

_CONFIG_SEARCH_PATHS = [
    "config/config.yaml",
    "config.yaml",
]


def find_config_root() -> Path:
    """Find the root config file or directory."""
    base = Path(os.getenv(ROOT_ENV, "."))
    config_dir = base / "config"
    if config_dir.is_dir():
        return config_dir

    for p in _CONFIG_SEARCH_PATHS:
        path = base / p
        if path.exists():
            return path

    return base


def merge_config(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Merge one YAML document into another; 'components' lists are appended."""
    for k, v in update.items():
        if k == "components" and isinstance(v, list):
            base.setdefault("components", []).extend(v)
        elif isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k] = {**base[k], **v}
        else:
            base[k] = v
    return base


def load_all_yamls(root: Path) -> Dict[str, Any]:
    """Load and merge all YAML files."""
    combined: Dict[str, Any] = {}

    files = []
    if root.is_file():
        files.append(root)
    elif root.is_dir():
        files.extend(root.glob("**/*.yaml"))
        files.extend(root.glob("**/*.yml"))
        files.sort()

    for f in files:
        try:
            with open(f, "r", encoding="utf-8") as fp:
                content = yaml.safe_load(fp)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"加载配置文件失败 {f}: {e}")
            continue
        if not content:
            continue
        merge_config(combined, content)

    return combined


def load_config(path: Optional[str | Path] = None) -> AppConfig:
    """
    Load and merge configuration from YAML files.
    Missing files fall back to the defaults (32x18 grid, 1920x1080 canvas).
    """
    if path is None:
        path = find_config_root()
    path = Path(path)

    raw = load_all_yamls(path)
    config = AppConfig.model_validate(raw)

    # 相对路径的 data_dir 相对于项目根目录
    data_dir = Path(config.data_dir)
    if not data_dir.is_absolute():
        config.data_dir = str(Path(os.getenv(ROOT_ENV, ".")) / data_dir)
    return config
