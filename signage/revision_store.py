"""
修订记录：基于 TinyDB 保存每次提交后的布局快照。
latest 表按 layout_id 去重，history 表追加记录。
"""

import logging
import os
import time
from pathlib import Path
from typing import List

from tinydb import Query, TinyDB

from signage.models import LayoutItem, dump_items

logger = logging.getLogger(__name__)

_DATA_DIR = Path(os.getenv("SIGNAGE_BOARD_ROOT", ".")) / "data"


class RevisionStore:
    """TinyDB 数据操作封装。"""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            db_path = _DATA_DIR / "revisions.json"
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self.db = TinyDB(str(db_path), indent=2, ensure_ascii=False)
        self.latest_table = self.db.table("latest")
        self.history_table = self.db.table("history")
        logger.info(f"TinyDB 数据库已打开: {db_path}")

    # ── 写入 ──────────────────────────────────────────

    def record(self, layout_id: str, items: List[LayoutItem]) -> dict:
        """记录一次已提交的布局：更新 latest，并追加 history。"""
        now = time.time()
        snapshot = dump_items(items)

        Layout = Query()
        self.latest_table.upsert(
            {"layout_id": layout_id, "items": snapshot, "updated_at": now},
            Layout.layout_id == layout_id,
        )

        revision = len(self.history_table.search(Layout.layout_id == layout_id)) + 1
        record = {
            "layout_id": layout_id,
            "revision": revision,
            "items": snapshot,
            "timestamp": now,
        }
        self.history_table.insert(record)
        logger.debug(f"[{layout_id}] 已记录修订 #{revision} ({len(snapshot)} 个组件)")
        return record

    # ── 查询 ──────────────────────────────────────────

    def get_latest(self, layout_id: str) -> dict | None:
        Layout = Query()
        results = self.latest_table.search(Layout.layout_id == layout_id)
        return results[0] if results else None

    def get_history(self, layout_id: str, limit: int = 100) -> list[dict]:
        """获取指定布局的修订记录（按修订号倒序）。"""
        Layout = Query()
        records = self.history_table.search(Layout.layout_id == layout_id)
        records.sort(key=lambda r: r.get("revision", 0), reverse=True)
        return records[:limit]

    # ── 管理 ──────────────────────────────────────────

    def clear_layout(self, layout_id: str):
        """清除指定布局的所有记录。"""
        Layout = Query()
        self.latest_table.remove(Layout.layout_id == layout_id)
        self.history_table.remove(Layout.layout_id == layout_id)

    def close(self):
        """关闭数据库。"""
        self.db.close()
