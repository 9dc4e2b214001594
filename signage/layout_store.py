"""
Layout Store: Handles JSON-based storage for screen layouts and templates.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from signage.collision import validate_layout
from signage.grid import GridModel
from signage.models import StoredLayout

logger = logging.getLogger(__name__)

# Default paths
DATA_DIR = Path("data")


class LayoutStore:
    """Manages stored layouts and templates in JSON files."""

    def __init__(self, data_dir: Path = DATA_DIR):
        self.data_dir = Path(data_dir)
        self.layouts_file = self.data_dir / "layouts.json"
        self.templates_file = self.data_dir / "templates.json"

        # Ensure data directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)

    # ── Generic file access ──────────────────────────────

    def _load(self, path: Path) -> List[StoredLayout]:
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
                return [StoredLayout.model_validate(item) for item in data]
        except Exception as e:
            logger.error(f"Failed to load {path.name}: {e}")
            return []

    def _save(self, path: Path, layouts: List[StoredLayout]):
        with open(path, "w", encoding="utf-8") as f:
            json.dump([layout.model_dump(by_alias=True) for layout in layouts], f, indent=2, ensure_ascii=False)

    def _upsert(self, path: Path, layout: StoredLayout) -> StoredLayout:
        layouts = self._load(path)
        # Find existing and update, or append new
        existing_idx = None
        for i, existing in enumerate(layouts):
            if existing.id == layout.id:
                existing_idx = i
                break

        if existing_idx is not None:
            layouts[existing_idx] = layout
        else:
            layouts.append(layout)

        self._save(path, layouts)
        return layout

    def _delete(self, path: Path, layout_id: str) -> bool:
        layouts = self._load(path)
        original_len = len(layouts)
        layouts = [layout for layout in layouts if layout.id != layout_id]

        if len(layouts) < original_len:
            self._save(path, layouts)
            return True
        return False

    def _get(self, path: Path, layout_id: str) -> Optional[StoredLayout]:
        for layout in self._load(path):
            if layout.id == layout_id:
                return layout
        return None

    # ── Layouts ──────────────────────────────────────────

    def load_layouts(self) -> List[StoredLayout]:
        """Load all stored layouts from JSON file."""
        return self._load(self.layouts_file)

    def save_layout(self, layout: StoredLayout) -> StoredLayout:
        """Create or update a layout. Invalid layouts are stored but logged."""
        errors = validate_layout(layout.items, GridModel(cols=layout.cols, rows=layout.rows))
        if errors:
            logger.warning(f"[{layout.id}] Saving a layout with problems: {errors}")
        return self._upsert(self.layouts_file, layout)

    def delete_layout(self, layout_id: str) -> bool:
        """Delete a layout by ID."""
        return self._delete(self.layouts_file, layout_id)

    def get_layout(self, layout_id: str) -> Optional[StoredLayout]:
        """Get a single layout by ID."""
        return self._get(self.layouts_file, layout_id)

    # ── Templates ────────────────────────────────────────

    def load_templates(self) -> List[StoredLayout]:
        return self._load(self.templates_file)

    def save_template(self, template: StoredLayout) -> StoredLayout:
        template = template.model_copy(update={"is_template": True})
        return self._upsert(self.templates_file, template)

    def delete_template(self, template_id: str) -> bool:
        return self._delete(self.templates_file, template_id)

    def get_template(self, template_id: str) -> Optional[StoredLayout]:
        return self._get(self.templates_file, template_id)

    def create_from_template(self, template_id: str, layout_id: str, name: Optional[str] = None) -> Optional[StoredLayout]:
        """Copy a template's items into a new stored layout."""
        template = self.get_template(template_id)
        if template is None:
            return None
        layout = StoredLayout(
            id=layout_id,
            name=name or template.name,
            cols=template.cols,
            rows=template.rows,
            items=[item.model_copy(deep=True) for item in template.items],
        )
        logger.info(f"[{layout_id}] Created from template '{template_id}' with {len(layout.items)} items")
        return self.save_layout(layout)
