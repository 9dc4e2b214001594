"""
Grid geometry: canvas dimensions in cells and pure rectangle helpers.
"""

import math

from pydantic import BaseModel, ConfigDict, Field

from signage.models import Position

DEFAULT_COLS = 32
DEFAULT_ROWS = 18


class FractionRect(BaseModel):
    """Normalized placement (0..1) used by renderers."""
    left: float
    top: float
    width: float
    height: float


class GridModel(BaseModel):
    """Immutable description of the canvas grid."""
    model_config = ConfigDict(frozen=True)

    cols: int = Field(default=DEFAULT_COLS, ge=1)
    rows: int = Field(default=DEFAULT_ROWS, ge=1)

    def cell_to_fraction(self, x: int, y: int, w: int, h: int) -> FractionRect:
        return FractionRect(
            left=x / self.cols,
            top=y / self.rows,
            width=w / self.cols,
            height=h / self.rows,
        )

    def is_in_bounds(self, x: int, y: int, w: int, h: int) -> bool:
        return x >= 0 and y >= 0 and x + w <= self.cols and y + h <= self.rows

    def fits(self, w: int, h: int) -> bool:
        """Whether a footprint fits the grid anywhere at all."""
        return 1 <= w <= self.cols and 1 <= h <= self.rows

    def clamp(self, x: int, y: int, w: int, h: int) -> Position:
        """
        Clamp a top-left cell into [0, cols-w] x [0, rows-h].
        Oversized footprints clamp to 0 on the offending axis.
        """
        return Position(
            x=max(0, min(x, self.cols - w)),
            y=max(0, min(y, self.rows - h)),
        )

    def cell_at(self, cell_x: float, cell_y: float) -> Position:
        """Cell containing a point given in cell-space coordinates."""
        if not (math.isfinite(cell_x) and math.isfinite(cell_y)):
            raise ValueError(f"pointer position must be finite, got ({cell_x}, {cell_y})")
        return Position(x=math.floor(cell_x), y=math.floor(cell_y))


def rects_overlap(ax: int, ay: int, aw: int, ah: int, bx: int, by: int, bw: int, bh: int) -> bool:
    """Standard 2D interval overlap; shared edges do not overlap."""
    return not (ax + aw <= bx or bx + bw <= ax or ay + ah <= by or by + bh <= ay)
