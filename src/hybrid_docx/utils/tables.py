"""
Table reconstruction from whitespace-aligned lines.

Provides:
- Cell splitting at large horizontal gaps
- Row-major grid assembly (ragged rows padded to the widest row)
- Markdown and structured representations
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import LayoutConfig
from .layout import Line, PositionedTextItem, TableBlock, horizontal_gap, round_half_up

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class Cell:
    """A single table cell."""
    text: str
    row: int
    col: int
    font_size: int = 24  # half-points

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "row": self.row,
            "col": self.col,
            "font_size": self.font_size,
        }


@dataclass
class TableResult:
    """A borderless, full-width grid of cells."""
    cells: List[Cell]
    num_rows: int
    num_cols: int
    width_pct: int = 100
    borderless: bool = True
    table_markdown: str = ""
    table_struct: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.table_struct:
            self.table_struct = self._build_struct()
        if not self.table_markdown:
            self.table_markdown = self._build_markdown()

    @property
    def rows(self) -> List[List[str]]:
        return self.table_struct.get("rows", [])

    def _build_struct(self) -> Dict[str, Any]:
        grid = [["" for _ in range(self.num_cols)] for _ in range(self.num_rows)]

        for cell in self.cells:
            if 0 <= cell.row < self.num_rows and 0 <= cell.col < self.num_cols:
                grid[cell.row][cell.col] = cell.text

        return {
            "rows": grid,
            "num_rows": self.num_rows,
            "num_cols": self.num_cols,
        }

    def _build_markdown(self) -> str:
        grid = self.rows
        if not grid or self.num_cols == 0:
            return ""

        lines = ["| " + " | ".join(grid[0]) + " |"]
        lines.append("| " + " | ".join("---" for _ in range(self.num_cols)) + " |")
        for row in grid[1:]:
            lines.append("| " + " | ".join(row) + " |")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "table",
            "num_rows": self.num_rows,
            "num_cols": self.num_cols,
            "width_pct": self.width_pct,
            "borderless": self.borderless,
            "cells": [c.to_dict() for c in self.cells],
            "markdown": self.table_markdown,
            "struct": self.table_struct,
        }


# ============================================================================
# Table Builder
# ============================================================================

def split_cells(
    items: List[PositionedTextItem],
    split_gap: float = 50.0
) -> List[str]:
    """
    Split an x-ordered item run into cell texts.

    A new cell starts wherever the gap to the previous item exceeds
    ``split_gap``; items within a cell are joined by single spaces.
    """
    if not items:
        return []

    groups = [[items[0]]]
    for prev, item in zip(items, items[1:]):
        if horizontal_gap(prev, item) > split_gap:
            groups.append([item])
        else:
            groups[-1].append(item)

    return [" ".join(it.text for it in group).strip() for group in groups]


class TableBuilder:
    """Builds a TableResult from a table block."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def build_row(self, row_index: int, line: Line) -> List[Cell]:
        size = round_half_up(line.avg_font_size * 2)
        return [
            Cell(text=text, row=row_index, col=col, font_size=size)
            for col, text in enumerate(split_cells(line.items, self.config.cell_split_gap))
        ]

    def build(self, block: TableBlock) -> TableResult:
        cells = []
        num_cols = 0
        for row_index, line in enumerate(block.rows):
            row = self.build_row(row_index, line)
            num_cols = max(num_cols, len(row))
            cells.extend(row)

        logger.debug(f"Built table: {len(block.rows)} rows x {num_cols} cols")
        return TableResult(cells=cells, num_rows=len(block.rows), num_cols=num_cols)
