"""
Tests for table reconstruction module.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hybrid_docx.utils.layout import PositionedTextItem, TableBlock, cluster_lines
from hybrid_docx.utils.tables import (
    TableBuilder,
    TableResult,
    Cell,
    split_cells,
)


def item(text, x, y=10.0, width=40.0, font_size=12.0):
    return PositionedTextItem(text=text, x=x, y=y, width=width, font_size=font_size)


class TestTableResult:
    """Tests for TableResult data class."""

    def test_empty_table(self):
        """Test empty table result."""
        result = TableResult(cells=[], num_rows=0, num_cols=0)
        assert result.table_markdown == ""
        assert result.rows == []

    def test_simple_table(self):
        """Test simple 2x2 table result."""
        cells = [
            Cell(text="A", row=0, col=0),
            Cell(text="B", row=0, col=1),
            Cell(text="1", row=1, col=0),
            Cell(text="2", row=1, col=1),
        ]
        result = TableResult(cells=cells, num_rows=2, num_cols=2)

        assert result.rows == [["A", "B"], ["1", "2"]]
        assert "| A | B |" in result.table_markdown
        assert "| 1 | 2 |" in result.table_markdown

    def test_ragged_rows_are_padded(self):
        cells = [
            Cell(text="A", row=0, col=0),
            Cell(text="B", row=0, col=1),
            Cell(text="C", row=0, col=2),
            Cell(text="1", row=1, col=0),
        ]
        result = TableResult(cells=cells, num_rows=2, num_cols=3)

        assert result.rows[1] == ["1", "", ""]

    def test_table_to_dict(self):
        """Test table serialization."""
        result = TableResult(cells=[Cell(text="X", row=0, col=0)], num_rows=1, num_cols=1)

        d = result.to_dict()
        assert d["type"] == "table"
        assert d["width_pct"] == 100
        assert d["borderless"] is True
        assert len(d["cells"]) == 1


class TestSplitCells:
    """Tests for gap-based cell splitting."""

    def test_empty(self):
        assert split_cells([]) == []

    def test_gap_above_threshold_splits(self):
        items = [item("Hello", 10), item("World", 120)]
        assert split_cells(items) == ["Hello", "World"]

    def test_gap_below_threshold_joins_with_space(self):
        items = [item("New", 10, width=30), item("York", 45, width=30), item("10", 200)]
        assert split_cells(items) == ["New York", "10"]

    def test_gap_at_threshold_does_not_split(self):
        """A gap of exactly 50 keeps both items in one cell."""
        items = [item("Total", 10, width=40), item("due", 100, width=30)]
        assert split_cells(items) == ["Total due"]

    def test_custom_split_gap(self):
        items = [item("a", 10, width=10), item("b", 40, width=10)]
        assert split_cells(items, split_gap=10) == ["a", "b"]


class TestTableBuilder:
    """Tests for TableBuilder."""

    @pytest.fixture
    def builder(self):
        return TableBuilder()

    def test_single_row_two_cells(self, builder):
        lines = cluster_lines([item("Hello", 10), item("World", 120)])
        result = builder.build(TableBlock(rows=lines))

        assert result.num_rows == 1
        assert result.num_cols == 2
        assert [c.text for c in result.cells] == ["Hello", "World"]

    def test_cell_size_in_half_points(self, builder):
        lines = cluster_lines([item("Name", 10, font_size=10.25), item("Value", 200, font_size=10.25)])
        result = builder.build(TableBlock(rows=lines))

        assert all(c.font_size == 21 for c in result.cells)

    def test_row_major_order(self, builder):
        lines = cluster_lines([
            item("Name", 10, y=10), item("Age", 200, y=10),
            item("Alice", 10, y=30), item("30", 200, y=30),
        ])
        result = builder.build(TableBlock(rows=lines))

        assert [(c.row, c.col) for c in result.cells] == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert result.rows == [["Name", "Age"], ["Alice", "30"]]

    def test_widest_row_sets_column_count(self, builder):
        lines = cluster_lines([
            item("One", 10, y=10), item("Two", 200, y=10), item("Three", 400, y=10),
            item("Left", 10, y=30), item("Right", 200, y=30),
        ])
        result = builder.build(TableBlock(rows=lines))

        assert result.num_cols == 3
        assert result.rows[1] == ["Left", "Right", ""]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
