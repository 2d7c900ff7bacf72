"""
Layout reconstruction module for hybrid PDF pages.

Provides:
- Positioned text items shared by digital and OCR sources
- Line clustering with gap-driven word spacing
- Table vs. paragraph classification
- Paragraph merging across line-clustering noise

All geometry is in page units with y growing downward.
"""

import functools
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from ..config import LayoutConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes and Enums
# ============================================================================

class ItemOrigin(Enum):
    """Source of a text fragment."""
    DIGITAL = "digital"
    OCR = "ocr"


class BlockType(Enum):
    """Types of reconstructed blocks."""
    TABLE = "table"
    PARAGRAPH = "paragraph"


@dataclass
class PositionedTextItem:
    """A text fragment with its top-left position and size."""
    text: str
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    font_size: float = 12.0
    origin: ItemOrigin = ItemOrigin.DIGITAL

    @property
    def right(self) -> float:
        return self.x + self.width

    def to_dict(self):
        return {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "font_size": self.font_size,
            "origin": self.origin.value,
        }


@dataclass
class Line:
    """A horizontal cluster of items sharing one baseline."""
    items: List[PositionedTextItem]
    y: float
    avg_font_size: float
    min_x: float
    max_x: float
    text: str

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    def to_dict(self):
        return {
            "text": self.text,
            "y": self.y,
            "avg_font_size": self.avg_font_size,
            "min_x": self.min_x,
            "max_x": self.max_x,
        }


@dataclass
class TableBlock:
    """A run of consecutive table-like lines."""
    rows: List[Line] = field(default_factory=list)

    @property
    def block_type(self) -> BlockType:
        return BlockType.TABLE


@dataclass
class ParagraphBlock:
    """A run of vertically contiguous, left-aligned prose lines."""
    lines: List[Line] = field(default_factory=list)

    @property
    def block_type(self) -> BlockType:
        return BlockType.PARAGRAPH


Block = Union[TableBlock, ParagraphBlock]


# ============================================================================
# Geometry Helpers
# ============================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return int(math.floor(value + 0.5))


def exclusion_key(x: float, y: float, text: str) -> str:
    """Canonical position+content signature used for header/footer matching."""
    return f"{round_half_up(x)}_{round_half_up(y)}_{text.strip()}"


def horizontal_gap(left: PositionedTextItem, right: PositionedTextItem) -> float:
    return right.x - left.right


# ============================================================================
# Line Clustering
# ============================================================================

def sort_reading_order(
    items: List[PositionedTextItem],
    config: Optional[LayoutConfig] = None
) -> List[PositionedTextItem]:
    """
    Sort items top-to-bottom, breaking near-ties in y by x.

    Items whose y differs by less than ``sort_tie_tolerance`` are ordered
    left-to-right so interleaved digital and OCR fragments read naturally.

    The tie rule is not transitive, so a chain of near-ties has no single
    consistent order. Items are put into a canonical order first so the
    result never depends on the order they were passed in.
    """
    config = config or LayoutConfig()
    tolerance = config.sort_tie_tolerance

    def compare(a: PositionedTextItem, b: PositionedTextItem) -> float:
        if abs(a.y - b.y) < tolerance:
            return a.x - b.x
        return a.y - b.y

    canonical = sorted(items, key=lambda it: (it.y, it.x, it.text, it.width, it.font_size))
    return sorted(canonical, key=functools.cmp_to_key(compare))


def finalize_line(
    items: List[PositionedTextItem],
    y: float,
    config: Optional[LayoutConfig] = None
) -> Line:
    """
    Close a line: order its items by x and build the line text.

    A single space is inserted where the gap to the next item exceeds
    ``word_gap_ratio`` times the left item's font size.
    """
    config = config or LayoutConfig()
    ordered = sorted(items, key=lambda it: it.x)

    parts = []
    for i, item in enumerate(ordered):
        parts.append(item.text)
        if i + 1 < len(ordered):
            gap = horizontal_gap(item, ordered[i + 1])
            if gap > item.font_size * config.word_gap_ratio:
                parts.append(" ")

    return Line(
        items=ordered,
        y=y,
        avg_font_size=sum(it.font_size for it in ordered) / len(ordered),
        min_x=min(it.x for it in ordered),
        max_x=max(it.right for it in ordered),
        text="".join(parts).strip(),
    )


def cluster_lines(
    items: List[PositionedTextItem],
    config: Optional[LayoutConfig] = None
) -> List[Line]:
    """
    Group items into horizontal lines by vertical proximity.

    Args:
        items: Normalized items from every source on the page
        config: Layout thresholds

    Returns:
        Lines in top-to-bottom order
    """
    config = config or LayoutConfig()
    if not items:
        return []

    ordered = sort_reading_order(items, config)

    lines = []
    first = ordered[0]
    current = [first]
    current_y = first.y
    current_size = first.font_size or config.default_font_size

    for item in ordered[1:]:
        if abs(item.y - current_y) < current_size * config.line_y_tolerance_ratio:
            current.append(item)
        else:
            lines.append(finalize_line(current, current_y, config))
            current = [item]
            current_y = item.y
            current_size = item.font_size or config.default_font_size

    lines.append(finalize_line(current, current_y, config))

    logger.debug(f"Clustered {len(items)} items into {len(lines)} lines")
    return lines


# ============================================================================
# Structure Classification
# ============================================================================

def count_large_gaps(
    items: List[PositionedTextItem],
    threshold: float
) -> int:
    """Count consecutive item pairs separated by more than ``threshold``."""
    return sum(
        1 for left, right in zip(items, items[1:])
        if horizontal_gap(left, right) > threshold
    )


def is_table_row(line: Line, config: Optional[LayoutConfig] = None) -> bool:
    """A line with at least one column gap and some real text is a table row."""
    config = config or LayoutConfig()
    return (
        count_large_gaps(line.items, config.table_gap_threshold) >= 1
        and len(line.text) > config.min_table_text_length
    )


def _continues_paragraph(
    previous: ParagraphBlock,
    following: ParagraphBlock,
    config: LayoutConfig
) -> bool:
    prev_line = previous.lines[-1]
    curr_line = following.lines[0]
    vertical_gap = curr_line.y - prev_line.y
    return (
        vertical_gap < prev_line.avg_font_size * config.paragraph_gap_ratio
        and abs(curr_line.min_x - prev_line.min_x) < config.paragraph_indent_tolerance
    )


def merge_paragraphs(
    blocks: List[Block],
    config: Optional[LayoutConfig] = None
) -> List[Block]:
    """Merge adjacent paragraph blocks that are vertically and horizontally continuous."""
    config = config or LayoutConfig()
    merged: List[Block] = []

    for block in blocks:
        last = merged[-1] if merged else None
        if (isinstance(block, ParagraphBlock)
                and isinstance(last, ParagraphBlock)
                and _continues_paragraph(last, block, config)):
            last.lines.extend(block.lines)
            continue
        merged.append(block)

    return merged


def detect_structure(
    lines: List[Line],
    config: Optional[LayoutConfig] = None
) -> List[Block]:
    """
    Partition ordered lines into table and paragraph blocks.

    Consecutive table-like lines form one TableBlock; every other line
    starts a ParagraphBlock, and continuous paragraphs are merged afterwards.
    """
    config = config or LayoutConfig()
    blocks: List[Block] = []
    pending_rows: List[Line] = []

    for line in lines:
        if is_table_row(line, config):
            pending_rows.append(line)
            continue
        if pending_rows:
            blocks.append(TableBlock(rows=pending_rows))
            pending_rows = []
        blocks.append(ParagraphBlock(lines=[line]))

    if pending_rows:
        blocks.append(TableBlock(rows=pending_rows))

    merged = merge_paragraphs(blocks, config)
    logger.debug(
        f"Detected {sum(1 for b in merged if b.block_type == BlockType.TABLE)} tables, "
        f"{sum(1 for b in merged if b.block_type == BlockType.PARAGRAPH)} paragraphs"
    )
    return merged
