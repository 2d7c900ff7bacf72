"""
Paragraph reconstruction from prose blocks.

Provides:
- Right-to-left script detection
- Alignment inference from line geometry
- Run-level formatting (size, direction, typeface)
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config import ExportConfig, LayoutConfig
from .layout import Line, ParagraphBlock, round_half_up

logger = logging.getLogger(__name__)

# Arabic, Arabic Supplement, Arabic Extended-A, Presentation Forms A and B
_RTL_PATTERN = re.compile(
    "[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF]"
)


def contains_rtl(text: str) -> bool:
    """True if any character belongs to an Arabic-script block."""
    return bool(_RTL_PATTERN.search(text))


# ============================================================================
# Data Classes and Enums
# ============================================================================

class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass
class TextRunSpec:
    """Formatting of one run; ``size`` is in half-points."""
    text: str
    size: int
    right_to_left: bool = False
    font: str = "Arial"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "size": self.size,
            "right_to_left": self.right_to_left,
            "font": self.font,
        }


@dataclass
class ParagraphResult:
    """A reconstructed paragraph ready for serialization."""
    runs: List[TextRunSpec] = field(default_factory=list)
    alignment: Alignment = Alignment.LEFT
    bidirectional: bool = False
    spacing_before: int = 100
    spacing_after: int = 100
    line_spacing: int = 300

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs).strip()

    @property
    def is_empty(self) -> bool:
        return not self.runs

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "paragraph",
            "text": self.text,
            "alignment": self.alignment.value,
            "bidirectional": self.bidirectional,
            "runs": [r.to_dict() for r in self.runs],
        }


# ============================================================================
# Paragraph Builder
# ============================================================================

def detect_alignment(
    line: Line,
    page_width: float,
    config: Optional[LayoutConfig] = None
) -> Alignment:
    """
    Infer alignment from a line's horizontal placement.

    Narrow lines centred on the page are CENTER; otherwise RTL text is
    RIGHT and everything else LEFT.
    """
    config = config or LayoutConfig()
    midpoint = (line.min_x + line.max_x) / 2
    if (abs(midpoint - page_width / 2) < config.center_tolerance
            and line.width < page_width * config.center_max_width_ratio):
        return Alignment.CENTER
    if contains_rtl(line.text):
        return Alignment.RIGHT
    return Alignment.LEFT


class ParagraphBuilder:
    """Builds a direction- and alignment-aware paragraph from a prose block."""

    def __init__(
        self,
        layout_config: Optional[LayoutConfig] = None,
        export_config: Optional[ExportConfig] = None
    ):
        self.layout_config = layout_config or LayoutConfig()
        self.export_config = export_config or ExportConfig()

    def empty(self) -> ParagraphResult:
        """Placeholder paragraph for a page with no text at all."""
        cfg = self.export_config
        return ParagraphResult(
            spacing_before=cfg.spacing_before,
            spacing_after=cfg.spacing_after,
            line_spacing=cfg.line_spacing,
        )

    def build(self, block: ParagraphBlock, page_width: float) -> ParagraphResult:
        cfg = self.export_config
        joined = " ".join(line.text for line in block.lines)
        is_rtl = contains_rtl(joined)
        font = cfg.rtl_font if is_rtl else cfg.latin_font

        runs = [
            TextRunSpec(
                text=line.text + " ",
                size=round_half_up(line.avg_font_size * 2),
                right_to_left=is_rtl,
                font=font,
            )
            for line in block.lines
        ]

        return ParagraphResult(
            runs=runs,
            alignment=detect_alignment(block.lines[0], page_width, self.layout_config),
            bidirectional=is_rtl,
            spacing_before=cfg.spacing_before,
            spacing_after=cfg.spacing_after,
            line_spacing=cfg.line_spacing,
        )
