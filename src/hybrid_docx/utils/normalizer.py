"""
Fragment normalization.

Converts digital text tokens into positioned items in the shared page frame
(top-left origin, y downward) and merges them with OCR items.
"""

import logging
import math
from typing import FrozenSet, Iterable, List, Optional

from ..config import LayoutConfig
from .io import DigitalToken
from .layout import ItemOrigin, PositionedTextItem, exclusion_key

logger = logging.getLogger(__name__)


def font_size_from_transform(transform, default: float = 12.0) -> float:
    """Font size as the length of the text matrix's x basis vector."""
    size = math.hypot(transform[0], transform[1])
    return size if size > 0 else default


class FragmentNormalizer:
    """Turns source fragments into ``PositionedTextItem`` lists for one page."""

    def __init__(
        self,
        exclusions: Optional[FrozenSet[str]] = None,
        config: Optional[LayoutConfig] = None
    ):
        self.exclusions = exclusions or frozenset()
        self.config = config or LayoutConfig()

    def normalize_token(
        self,
        token: DigitalToken,
        page_height: float
    ) -> Optional[PositionedTextItem]:
        """Map one token to an item, or None if it is blank or excluded."""
        text = (token.text or "").strip()
        if not text:
            return None

        x = token.transform[4]
        y = page_height - token.transform[5]
        if exclusion_key(x, y, text) in self.exclusions:
            return None

        return PositionedTextItem(
            text=text,
            x=x,
            y=y,
            width=token.width or 0.0,
            height=token.height or 0.0,
            font_size=font_size_from_transform(
                token.transform, self.config.default_font_size
            ),
            origin=ItemOrigin.DIGITAL,
        )

    def normalize_tokens(
        self,
        tokens: Iterable[DigitalToken],
        page_height: float
    ) -> List[PositionedTextItem]:
        items = []
        skipped = 0
        for token in tokens:
            item = self.normalize_token(token, page_height)
            if item is None:
                skipped += 1
                continue
            items.append(item)

        if skipped:
            logger.debug(f"Dropped {skipped} blank or header/footer tokens")
        return items

    def merge(
        self,
        digital: List[PositionedTextItem],
        ocr: List[PositionedTextItem]
    ) -> List[PositionedTextItem]:
        """Union of both sources; blank OCR text never enters the pipeline."""
        return list(digital) + [item for item in ocr if item.text.strip()]
