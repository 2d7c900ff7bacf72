"""
Running header/footer detection.

Samples the first pages of a document, collects short texts sitting in the
top and bottom margin bands, and reports the ones that repeat at the same
position on nearly every sampled page.
"""

import logging
from collections import Counter
from typing import Any, FrozenSet, Optional

from ..config import HeaderFooterConfig
from .layout import exclusion_key, round_half_up

logger = logging.getLogger(__name__)


class HeaderFooterDetector:
    """Builds the document-wide exclusion set of header/footer keys."""

    def __init__(self, config: Optional[HeaderFooterConfig] = None):
        self.config = config or HeaderFooterConfig()

    def sample_size(self, page_count: int) -> int:
        return min(page_count, self.config.max_sample_pages)

    def detect(self, source: Any) -> FrozenSet[str]:
        """
        Detect repeating margin texts.

        Args:
            source: Object with ``page_count`` and ``get_page(number)``;
                pages expose ``height`` and ``get_text_tokens()``

        Returns:
            Frozen set of exclusion keys
        """
        page_count = source.page_count
        if page_count < 2:
            return frozenset()

        sample_size = self.sample_size(page_count)
        counts: Counter = Counter()

        for number in range(1, sample_size + 1):
            page = source.get_page(number)
            counts.update(self._margin_keys(page))

        repeatable = frozenset(
            key for key, count in counts.items() if count >= sample_size - 1
        )
        logger.info(
            f"Header/footer analysis: {len(repeatable)} repeating items "
            f"across {sample_size} sampled pages"
        )
        return repeatable

    def _margin_keys(self, page: Any) -> Counter:
        """Keys of the qualifying margin-band tokens on one page."""
        height = page.height
        top = height * self.config.margin_band
        bottom = height * (1 - self.config.margin_band)
        keys: Counter = Counter()

        for token in page.get_text_tokens():
            if not token.text:
                continue
            text = token.text.strip()
            if len(text) <= self.config.min_text_length:
                continue
            y = round_half_up(height - token.transform[5])
            if top <= y <= bottom:
                continue
            keys[exclusion_key(token.transform[4], y, text)] += 1

        return keys
