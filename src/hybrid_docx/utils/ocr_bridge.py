"""
OCR bridge between embedded page images and the layout engine.

Recognized blocks are placed at an estimated position: the OCR engine
reports boxes in image-local pixels and no image-to-page transform is
computed, so every OCR item lands in a fixed band (left margin estimate,
vertical centre, 80% width). This is a known precision limit.
"""

import logging
from typing import Any, List, Optional

from ..config import OCRConfig
from .images import preprocess_for_ocr
from .io import RasterImage
from .layout import ItemOrigin, PositionedTextItem

logger = logging.getLogger(__name__)


class OcrBridge:
    """Runs OCR over a page's largest embedded images."""

    def __init__(self, engine: Any, config: Optional[OCRConfig] = None):
        self.engine = engine
        self.config = config or OCRConfig()

    def select_images(self, images: List[RasterImage]) -> List[RasterImage]:
        """Drop icon-sized images and keep the largest few by pixel area."""
        min_side = self.config.min_image_side
        candidates = [
            img for img in images
            if img.width >= min_side and img.height >= min_side
        ]
        candidates.sort(key=lambda img: img.area, reverse=True)
        return candidates[:self.config.max_images]

    def place_block(
        self,
        text: str,
        page_width: float,
        page_height: float
    ) -> PositionedTextItem:
        return PositionedTextItem(
            text=text,
            x=page_width * self.config.item_x_ratio,
            y=page_height * self.config.item_y_ratio,
            width=page_width * self.config.item_width_ratio,
            height=self.config.item_height,
            font_size=self.config.item_font_size,
            origin=ItemOrigin.OCR,
        )

    def extract_items(self, page: Any) -> List[PositionedTextItem]:
        """
        Recognize text in the page's embedded images.

        Args:
            page: Object with ``number``, ``width``, ``height`` and
                ``get_images()``

        Returns:
            OCR items for the page; empty if the page has no usable images
            or if extraction/recognition fails
        """
        try:
            images = page.get_images()
            if not images:
                return []

            selected = self.select_images(images)
            logger.info(
                f"Page {page.number}: {len(images)} embedded images, "
                f"running OCR on {len(selected)}"
            )

            items = []
            for image in selected:
                buffer = preprocess_for_ocr(image, self.config)
                for block in self.engine.recognize(buffer):
                    text = block.text.strip()
                    if text:
                        items.append(self.place_block(text, page.width, page.height))
            return items

        except Exception as e:
            logger.error(f"OCR failed on page {page.number}: {e}", exc_info=True)
            return []
