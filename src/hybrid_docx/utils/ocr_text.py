"""
Text OCR module for embedded raster images.

Provides:
- OcrBlock results (one per recognized text block)
- Tesseract engine wrapper with language and segmentation settings
- Scoped engine lifecycle (acquire once per document, close once)
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class OcrBlock:
    """A block of recognized text in image-local pixel space."""
    text: str
    confidence: float = 0.0
    bbox: Optional[Tuple[int, int, int, int]] = None  # (x1, y1, x2, y2)

    def to_dict(self):
        return {
            "text": self.text,
            "confidence": self.confidence,
            "bbox": self.bbox,
        }


@dataclass
class _BlockAccumulator:
    lines: Dict[Tuple[int, int], List[str]] = field(default_factory=dict)
    confidences: List[float] = field(default_factory=list)
    x1: int = 0
    y1: int = 0
    x2: int = 0
    y2: int = 0


# ============================================================================
# Tesseract Engine
# ============================================================================

class TesseractEngine:
    """
    OCR using Tesseract.

    One instance serves a whole document conversion. ``close()`` terminates
    it; recognizing afterwards is an error.
    """

    def __init__(
        self,
        languages: str = "ara+eng+hun",
        page_segmentation_mode: int = 3,
        preserve_interword_spaces: bool = True
    ):
        try:
            import pytesseract
            self.pytesseract = pytesseract

            # Test that tesseract is installed
            pytesseract.get_tesseract_version()

        except Exception as e:
            raise ImportError(
                f"Tesseract not available: {e}\n"
                "Install with: pip install pytesseract\n"
                "Also install Tesseract: https://github.com/tesseract-ocr/tesseract"
            )

        self.languages = languages
        self.page_segmentation_mode = page_segmentation_mode
        self.preserve_interword_spaces = preserve_interword_spaces
        self.closed = False
        logger.info(f"Initialized Tesseract OCR engine ({languages}, psm {page_segmentation_mode})")

    @property
    def config(self) -> str:
        options = [f"--psm {self.page_segmentation_mode}"]
        if self.preserve_interword_spaces:
            options.append("-c preserve_interword_spaces=1")
        return " ".join(options)

    def recognize(self, image_bytes: bytes) -> List[OcrBlock]:
        """
        Recognize text blocks in an encoded image.

        Args:
            image_bytes: PNG (or any Pillow-readable) image buffer

        Returns:
            Non-empty text blocks in Tesseract's block order
        """
        if self.closed:
            raise RuntimeError("OCR engine has been closed")

        from PIL import Image

        with Image.open(io.BytesIO(image_bytes)) as image:
            data = self.pytesseract.image_to_data(
                image,
                lang=self.languages,
                config=self.config,
                output_type=self.pytesseract.Output.DICT
            )

        return parse_tesseract_blocks(data)

    def close(self):
        if not self.closed:
            self.closed = True
            logger.info("Terminated Tesseract OCR engine")

    def __enter__(self) -> "TesseractEngine":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def parse_tesseract_blocks(data: Dict[str, list]) -> List[OcrBlock]:
    """
    Group ``image_to_data`` word rows into text blocks.

    Words are joined by spaces within a line and lines by newlines within a
    block. Blocks whose trimmed text is empty are dropped.
    """
    blocks: Dict[int, _BlockAccumulator] = {}

    for i in range(len(data.get("text", []))):
        word = (data["text"][i] or "").strip()
        conf = float(data["conf"][i])
        if not word or conf < 0:
            continue

        block_num = data["block_num"][i]
        left, top = data["left"][i], data["top"][i]
        right, bottom = left + data["width"][i], top + data["height"][i]

        acc = blocks.get(block_num)
        if acc is None:
            acc = _BlockAccumulator(x1=left, y1=top, x2=right, y2=bottom)
            blocks[block_num] = acc
        else:
            acc.x1, acc.y1 = min(acc.x1, left), min(acc.y1, top)
            acc.x2, acc.y2 = max(acc.x2, right), max(acc.y2, bottom)

        line_key = (data["par_num"][i], data["line_num"][i])
        acc.lines.setdefault(line_key, []).append(word)
        acc.confidences.append(conf / 100.0)

    results = []
    for block_num in sorted(blocks):
        acc = blocks[block_num]
        text = "\n".join(" ".join(words) for words in acc.lines.values()).strip()
        if not text:
            continue
        results.append(OcrBlock(
            text=text,
            confidence=sum(acc.confidences) / len(acc.confidences),
            bbox=(acc.x1, acc.y1, acc.x2, acc.y2),
        ))

    return results
