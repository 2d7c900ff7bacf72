"""
I/O utilities for the hybrid PDF to DOCX converter.

Handles:
- PDF loading through PyMuPDF
- Per-page positioned text tokens and embedded raster images
- JSON serialization
- Directory management
"""

import json
import logging
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class DigitalToken:
    """A text run as the PDF content stream positions it.

    ``transform`` is the text matrix ``(a, b, c, d, e, f)`` in PDF user
    space, where y grows upward from the bottom of the page.
    """
    text: str
    transform: Tuple[float, float, float, float, float, float]
    width: float = 0.0
    height: float = 0.0


class ImageKind(Enum):
    """Pixel layouts of embedded raster images."""
    GRAYSCALE = 1
    RGB = 3
    RGBA = 4


@dataclass
class RasterImage:
    """Raw pixel buffer of an embedded image object."""
    width: int
    height: int
    kind: ImageKind
    data: bytes

    @property
    def area(self) -> int:
        return self.width * self.height


# ============================================================================
# PDF Source
# ============================================================================

class PdfPage:
    """One page of a PDF opened with PyMuPDF."""

    def __init__(self, document: Any, page: Any, number: int):
        self._document = document
        self._page = page
        self.number = number
        self.width = float(page.rect.width)
        self.height = float(page.rect.height)

    def get_text_tokens(self) -> List[DigitalToken]:
        """Return every text span on the page with its text matrix."""
        tokens = []
        data = self._page.get_text("dict")

        for block in data.get("blocks", []):
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                cos, sin = line.get("dir", (1.0, 0.0))
                for span in line.get("spans", []):
                    size = float(span.get("size", 0.0))
                    origin_x, origin_y = span.get("origin", (0.0, 0.0))
                    x0, y0, x1, y1 = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
                    tokens.append(DigitalToken(
                        text=span.get("text", ""),
                        transform=(
                            size * cos, -size * sin,
                            size * sin, size * cos,
                            float(origin_x), self.height - float(origin_y),
                        ),
                        width=float(x1 - x0),
                        height=float(y1 - y0),
                    ))

        logger.debug(f"Page {self.number}: {len(tokens)} text tokens")
        return tokens

    def get_images(self) -> List[RasterImage]:
        """
        Return the raw pixels of every image paint on the page.

        Only images actually drawn are listed; one drawn twice appears twice.
        Inline images (xref 0) are skipped.
        """
        import fitz

        images = []
        decoded: Dict[int, RasterImage] = {}
        for info in self._page.get_image_info(xrefs=True):
            xref = info.get("xref", 0)
            if not xref:
                continue

            if xref not in decoded:
                pix = fitz.Pixmap(self._document, xref)
                if pix.alpha:
                    pix = fitz.Pixmap(pix, 0)
                if pix.n not in (1, 3):
                    pix = fitz.Pixmap(fitz.csRGB, pix)

                kind = ImageKind.GRAYSCALE if pix.n == 1 else ImageKind.RGB
                decoded[xref] = RasterImage(
                    width=pix.width,
                    height=pix.height,
                    kind=kind,
                    data=bytes(pix.samples),
                )
            images.append(decoded[xref])

        logger.debug(f"Page {self.number}: {len(images)} painted images")
        return images


class PdfDocumentSource:
    """
    Page-by-page access to a PDF document.

    Pages are numbered from 1. Use as a context manager so the underlying
    file handle is released.
    """

    def __init__(self, document: Any, path: Optional[Path] = None):
        self._document = document
        self.path = path

    @property
    def page_count(self) -> int:
        return self._document.page_count

    def get_page(self, number: int) -> PdfPage:
        if not 1 <= number <= self.page_count:
            raise IndexError(f"Page {number} out of range 1..{self.page_count}")
        return PdfPage(self._document, self._document[number - 1], number)

    def close(self):
        self._document.close()

    def __enter__(self) -> "PdfDocumentSource":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def load_pdf(pdf_path: Union[str, Path]) -> PdfDocumentSource:
    """
    Open a PDF file for hybrid extraction.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        PdfDocumentSource over the opened document

    Raises:
        FileNotFoundError: If PDF file doesn't exist
        ImportError: If PyMuPDF is not installed
        RuntimeError: If the file cannot be parsed as a PDF
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(f"PDF file not found: {pdf_path}")

    try:
        import fitz
    except ImportError:
        raise ImportError(
            "PyMuPDF is required. Install with: pip install PyMuPDF"
        )

    try:
        document = fitz.open(str(pdf_path))
    except Exception as e:
        raise RuntimeError(f"Failed to parse PDF: {e}")

    if not document.is_pdf:
        document.close()
        raise RuntimeError(f"Failed to parse PDF: {pdf_path} is not a PDF document")

    logger.info(f"Opened PDF: {pdf_path} ({document.page_count} pages)")
    return PdfDocumentSource(document, pdf_path)


def get_pdf_page_count(pdf_path: Union[str, Path]) -> int:
    """Get the number of pages in a PDF file."""
    try:
        with load_pdf(pdf_path) as source:
            return source.page_count
    except Exception as e:
        logger.warning(f"Could not get PDF page count: {e}")
        return 0


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy scalars, dataclasses, enums and paths."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory

    Returns:
        Path object for the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
