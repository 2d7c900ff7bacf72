"""
Document assembler module for hybrid PDF to DOCX conversion.

Provides:
- Document data model (Document, Page)
- Per-page pipeline: normalize -> OCR -> cluster -> classify -> build
- OCR engine lifecycle (one engine per document conversion)
- Progress reporting
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Union

from ..config import PipelineConfig, get_config
from .headers import HeaderFooterDetector
from .layout import (
    Block, ParagraphBlock, PositionedTextItem, TableBlock,
    cluster_lines, detect_structure, round_half_up,
)
from .normalizer import FragmentNormalizer
from .ocr_bridge import OcrBridge
from .paragraphs import ParagraphBuilder, ParagraphResult
from .tables import TableBuilder, TableResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
PageElement = Union[ParagraphResult, TableResult]


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class Page:
    """A reconstructed page: elements in reading order."""
    page_number: int
    width: float
    height: float
    elements: List[PageElement] = field(default_factory=list)
    digital_items: int = 0
    ocr_items: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_number": self.page_number,
            "width": self.width,
            "height": self.height,
            "digital_items": self.digital_items,
            "ocr_items": self.ocr_items,
            "elements": [e.to_dict() for e in self.elements],
        }


@dataclass
class Document:
    """A reconstructed document."""
    task_id: str
    source_file: str
    pages: List[Page] = field(default_factory=list)
    excluded_keys: List[str] = field(default_factory=list)
    processing_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "source_file": self.source_file,
            "page_count": len(self.pages),
            "processing_time": self.processing_time,
            "excluded_keys": self.excluded_keys,
            "pages": [p.to_dict() for p in self.pages],
        }


class _NullOcrBridge:
    """Stand-in when OCR is disabled."""

    def extract_items(self, page: Any) -> List[PositionedTextItem]:
        return []


# ============================================================================
# Document Assembler
# ============================================================================

class DocumentAssembler:
    """
    Orchestrates the hybrid reconstruction pipeline.

    Coordinates:
    - Header/footer detection (once per document)
    - Fragment normalization of digital tokens
    - OCR of embedded images
    - Line clustering and structure classification
    - Table and paragraph building
    - DOCX export
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        ocr_engine_factory: Optional[Callable[[], Any]] = None
    ):
        self.config = config or get_config()
        self.ocr_engine_factory = ocr_engine_factory or self._default_ocr_engine
        self.header_detector = HeaderFooterDetector(self.config.header_footer)
        self.table_builder = TableBuilder(self.config.layout)
        self.paragraph_builder = ParagraphBuilder(self.config.layout, self.config.export)

    def _default_ocr_engine(self):
        from .ocr_text import TesseractEngine

        ocr = self.config.ocr
        return TesseractEngine(
            languages=ocr.languages,
            page_segmentation_mode=ocr.page_segmentation_mode,
            preserve_interword_spaces=ocr.preserve_interword_spaces
        )

    # ------------------------------------------------------------------
    # Layout reconstruction
    # ------------------------------------------------------------------

    def build_element(self, block: Block, page_width: float) -> PageElement:
        if isinstance(block, TableBlock):
            return self.table_builder.build(block)
        if isinstance(block, ParagraphBlock):
            return self.paragraph_builder.build(block, page_width)
        raise TypeError(f"Unsupported block: {type(block).__name__}")

    def reconstruct_layout(
        self,
        items: List[PositionedTextItem],
        page_width: float
    ) -> List[PageElement]:
        """
        Turn a page's merged items into ordered page elements.

        An empty item list yields a single empty paragraph so the page still
        appears in the output.
        """
        if not items:
            return [self.paragraph_builder.empty()]

        lines = cluster_lines(items, self.config.layout)
        blocks = detect_structure(lines, self.config.layout)
        return [self.build_element(block, page_width) for block in blocks]

    # ------------------------------------------------------------------
    # Pages and documents
    # ------------------------------------------------------------------

    def process_page(
        self,
        page: Any,
        normalizer: FragmentNormalizer,
        ocr_bridge: Any
    ) -> Page:
        """
        Process a single page.

        Args:
            page: PdfPage-like object
            normalizer: Normalizer holding the document's exclusion set
            ocr_bridge: Bridge producing OCR items for the page

        Returns:
            Page with its elements in reading order
        """
        digital = normalizer.normalize_tokens(page.get_text_tokens(), page.height)
        ocr = ocr_bridge.extract_items(page)
        items = normalizer.merge(digital, ocr)

        logger.debug(
            f"Page {page.number}: {len(digital)} digital items, {len(ocr)} OCR items"
        )
        return Page(
            page_number=page.number,
            width=page.width,
            height=page.height,
            elements=self.reconstruct_layout(items, page.width),
            digital_items=len(digital),
            ocr_items=len(ocr),
        )

    def process_document(
        self,
        source: Any,
        source_file: str = "",
        ocr_engine: Any = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> Document:
        """
        Process every page of an opened document, in page order.

        Args:
            source: PdfDocumentSource-like object
            source_file: Original source file path (for the JSON envelope)
            ocr_engine: Engine shared by all pages, or None to skip OCR
            on_progress: Called with a percentage before each page

        Returns:
            Document with all pages
        """
        start_time = time.time()
        doc = Document(task_id=str(uuid.uuid4()), source_file=source_file)

        exclusions: FrozenSet[str] = self.header_detector.detect(source)
        doc.excluded_keys = sorted(exclusions)
        normalizer = FragmentNormalizer(exclusions, self.config.layout)
        bridge = OcrBridge(ocr_engine, self.config.ocr) if ocr_engine is not None else _NullOcrBridge()

        page_count = source.page_count
        for number in range(1, page_count + 1):
            if on_progress:
                on_progress(round_half_up((number - 1) / page_count * 100))
            logger.info(f"Analyzing page {number}/{page_count}...")
            page = source.get_page(number)
            doc.pages.append(self.process_page(page, normalizer, bridge))

        doc.processing_time = time.time() - start_time
        return doc

    def convert(
        self,
        pdf_path: Union[str, Path],
        output_path: Union[str, Path],
        on_progress: Optional[ProgressCallback] = None
    ) -> Document:
        """
        Convert a PDF into a DOCX file.

        The OCR engine is acquired once and closed once, whatever happens to
        the pages in between.

        Raises:
            FileNotFoundError: If the PDF does not exist
            RuntimeError: If the PDF cannot be parsed
        """
        from .export import DocxExporter
        from .io import load_pdf

        logger.info(f"Starting hybrid conversion: {pdf_path}")
        ocr_engine = self.ocr_engine_factory() if self.config.ocr.enabled else None

        try:
            with load_pdf(pdf_path) as source:
                document = self.process_document(
                    source,
                    source_file=str(pdf_path),
                    ocr_engine=ocr_engine,
                    on_progress=on_progress
                )
            DocxExporter(self.config.export).export(document, output_path)
        finally:
            if ocr_engine is not None:
                ocr_engine.close()

        if on_progress:
            on_progress(100)
        logger.info(f"Conversion completed: {output_path}")
        return document
