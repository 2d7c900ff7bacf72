"""
Utility modules for the hybrid PDF to DOCX converter.
"""

from .io import load_pdf, save_json, ensure_dir, DigitalToken, RasterImage, ImageKind
from .layout import (
    PositionedTextItem, ItemOrigin, Line, TableBlock, ParagraphBlock, BlockType,
    cluster_lines, detect_structure,
)
from .headers import HeaderFooterDetector
from .normalizer import FragmentNormalizer
from .ocr_bridge import OcrBridge
from .tables import TableBuilder, TableResult, Cell
from .paragraphs import ParagraphBuilder, ParagraphResult, Alignment, contains_rtl
from .assembler import DocumentAssembler, Document, Page
from .export import DocxExporter
from .jobs import ConversionService, JobStore, JobStatus, JobNotFoundError, ArtifactNotFoundError

__all__ = [
    # IO
    "load_pdf", "save_json", "ensure_dir", "DigitalToken", "RasterImage", "ImageKind",
    # Layout
    "PositionedTextItem", "ItemOrigin", "Line", "TableBlock", "ParagraphBlock", "BlockType",
    "cluster_lines", "detect_structure",
    # Sources
    "HeaderFooterDetector", "FragmentNormalizer", "OcrBridge",
    # Builders
    "TableBuilder", "TableResult", "Cell",
    "ParagraphBuilder", "ParagraphResult", "Alignment", "contains_rtl",
    # Assembly
    "DocumentAssembler", "Document", "Page",
    # Export
    "DocxExporter",
    # Jobs
    "ConversionService", "JobStore", "JobStatus", "JobNotFoundError", "ArtifactNotFoundError",
]
