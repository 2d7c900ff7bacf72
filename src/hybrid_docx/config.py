"""
Configuration and constants for the hybrid PDF to DOCX converter.

This module provides:
- Global logging setup
- Layout heuristics (line, table, paragraph and alignment thresholds)
- Header/footer sampling parameters
- OCR and image preprocessing parameters
- DOCX formatting and job service settings
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("hybrid_docx")


# ============================================================================
# Directory Paths
# ============================================================================

PACKAGE_DIR = Path(__file__).parent
PROJECT_ROOT = PACKAGE_DIR.parent.parent
DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "outputs"
DEFAULT_UPLOAD_DIR = PROJECT_ROOT / "uploads"


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class LayoutConfig:
    """Thresholds used by line clustering and structure classification.

    Distances are in page units (PDF points at scale 1.0).
    """
    # Line clustering
    line_y_tolerance_ratio: float = 0.6   # x font size, opens a new line
    sort_tie_tolerance: float = 4.0       # |dy| below this sorts by x
    word_gap_ratio: float = 0.25          # x font size, inserts a space
    default_font_size: float = 12.0
    # Table detection
    table_gap_threshold: float = 60.0
    min_table_text_length: int = 5
    cell_split_gap: float = 50.0
    # Paragraph merging
    paragraph_gap_ratio: float = 2.0      # x font size
    paragraph_indent_tolerance: float = 50.0
    # Alignment
    center_tolerance: float = 40.0
    center_max_width_ratio: float = 0.6


@dataclass
class HeaderFooterConfig:
    """Running header/footer detection configuration."""
    max_sample_pages: int = 5
    margin_band: float = 0.12  # top/bottom fraction of the page height
    min_text_length: int = 2   # trimmed text must be longer than this


@dataclass
class OCRConfig:
    """OCR configuration for embedded raster images."""
    enabled: bool = True
    # Tesseract configuration
    languages: str = "ara+eng+hun"
    page_segmentation_mode: int = 3  # fully automatic
    preserve_interword_spaces: bool = True
    # Image selection
    min_image_side: int = 100
    max_images: int = 3
    # Preprocessing
    upscale_below_width: int = 2200
    upscale_factor: float = 2.5
    contrast: float = 0.2
    # Estimated placement of recognized blocks (no image-to-page transform)
    item_x_ratio: float = 0.1
    item_y_ratio: float = 0.5
    item_width_ratio: float = 0.8
    item_height: float = 20.0
    item_font_size: float = 11.0


@dataclass
class ExportConfig:
    """DOCX formatting configuration (twips unless noted)."""
    page_margin: int = 720
    spacing_before: int = 100
    spacing_after: int = 100
    line_spacing: int = 300  # 240ths of a line
    latin_font: str = "Arial"
    rtl_font: str = "Traditional Arabic"


@dataclass
class ServiceConfig:
    """Background conversion service configuration."""
    output_dir: Path = DEFAULT_OUTPUT_DIR
    upload_dir: Path = DEFAULT_UPLOAD_DIR
    max_workers: int = 2
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    header_footer: HeaderFooterConfig = field(default_factory=HeaderFooterConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)

    # Global settings
    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("HYBRID_DOCX_DEBUG", "").lower() == "true":
        config.debug_mode = True

    if os.environ.get("HYBRID_DOCX_DISABLE_OCR", "").lower() == "true":
        config.ocr.enabled = False

    languages = os.environ.get("HYBRID_DOCX_OCR_LANG")
    if languages:
        config.ocr.languages = languages

    output_dir = os.environ.get("HYBRID_DOCX_OUTPUT_DIR")
    if output_dir:
        config.service.output_dir = Path(output_dir)

    upload_dir = os.environ.get("HYBRID_DOCX_UPLOAD_DIR")
    if upload_dir:
        config.service.upload_dir = Path(upload_dir)

    max_workers = os.environ.get("HYBRID_DOCX_MAX_WORKERS")
    if max_workers:
        try:
            config.service.max_workers = max(1, int(max_workers))
        except ValueError:
            logger.warning(f"Ignoring invalid HYBRID_DOCX_MAX_WORKERS: {max_workers!r}")

    return config
