#!/usr/bin/env python
"""
Command-line interface for the hybrid PDF to DOCX converter.

Usage:
    hybrid-docx --input <pdf> --output <output_dir> [options]

Examples:
    # Convert a PDF
    hybrid-docx --input report.pdf --output ./outputs

    # Also dump the reconstructed page structure as JSON
    hybrid-docx --input report.pdf --output ./outputs --json

    # Digital text only, no OCR of embedded scans
    hybrid-docx --input report.pdf --output ./outputs --no-ocr
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from hybrid_docx import __version__

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("hybrid_docx")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Hybrid PDF to DOCX converter - rebuilds paragraphs and tables "
                    "from digital text and OCR of embedded scans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Convert a PDF:
    hybrid-docx --input report.pdf --output ./outputs

  Arabic/English documents only:
    hybrid-docx --input report.pdf --output ./outputs --lang ara+eng
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input PDF file"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated files"
    )

    # Optional arguments
    parser.add_argument(
        "--json",
        action="store_true",
        help="Also write the reconstructed structure as JSON"
    )

    parser.add_argument(
        "--lang",
        default=None,
        help="Tesseract language set (default: ara+eng+hun)"
    )

    parser.add_argument(
        "--no-ocr",
        action="store_true",
        help="Skip OCR of embedded images"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def check_dependencies(require_ocr: bool = True) -> bool:
    """Check if required dependencies are available."""
    missing = []

    try:
        import fitz
    except ImportError:
        missing.append("PyMuPDF")

    try:
        import docx
    except ImportError:
        missing.append("python-docx")

    if require_ocr:
        try:
            import cv2
        except ImportError:
            missing.append("opencv-python")

        try:
            import pytesseract
            try:
                pytesseract.get_tesseract_version()
            except Exception:
                missing.append("tesseract-ocr (system package)")
        except ImportError:
            missing.append("pytesseract")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    return True


def run_pipeline(args) -> int:
    """Run the conversion."""
    from hybrid_docx.config import get_config
    from hybrid_docx.utils.assembler import DocumentAssembler
    from hybrid_docx.utils.io import ensure_dir, save_json
    from hybrid_docx.utils.jobs import output_name_for

    start_time = time.time()

    input_path = Path(args.input)
    if input_path.suffix.lower() != ".pdf":
        logger.error(f"Unsupported input file: {input_path}")
        return 1

    output_dir = ensure_dir(args.output)
    output_path = output_dir / output_name_for(input_path.name)

    config = get_config()
    if args.no_ocr:
        config.ocr.enabled = False
    if args.lang:
        config.ocr.languages = args.lang

    assembler = DocumentAssembler(config)

    def on_progress(percent: int):
        logger.debug(f"Progress: {percent}%")

    try:
        document = assembler.convert(input_path, output_path, on_progress)
    except Exception as e:
        logger.error(f"Conversion failed: {e}")
        if config.debug_mode:
            raise
        return 1

    if args.json:
        json_path = output_dir / f"{input_path.stem}.json"
        save_json(document.to_dict(), json_path)
        logger.info(f"Saved JSON: {json_path}")

    elapsed = time.time() - start_time

    if not args.quiet:
        tables = sum(
            1 for page in document.pages for e in page.elements if e.to_dict()["type"] == "table"
        )
        paragraphs = sum(len(page.elements) for page in document.pages) - tables
        print("\n" + "=" * 60)
        print("CONVERSION COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Output: {output_path}")
        print(f"Pages processed: {len(document.pages)}")
        print(f"Processing time: {elapsed:.2f}s")
        print(f"Paragraphs: {paragraphs}  Tables: {tables}")
        print(f"Excluded header/footer keys: {len(document.excluded_keys)}")
        print("=" * 60)

    return 0


def main():
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if not check_dependencies(require_ocr=not args.no_ocr):
        sys.exit(1)

    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
