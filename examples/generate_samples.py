#!/usr/bin/env python
"""
Generate sample PDFs for trying out the hybrid PDF to DOCX converter.

This script creates:
- A digital multi-page report with a running header and footer, a centred
  title, prose paragraphs and a whitespace-aligned table
- A mixed page whose body is an embedded scanned image

Usage:
    python examples/generate_samples.py
    hybrid-docx --input examples/sample_pdfs/sample_report.pdf --output outputs --json
"""

from pathlib import Path

import numpy as np

PAGE_WIDTH = 595
PAGE_HEIGHT = 842


def add_running_elements(page, number: int):
    """Header and footer repeated at identical positions on every page."""
    page.insert_text((50, 40), "Hybrid Clinic - Annual Report", fontsize=9)
    page.insert_text((50, 810), "Confidential - internal use only", fontsize=9)
    page.insert_text((530, 810), str(number), fontsize=9)


def create_sample_report(path: Path, page_count: int = 3):
    """Create a digital report with paragraphs and a table on every page."""
    import fitz

    doc = fitz.open()
    for number in range(1, page_count + 1):
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        add_running_elements(page, number)

        # Centred title
        title = f"Section {number}: Patient Summary"
        title_width = fitz.get_text_length(title, fontsize=16)
        page.insert_text(((PAGE_WIDTH - title_width) / 2, 120), title, fontsize=16)

        # Prose paragraph, one text object per line
        y = 170
        for line in [
            "This report summarises the outpatient activity recorded during",
            "the reporting period. Figures are grouped by department and",
            "include both scheduled and walk-in visits.",
        ]:
            page.insert_text((50, y), line, fontsize=11)
            y += 15

        # Whitespace-aligned table: each cell is a separate text object
        y += 40
        rows = [
            ("Department", "Visits", "Change"),
            ("Cardiology", "1240", "+4%"),
            ("Radiology", "860", "-2%"),
            ("Pediatrics", "1515", "+9%"),
        ]
        for row in rows:
            for x, cell in zip((50, 250, 420), row):
                page.insert_text((x, y), cell, fontsize=11)
            y += 20

        # Closing paragraph
        y += 40
        page.insert_text((50, y), "All figures are provisional until the annual audit.", fontsize=11)

    doc.save(str(path))
    doc.close()


def create_scan_image(width: int = 900, height: int = 500) -> np.ndarray:
    """Render a faint, scan-like text image."""
    import cv2

    img = np.full((height, width), 235, dtype=np.uint8)
    lines = [
        "Referral letter",
        "The patient was seen on 12 March and",
        "is referred for a follow-up assessment.",
    ]
    y = 90
    for line in lines:
        cv2.putText(img, line, (40, y), cv2.FONT_HERSHEY_SIMPLEX, 1.1, 120, 2)
        y += 80

    # Light noise so the image looks scanned
    rng = np.random.default_rng(42)
    noise = rng.integers(-10, 10, size=img.shape)
    return np.clip(img.astype(np.int16) + noise, 0, 255).astype(np.uint8)


def create_sample_mixed(path: Path):
    """Create a page with digital header text and an embedded scan."""
    import cv2
    import fitz

    doc = fitz.open()
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    page.insert_text((50, 80), "Scanned attachment follows:", fontsize=12)

    ok, png = cv2.imencode(".png", create_scan_image())
    if not ok:
        raise RuntimeError("Could not encode sample scan")
    page.insert_image(fitz.Rect(50, 120, 545, 395), stream=png.tobytes())

    doc.save(str(path))
    doc.close()


def main():
    samples_dir = Path(__file__).parent / "sample_pdfs"
    samples_dir.mkdir(exist_ok=True)

    samples = [
        ("sample_report.pdf", create_sample_report),
        ("sample_mixed.pdf", create_sample_mixed),
    ]

    for name, create in samples:
        path = samples_dir / name
        create(path)
        print(f"Created: {path}")

    print("\nSample generation complete!")


if __name__ == "__main__":
    main()
