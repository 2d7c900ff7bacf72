"""
Hybrid PDF to DOCX Converter
============================

Reconstructs Word documents from PDFs that mix digital text with scanned
images.

Main components:
- Header/footer detection across sampled pages
- Fragment normalization of digital text tokens
- OCR of embedded raster images
- Line clustering and table/paragraph classification
- Direction- and alignment-aware DOCX export
- Background conversion jobs with progress polling
"""

__version__ = "1.0.0"
__author__ = "Hybrid DOCX Team"
