"""
Export module for reconstructed documents.

Serializes pages of paragraph/table elements into a DOCX file with one
section per source page, run-level formatting (size, direction, typeface),
paragraph bidi flags and borderless full-width tables.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from ..config import ExportConfig
from .paragraphs import Alignment, ParagraphResult
from .tables import TableResult

logger = logging.getLogger(__name__)


_PPR_AFTER_BIDI = (
    'w:adjustRightInd', 'w:snapToGrid', 'w:spacing', 'w:ind',
    'w:contextualSpacing', 'w:mirrorIndents', 'w:suppressOverlap', 'w:jc',
    'w:textDirection', 'w:textAlignment', 'w:textboxTightWrap',
    'w:outlineLvl', 'w:divId', 'w:cnfStyle', 'w:rPr', 'w:sectPr', 'w:pPrChange',
)
_RPR_AFTER_SZCS = (
    'w:highlight', 'w:u', 'w:effect', 'w:bdr', 'w:shd', 'w:fitText',
    'w:vertAlign', 'w:rtl', 'w:cs', 'w:em', 'w:lang', 'w:eastAsianLayout',
    'w:specVanish', 'w:oMath',
)
_TBLPR_AFTER_BORDERS = (
    'w:shd', 'w:tblLayout', 'w:tblCellMar', 'w:tblLook',
    'w:tblCaption', 'w:tblDescription', 'w:tblPrChange',
)
_BORDER_EDGES = ('top', 'left', 'bottom', 'right', 'insideH', 'insideV')


# ============================================================================
# DOCX Exporter
# ============================================================================

class DocxExporter:
    """Export reconstructed pages to DOCX format using python-docx."""

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()

    def export(
        self,
        document: Any,
        output_path: Union[str, Path]
    ) -> Path:
        """
        Export document to DOCX file.

        The file is written next to its destination and renamed into place
        only once serialization succeeded.

        Args:
            document: Object with ``pages``; each page has ``elements``
            output_path: Output file path

        Returns:
            Path to the generated DOCX file
        """
        try:
            from docx import Document as DocxDocument
        except ImportError:
            raise ImportError(
                "python-docx is required for DOCX export. "
                "Install with: pip install python-docx"
            )

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        partial_path = output_path.with_name(output_path.name + ".part")

        doc = DocxDocument()
        for index, page in enumerate(document.pages):
            self._start_section(doc, first=index == 0)
            for element in page.elements:
                self._add_element(doc, element)

        try:
            doc.save(str(partial_path))
            os.replace(partial_path, output_path)
        except Exception:
            if partial_path.exists():
                partial_path.unlink()
            raise

        logger.info(f"Exported DOCX to: {output_path}")
        return output_path

    def _start_section(self, doc: Any, first: bool):
        from docx.enum.section import WD_SECTION
        from docx.shared import Twips

        section = doc.sections[0] if first else doc.add_section(WD_SECTION.NEW_PAGE)
        margin = Twips(self.config.page_margin)
        section.top_margin = margin
        section.bottom_margin = margin
        section.left_margin = margin
        section.right_margin = margin

    def _add_element(self, doc: Any, element: Any):
        if isinstance(element, ParagraphResult):
            self._add_paragraph(doc, element)
        elif isinstance(element, TableResult):
            self._add_table(doc, element)
        else:
            raise TypeError(f"Unsupported page element: {type(element).__name__}")

    def _add_paragraph(self, doc: Any, paragraph: ParagraphResult):
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.oxml import OxmlElement
        from docx.shared import Twips

        alignments = {
            Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
            Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
            Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
        }

        p = doc.add_paragraph()
        if paragraph.is_empty:
            return

        p.alignment = alignments[paragraph.alignment]
        fmt = p.paragraph_format
        fmt.space_before = Twips(paragraph.spacing_before)
        fmt.space_after = Twips(paragraph.spacing_after)
        fmt.line_spacing = paragraph.line_spacing / 240

        if paragraph.bidirectional:
            pPr = p._p.get_or_add_pPr()
            pPr.insert_element_before(OxmlElement('w:bidi'), *_PPR_AFTER_BIDI)

        for spec in paragraph.runs:
            self._add_run(p, spec.text, spec.size, spec.font, spec.right_to_left)

    def _add_run(self, paragraph: Any, text: str, size: int, font: Optional[str], rtl: bool):
        from docx.oxml import OxmlElement
        from docx.oxml.ns import qn
        from docx.shared import Pt

        run = paragraph.add_run(text)
        run.font.size = Pt(size / 2)
        if font:
            run.font.name = font
            run._element.rPr.rFonts.set(qn('w:cs'), font)
        if rtl:
            run.font.rtl = True
            rPr = run._element.get_or_add_rPr()
            sz_cs = OxmlElement('w:szCs')
            sz_cs.set(qn('w:val'), str(size))
            rPr.insert_element_before(sz_cs, *_RPR_AFTER_SZCS)
        return run

    def _add_table(self, doc: Any, table_result: TableResult):
        """Add a borderless, full-width table."""
        if table_result.num_rows == 0 or table_result.num_cols == 0:
            return

        table = doc.add_table(rows=table_result.num_rows, cols=table_result.num_cols)
        for cell in table_result.cells:
            target = table.cell(cell.row, cell.col)
            self._add_run(target.paragraphs[0], cell.text, cell.font_size, None, False)

        self._set_full_width(table)
        if table_result.borderless:
            self._remove_borders(table)

    def _set_full_width(self, table: Any):
        from docx.oxml import OxmlElement
        from docx.oxml.ns import qn

        tblPr = table._tbl.tblPr
        tblW = tblPr.find(qn('w:tblW'))
        if tblW is None:
            tblW = OxmlElement('w:tblW')
            tblPr.append(tblW)
        tblW.set(qn('w:type'), 'pct')
        tblW.set(qn('w:w'), '5000')  # fiftieths of a percent

    def _remove_borders(self, table: Any):
        from docx.oxml import OxmlElement
        from docx.oxml.ns import qn

        tblPr = table._tbl.tblPr
        existing = tblPr.find(qn('w:tblBorders'))
        if existing is not None:
            tblPr.remove(existing)

        borders = OxmlElement('w:tblBorders')
        for edge in _BORDER_EDGES:
            element = OxmlElement(f'w:{edge}')
            element.set(qn('w:val'), 'none')
            element.set(qn('w:sz'), '0')
            element.set(qn('w:space'), '0')
            element.set(qn('w:color'), 'auto')
            borders.append(element)
        tblPr.insert_element_before(borders, *_TBLPR_AFTER_BORDERS)
