"""
Tests for text OCR and the OCR bridge.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def tesseract_data(rows):
    """Build an ``image_to_data`` dict from (block, par, line, text, conf, box) rows."""
    data = {key: [] for key in (
        "block_num", "par_num", "line_num", "text", "conf",
        "left", "top", "width", "height",
    )}
    for block, par, line, text, conf, (left, top, width, height) in rows:
        data["block_num"].append(block)
        data["par_num"].append(par)
        data["line_num"].append(line)
        data["text"].append(text)
        data["conf"].append(conf)
        data["left"].append(left)
        data["top"].append(top)
        data["width"].append(width)
        data["height"].append(height)
    return data


def raster(width, height):
    from hybrid_docx.utils.io import ImageKind, RasterImage

    return RasterImage(width, height, ImageKind.GRAYSCALE, bytes([180]) * (width * height))


class FakeEngine:
    def __init__(self, texts=None, error=None):
        self.texts = texts or []
        self.error = error
        self.calls = 0

    def recognize(self, image_bytes):
        from hybrid_docx.utils.ocr_text import OcrBlock

        self.calls += 1
        if self.error:
            raise self.error
        return [OcrBlock(text=t) for t in self.texts]


class FakePage:
    def __init__(self, images, number=1, width=600.0, height=800.0, error=None):
        self.number = number
        self.width = width
        self.height = height
        self._images = images
        self._error = error

    def get_images(self):
        if self._error:
            raise self._error
        return list(self._images)


class TestParseTesseractBlocks:
    """Test grouping of Tesseract word rows into blocks."""

    def test_words_lines_and_blocks(self):
        from hybrid_docx.utils.ocr_text import parse_tesseract_blocks

        data = tesseract_data([
            (1, 1, 1, "Hello", 90, (10, 10, 50, 20)),
            (1, 1, 1, "World", 80, (70, 10, 50, 20)),
            (1, 1, 2, "Again", 70, (10, 40, 50, 20)),
            (2, 1, 1, "Second", 60, (10, 200, 60, 20)),
        ])
        blocks = parse_tesseract_blocks(data)

        assert [b.text for b in blocks] == ["Hello World\nAgain", "Second"]
        assert blocks[0].bbox == (10, 10, 120, 60)
        assert blocks[0].confidence == pytest.approx(0.8)

    def test_structural_rows_are_skipped(self):
        from hybrid_docx.utils.ocr_text import parse_tesseract_blocks

        data = tesseract_data([
            (1, 0, 0, "", -1, (0, 0, 500, 500)),
            (1, 1, 1, "  ", 95, (0, 0, 5, 5)),
            (1, 1, 1, "text", 88, (5, 5, 40, 20)),
        ])
        blocks = parse_tesseract_blocks(data)

        assert len(blocks) == 1
        assert blocks[0].text == "text"

    def test_empty_blocks_dropped(self):
        from hybrid_docx.utils.ocr_text import parse_tesseract_blocks

        data = tesseract_data([(1, 0, 0, "", -1, (0, 0, 10, 10))])
        assert parse_tesseract_blocks(data) == []


class TestTesseractEngine:
    """Test the Tesseract engine wrapper."""

    @pytest.fixture
    def engine(self):
        from hybrid_docx.utils.ocr_text import TesseractEngine

        try:
            return TesseractEngine(languages="eng")
        except ImportError:
            pytest.skip("Tesseract not available")

    def test_config_string(self, engine):
        assert engine.config == "--psm 3 -c preserve_interword_spaces=1"

    def test_recognize_after_close_raises(self, engine):
        engine.close()
        with pytest.raises(RuntimeError):
            engine.recognize(b"")

    def test_close_is_idempotent(self, engine):
        engine.close()
        engine.close()
        assert engine.closed


class TestTesseractEngineCalls:
    """Test the arguments handed to pytesseract, without a Tesseract binary."""

    @pytest.fixture
    def calls(self, monkeypatch):
        pytesseract = pytest.importorskip("pytesseract")
        calls = []

        def image_to_data(image, **kwargs):
            calls.append((image.size, kwargs))
            return tesseract_data([
                (1, 0, 0, "", -1, (0, 0, 40, 20)),
                (1, 1, 1, "Scanned", 91, (2, 2, 20, 10)),
                (1, 1, 1, "text", 87, (24, 2, 14, 10)),
            ])

        monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
        monkeypatch.setattr(pytesseract, "image_to_data", image_to_data)
        return calls

    @pytest.fixture
    def png_bytes(self):
        import io

        Image = pytest.importorskip("PIL.Image")
        buffer = io.BytesIO()
        Image.new("L", (40, 20), 255).save(buffer, format="PNG")
        return buffer.getvalue()

    def test_recognize_passes_language_and_page_mode(self, calls, png_bytes):
        import pytesseract

        from hybrid_docx.utils.ocr_text import TesseractEngine

        engine = TesseractEngine(languages="ara+eng+hun")
        blocks = engine.recognize(png_bytes)

        assert len(calls) == 1
        size, kwargs = calls[0]
        assert size == (40, 20)
        assert kwargs["lang"] == "ara+eng+hun"
        assert kwargs["config"] == "--psm 3 -c preserve_interword_spaces=1"
        assert kwargs["output_type"] is pytesseract.Output.DICT

        assert [b.text for b in blocks] == ["Scanned text"]
        assert blocks[0].bbox == (2, 2, 38, 12)

    def test_interword_spaces_can_be_disabled(self, calls, png_bytes):
        from hybrid_docx.utils.ocr_text import TesseractEngine

        engine = TesseractEngine(languages="eng", page_segmentation_mode=6, preserve_interword_spaces=False)
        engine.recognize(png_bytes)

        assert calls[0][1]["config"] == "--psm 6"

    def test_missing_binary_raises_import_error(self, monkeypatch):
        pytesseract = pytest.importorskip("pytesseract")
        from hybrid_docx.utils.ocr_text import TesseractEngine

        def missing():
            raise pytesseract.TesseractNotFoundError()

        monkeypatch.setattr(pytesseract, "get_tesseract_version", missing)

        with pytest.raises(ImportError, match="Tesseract not available"):
            TesseractEngine(languages="eng")


class TestOcrBridge:
    """Test image selection and item placement."""

    def test_small_images_filtered(self):
        from hybrid_docx.utils.ocr_bridge import OcrBridge

        bridge = OcrBridge(FakeEngine())
        selected = bridge.select_images([raster(99, 500), raster(100, 100), raster(500, 50)])

        assert [(img.width, img.height) for img in selected] == [(100, 100)]

    def test_three_largest_selected(self):
        from hybrid_docx.utils.ocr_bridge import OcrBridge

        bridge = OcrBridge(FakeEngine())
        images = [raster(100 + 10 * i, 100) for i in range(5)]
        selected = bridge.select_images(images)

        assert [img.width for img in selected] == [140, 130, 120]

    def test_icon_does_not_take_a_slot(self):
        """Tiny images are discarded before the top-three cut."""
        from hybrid_docx.utils.ocr_bridge import OcrBridge

        bridge = OcrBridge(FakeEngine())
        images = [raster(1000, 10), raster(100, 100), raster(110, 100), raster(120, 100)]

        assert len(bridge.select_images(images)) == 3

    def test_estimated_placement(self):
        from hybrid_docx.utils.layout import ItemOrigin
        from hybrid_docx.utils.ocr_bridge import OcrBridge

        item = OcrBridge(FakeEngine()).place_block("scan", 600, 800)

        assert (item.x, item.y, item.width, item.height) == pytest.approx((60, 400, 480, 20))
        assert item.font_size == 11
        assert item.origin == ItemOrigin.OCR

    def test_extract_items(self):
        from hybrid_docx.utils.ocr_bridge import OcrBridge

        engine = FakeEngine(texts=["First block", "  ", "Second block"])
        items = OcrBridge(engine).extract_items(FakePage([raster(120, 120)]))

        assert engine.calls == 1
        assert [it.text for it in items] == ["First block", "Second block"]

    def test_page_without_images(self):
        from hybrid_docx.utils.ocr_bridge import OcrBridge

        engine = FakeEngine(texts=["unused"])

        assert OcrBridge(engine).extract_items(FakePage([])) == []
        assert engine.calls == 0

    def test_recognition_failure_yields_no_items(self):
        from hybrid_docx.utils.ocr_bridge import OcrBridge

        engine = FakeEngine(error=RuntimeError("engine crashed"))

        assert OcrBridge(engine).extract_items(FakePage([raster(120, 120)])) == []

    def test_extraction_failure_yields_no_items(self):
        from hybrid_docx.utils.ocr_bridge import OcrBridge

        page = FakePage([], error=ValueError("broken image stream"))

        assert OcrBridge(FakeEngine()).extract_items(page) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
