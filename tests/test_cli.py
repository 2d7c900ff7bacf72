"""
Tests for configuration and the command-line interface.
"""

import json

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestConfig:
    """Test environment overrides in get_config()."""

    def test_defaults(self, monkeypatch):
        from hybrid_docx.config import get_config

        for name in ("HYBRID_DOCX_DEBUG", "HYBRID_DOCX_DISABLE_OCR", "HYBRID_DOCX_OCR_LANG",
                     "HYBRID_DOCX_MAX_WORKERS"):
            monkeypatch.delenv(name, raising=False)

        config = get_config()
        assert config.ocr.enabled is True
        assert config.ocr.languages == "ara+eng+hun"
        assert config.layout.table_gap_threshold == 60.0
        assert config.service.max_workers == 2
        assert config.debug_mode is False

    def test_environment_overrides(self, monkeypatch, tmp_path):
        from hybrid_docx.config import get_config

        monkeypatch.setenv("HYBRID_DOCX_DEBUG", "true")
        monkeypatch.setenv("HYBRID_DOCX_DISABLE_OCR", "TRUE")
        monkeypatch.setenv("HYBRID_DOCX_OCR_LANG", "eng")
        monkeypatch.setenv("HYBRID_DOCX_OUTPUT_DIR", str(tmp_path / "out"))
        monkeypatch.setenv("HYBRID_DOCX_MAX_WORKERS", "4")

        config = get_config()
        assert config.debug_mode is True
        assert config.ocr.enabled is False
        assert config.ocr.languages == "eng"
        assert config.service.output_dir == tmp_path / "out"
        assert config.service.max_workers == 4

    def test_invalid_worker_count_ignored(self, monkeypatch):
        from hybrid_docx.config import get_config

        monkeypatch.setenv("HYBRID_DOCX_MAX_WORKERS", "many")
        assert get_config().service.max_workers == 2

    def test_configs_are_independent(self, monkeypatch):
        from hybrid_docx.config import get_config

        monkeypatch.delenv("HYBRID_DOCX_DISABLE_OCR", raising=False)
        first = get_config()
        first.ocr.enabled = False
        assert get_config().ocr.enabled is True


class TestArgParser:
    """Test CLI argument parsing."""

    def test_required_arguments(self):
        from hybrid_docx.cli import setup_argparser

        with pytest.raises(SystemExit):
            setup_argparser().parse_args([])

    def test_options(self):
        from hybrid_docx.cli import setup_argparser

        args = setup_argparser().parse_args(
            ["-i", "in.pdf", "-o", "out", "--json", "--lang", "eng", "--no-ocr", "-q"]
        )

        assert args.input == "in.pdf"
        assert args.output == "out"
        assert args.json is True
        assert args.lang == "eng"
        assert args.no_ocr is True
        assert args.quiet is True


class TestRunPipeline:
    """Test the CLI conversion flow."""

    def test_converts_pdf(self, tmp_path, monkeypatch):
        fitz = pytest.importorskip("fitz")
        pytest.importorskip("docx")
        from hybrid_docx.cli import run_pipeline, setup_argparser

        monkeypatch.delenv("HYBRID_DOCX_DEBUG", raising=False)
        pdf = tmp_path / "letter.pdf"
        doc = fitz.open()
        doc.new_page(width=600, height=800).insert_text((50, 300), "Dear reader", fontsize=12)
        doc.save(str(pdf))
        doc.close()

        out = tmp_path / "out"
        args = setup_argparser().parse_args(["-i", str(pdf), "-o", str(out), "--no-ocr", "--json", "-q"])

        assert run_pipeline(args) == 0
        assert (out / "letter.docx").exists()

        data = json.loads((out / "letter.json").read_text(encoding="utf-8"))
        assert data["pages"][0]["elements"][0]["text"] == "Dear reader"

    def test_rejects_non_pdf(self, tmp_path):
        from hybrid_docx.cli import run_pipeline, setup_argparser

        args = setup_argparser().parse_args(["-i", str(tmp_path / "a.txt"), "-o", str(tmp_path), "-q"])
        assert run_pipeline(args) == 1

    def test_missing_input(self, tmp_path, monkeypatch):
        from hybrid_docx.cli import run_pipeline, setup_argparser

        monkeypatch.delenv("HYBRID_DOCX_DEBUG", raising=False)
        args = setup_argparser().parse_args(
            ["-i", str(tmp_path / "missing.pdf"), "-o", str(tmp_path), "--no-ocr", "-q"]
        )
        assert run_pipeline(args) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
