"""Tests for the PDF page tokenizer."""

import pytest
from unittest.mock import MagicMock

from fabula_import.ingest.tokenize import PDFTokenizer, dump_tokens
from fabula_import.ingest.tokens import ImageToken, StringToken


def _page_dict():
    return {"blocks": [
        {"type": 1, "image": b"\x89PNG", "bbox": (10.0, 20.0, 110.0, 120.0), "ext": "png"},
        {"type": 0, "lines": [
            {"spans": [
                {"text": "Bronze Sword", "font": "ABCDEF+PTSans-NarrowBold"},
                {"text": "   ", "font": "ABCDEF+PTSans-Narrow"},
            ]},
            {"spans": [{"text": " 100 z ", "font": "ABCDEF+PTSans-Narrow"}]},
        ]},
    ]}


def _open_tokenizer(page_count=3):
    """A tokenizer wired to mock fitz objects, bypassing open()."""
    tokenizer = PDFTokenizer("rulebook.pdf")
    page = MagicMock()
    page.get_text.return_value = _page_dict()
    doc = MagicMock()
    doc.__len__ = MagicMock(return_value=page_count)
    doc.__getitem__ = MagicMock(return_value=page)
    tokenizer._doc = doc
    tokenizer._fitz = MagicMock()
    return tokenizer, doc, page


class TestPDFTokenizer:
    def test_missing_pdf_raises(self, tmp_path):
        pytest.importorskip("fitz", reason="pymupdf not installed")
        with pytest.raises(FileNotFoundError):
            PDFTokenizer(tmp_path / "nonexistent.pdf").open()

    def test_not_open_raises(self):
        with pytest.raises(RuntimeError):
            PDFTokenizer("rulebook.pdf").page_count

    def test_tokenize_spans_and_images(self):
        tokenizer, _, page = _open_tokenizer()
        tokens = tokenizer.tokenize(page)
        assert tokens == [
            ImageToken(payload=b"\x89PNG", position=(10.0, 20.0, 110.0, 120.0), ext="png"),
            StringToken("Bronze Sword", "ABCDEF+PTSans-NarrowBold"),
            StringToken("100 z", "ABCDEF+PTSans-Narrow"),
        ]
        page.get_text.assert_called_once_with("dict", sort=False)

    def test_page_is_one_based(self):
        tokenizer, doc, _ = _open_tokenizer()
        with tokenizer.page(2):
            pass
        doc.__getitem__.assert_called_once_with(1)

    def test_page_released_after_use(self):
        tokenizer, _, _ = _open_tokenizer()
        with tokenizer.page(1) as tokens:
            assert len(tokens) == 3
            tokenizer._fitz.TOOLS.store_shrink.assert_not_called()
        tokenizer._fitz.TOOLS.store_shrink.assert_called_once_with(100)

    def test_page_released_on_exception(self):
        tokenizer, _, _ = _open_tokenizer()
        with pytest.raises(KeyError):
            with tokenizer.page(1):
                raise KeyError("grammar blew up")
        tokenizer._fitz.TOOLS.store_shrink.assert_called_once_with(100)

    def test_page_out_of_range(self):
        tokenizer, _, _ = _open_tokenizer(page_count=3)
        with pytest.raises(ValueError):
            with tokenizer.page(4):
                pass
        with pytest.raises(ValueError):
            with tokenizer.page(0):
                pass
        tokenizer._fitz.TOOLS.store_shrink.assert_not_called()

    def test_close(self):
        tokenizer, doc, _ = _open_tokenizer()
        tokenizer.close()
        doc.close.assert_called_once()
        with pytest.raises(RuntimeError):
            tokenizer.page_count


class TestDumpTokens:
    def test_numbered_lines(self):
        tokens = [StringToken("COST", "Antonio-Bold"), StringToken("DEF", "Antonio-Bold")]
        assert dump_tokens(tokens) == [
            '   0  <Text str="COST" font="Antonio-Bold">',
            '   1  <Text str="DEF" font="Antonio-Bold">',
        ]

    def test_window(self):
        tokens = [StringToken(str(i), "x") for i in range(10)]
        lines = dump_tokens(tokens, start=4, limit=2)
        assert len(lines) == 2
        assert lines[0].startswith("   4")
