"""PDF page tokenizer.

Turns a rulebook page into the flat token list the grammars read: one
``StringToken`` per text span (with its font name) and one ``ImageToken``
per embedded image, in content-stream order. Uses PyMuPDF.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .tokens import ImageToken, StringToken, Token, describe_token

logger = logging.getLogger(__name__)


class PDFTokenizer:
    """Tokenizes pages of one PDF document.

    Use as a context manager; pages are borrowed with ``page()``, which
    releases the page's decoded assets when the block exits, whatever the
    outcome.
    """

    def __init__(self, pdf_path: str | Path):
        self.pdf_path = Path(pdf_path)
        self._doc = None
        self._fitz = None

    def open(self) -> "PDFTokenizer":
        try:
            import fitz  # PyMuPDF
        except ImportError:
            raise ImportError(
                "pymupdf is required for PDF tokenization. "
                "Install with: pip install pymupdf"
            )

        if not self.pdf_path.exists():
            raise FileNotFoundError(f"PDF not found: {self.pdf_path}")

        self._fitz = fitz
        self._doc = fitz.open(str(self.pdf_path))
        logger.info("Opened %s (%d pages)", self.pdf_path.name, len(self._doc))
        return self

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def __enter__(self) -> "PDFTokenizer":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def page_count(self) -> int:
        return len(self._require_doc())

    @contextmanager
    def page(self, page_num: int) -> Iterator[list[Token]]:
        """Yield the tokens of a 1-based page, then release the page."""
        doc = self._require_doc()
        if not 1 <= page_num <= len(doc):
            raise ValueError(f"Page {page_num} outside 1..{len(doc)}")
        page = doc[page_num - 1]
        try:
            yield self.tokenize(page)
        finally:
            del page
            # Drop MuPDF's cached decoded images and fonts for this page.
            self._fitz.TOOLS.store_shrink(100)
            logger.debug("Released page %d", page_num)

    def tokenize(self, page) -> list[Token]:
        """Extract a page's spans and images as tokens."""
        tokens: list[Token] = []
        data = page.get_text("dict", sort=False)
        for block in data.get("blocks", []):
            if block.get("type") == 1:
                tokens.append(ImageToken(
                    payload=block.get("image", b""),
                    position=tuple(block.get("bbox", (0.0, 0.0, 0.0, 0.0))),
                    ext=block.get("ext", "png"),
                ))
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "").strip()
                    if text:
                        tokens.append(StringToken(text=text, font=span.get("font", "")))
        return tokens

    def _require_doc(self):
        if self._doc is None:
            raise RuntimeError("PDFTokenizer is not open")
        return self._doc


def dump_tokens(tokens: list[Token], start: int = 0, limit: Optional[int] = None) -> list[str]:
    """One printable line per token, for grammar debugging."""
    end = len(tokens) if limit is None else min(len(tokens), start + limit)
    return [f"{i:4d}  {describe_token(tokens[i])}" for i in range(start, end)]
