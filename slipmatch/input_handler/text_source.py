"""
Page Text Source Module.

Page text providers consumed by the document analyzer. A source answers
two questions: how many pages the document has, and what text a given
page carries (in approximate reading order, one text line per line).

Implementations:
    - InMemoryTextSource: pre-extracted page strings
    - PDFTextSource: digital PDFs read with pdfplumber

Author: ML Engineering Team
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pdfplumber

from config import get_config
from slipmatch.utils.exceptions import SourceReadError
from slipmatch.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_LINE_TOLERANCE = 5.0


def words_to_text(words: Sequence[Dict[str, Any]], line_tolerance: float = DEFAULT_LINE_TOLERANCE) -> str:
    """
    Rebuild reading-order text from positioned words.

    A word whose ``top`` lies within ``line_tolerance`` points of the
    previous word joins that word's line; lines run top to bottom and
    words left to right.

    Args:
        words: Word dicts with ``text``, ``x0`` and ``top`` keys (as
            returned by pdfplumber's ``extract_words``).
        line_tolerance: Maximum baseline difference within one line.

    Returns:
        Text with one line per visual line.
    """
    visible = [w for w in words if str(w.get('text', '')).strip()]
    visible.sort(key=lambda w: (float(w['top']), float(w['x0'])))

    lines: List[List[Dict[str, Any]]] = []
    previous_top = None
    for word in visible:
        top = float(word['top'])
        if previous_top is None or abs(top - previous_top) > line_tolerance:
            lines.append([])
        lines[-1].append(word)
        previous_top = top

    return '\n'.join(
        ' '.join(str(w['text']) for w in sorted(line, key=lambda w: float(w['x0'])))
        for line in lines
    ).strip()


class PageTextSource(ABC):
    """
    Interface for page text providers.

    Pages are numbered from 1. Sources may hold resources; use them as
    context managers or call ``close``.
    """

    name: str = "<source>"

    @abstractmethod
    def get_page_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def get_page_text(self, page_number: int) -> str:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> 'PageTextSource':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_page_number(self, page_number: int) -> None:
        count = self.get_page_count()
        if not 1 <= page_number <= count:
            raise SourceReadError(
                self.name, f"page {page_number} out of range 1-{count}", page_number
            )


class InMemoryTextSource(PageTextSource):
    """
    Page texts already held in memory.

    Example:
        >>> source = InMemoryTextSource(["Packing slip ...", "Royal Mail ..."])
        >>> source.get_page_count()
        2
    """

    def __init__(self, texts: Sequence[str], name: str = "<memory>") -> None:
        self._texts = list(texts)
        self.name = name

    def get_page_count(self) -> int:
        return len(self._texts)

    def get_page_text(self, page_number: int) -> str:
        self._check_page_number(page_number)
        return self._texts[page_number - 1] or ""


class PDFTextSource(PageTextSource):
    """
    Text from a digital PDF via pdfplumber.

    Attributes:
        filepath: Path of the PDF file.
        line_tolerance: Baseline tolerance used to rebuild text lines.

    Example:
        >>> with PDFTextSource("orders.pdf") as source:
        ...     text = source.get_page_text(1)
    """

    def __init__(self, filepath: Union[str, Path], line_tolerance: Optional[float] = None) -> None:
        """
        Open the PDF.

        Raises:
            SourceReadError: If the file is missing or is not a readable PDF.
        """
        self.filepath = Path(filepath)
        self.name = str(self.filepath)
        self.line_tolerance = float(
            line_tolerance if line_tolerance is not None
            else get_config("input.pdf.line_tolerance", DEFAULT_LINE_TOLERANCE)
        )

        if not self.filepath.is_file():
            raise SourceReadError(self.name, "file not found")

        self._pdf = None
        try:
            self._pdf = pdfplumber.open(self.filepath)
            self._page_count = len(self._pdf.pages)
        except Exception as e:
            logger.error(f"Could not open PDF {self.filepath.name}: {e}")
            if self._pdf is not None:
                self._pdf.close()
            raise SourceReadError(self.name, str(e)) from e

        logger.info(f"Opened PDF: {self.filepath.name} ({self._page_count} pages)")

    def get_page_count(self) -> int:
        return self._page_count

    def get_page_text(self, page_number: int) -> str:
        self._check_page_number(page_number)
        try:
            words = self._pdf.pages[page_number - 1].extract_words()
        except Exception as e:
            logger.error(f"Text extraction failed on page {page_number}: {e}")
            raise SourceReadError(self.name, str(e), page_number) from e
        return words_to_text(words, self.line_tolerance)

    def close(self) -> None:
        self._pdf.close()
