from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import docx
from pptx import Presentation
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..errors import DocumentReadError
from .clean import normalize_text, printable_runs

logger = logging.getLogger(__name__)


@dataclass
class Page:
    text: str
    number: Optional[int] = None  # 1-based; None for unpaginated formats


class Extractor(ABC):
    """Turns one file into text, split into pages where the format has them."""

    name: str = "base"

    @abstractmethod
    def extract(self, path: Path) -> List[Page]:
        ...


class PdfExtractor(Extractor):
    name = "pdf"

    def extract(self, path: Path) -> List[Page]:
        try:
            reader = PdfReader(str(path))
            pages = list(reader.pages)
        except (OSError, PyPdfError, ValueError) as e:
            raise DocumentReadError(path.name, f"invalid PDF ({e})") from e

        out: List[Page] = []
        for i, page in enumerate(pages, start=1):
            try:
                txt = page.extract_text() or ""
            except Exception as e:  # pypdf raises assorted errors on damaged content streams
                logger.warning("%s: text extraction failed on page %d: %s", path.name, i, e)
                txt = ""
            out.append(Page(text=normalize_text(txt, dehyphenate=True), number=i))
        return out


class DocxExtractor(Extractor):
    name = "docx"

    def extract(self, path: Path) -> List[Page]:
        try:
            document = docx.Document(str(path))
        except Exception as e:  # python-docx surfaces zip/xml errors without a common base
            raise DocumentReadError(path.name, f"invalid DOCX ({e})") from e

        parts = [p.text for p in document.paragraphs if p.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [c.text.strip() for c in row.cells if c.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))
        return [Page(text=normalize_text("\n".join(parts)))]


class PptxExtractor(Extractor):
    name = "pptx"

    def extract(self, path: Path) -> List[Page]:
        try:
            prs = Presentation(str(path))
        except Exception as e:
            raise DocumentReadError(path.name, f"invalid PPTX ({e})") from e

        slides: List[str] = []
        for slide in prs.slides:
            lines = [
                shape.text_frame.text
                for shape in slide.shapes
                if shape.has_text_frame and shape.text_frame.text.strip()
            ]
            if slide.has_notes_slide:
                notes = slide.notes_slide.notes_text_frame
                if notes is not None and notes.text.strip():
                    lines.append(notes.text)
            if lines:
                slides.append("\n".join(lines))
        # Slides are not treated as pages; the deck is one unpaginated text.
        return [Page(text=normalize_text("\n\n".join(slides)))]


class TextExtractor(Extractor):
    name = "text"

    def extract(self, path: Path) -> List[Page]:
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise DocumentReadError(path.name, str(e)) from e
        return [Page(text=normalize_text(text))]


class FallbackExtractor(Extractor):
    """Plain-text extraction for anything without a dedicated extractor."""

    name = "fallback"

    def extract(self, path: Path) -> List[Page]:
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DocumentReadError(path.name, str(e)) from e
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            text = printable_runs(data)
        return [Page(text=normalize_text(text))]


EXTRACTORS: Dict[str, Extractor] = {
    ".pdf": PdfExtractor(),
    ".docx": DocxExtractor(),
    ".pptx": PptxExtractor(),
    ".txt": TextExtractor(),
}
FALLBACK = FallbackExtractor()


def extractor_for(path: str | Path) -> Extractor:
    """Pick an extractor from the file extension; legacy .ppt and unknown types fall back."""
    return EXTRACTORS.get(Path(path).suffix.lower(), FALLBACK)
