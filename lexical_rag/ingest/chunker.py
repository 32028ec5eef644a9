from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from ..errors import DocumentReadError
from ..index.schema import Chunk
from .extractors import extractor_for

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500
# A boundary is accepted within [cut - LOOKBACK, cut + LOOKAHEAD].
LOOKBACK = 100
LOOKAHEAD = 50


def _boundary(text: str, start: int, end: int, mark: str) -> int:
    """Position just after the first ``mark`` in the window around ``end``, or -1."""
    lo = max(start, end - LOOKBACK)
    pos = text.find(mark, lo, end + LOOKAHEAD + 1)
    return pos + 1 if pos != -1 else -1


def chunk_text(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """Split ``text`` into chunks of about ``chunk_size`` characters.

    Cuts prefer a sentence end ('.') and then a newline near the target
    position; with neither in range the cut is made at exactly
    ``chunk_size`` characters. Chunks are trimmed and empty ones dropped.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    chunks: List[str] = []
    start = 0
    n = len(text)
    while start < n:
        end = min(start + chunk_size, n)
        if end < n:
            cut = _boundary(text, start, end, ".")
            if cut == -1:
                cut = _boundary(text, start, end, "\n")
            if cut != -1:
                end = cut
        piece = text[start:end].strip()
        if piece:
            chunks.append(piece)
        start = end
    return chunks


def process_document(
    path: str | Path,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    source: Optional[str] = None,
) -> List[Chunk]:
    """Extract and chunk one file.

    ``source`` defaults to the file name. Raises DocumentReadError when the
    file is missing or cannot be parsed.
    """
    path = Path(path)
    source = source or path.name
    if not path.is_file():
        raise DocumentReadError(source, "file not found")

    extractor = extractor_for(path)
    logger.debug("Extracting %s with %s extractor", path, extractor.name)
    pages = extractor.extract(path)

    chunks: List[Chunk] = []
    for page in pages:
        if not page.text.strip():
            continue
        for i, piece in enumerate(chunk_text(page.text, chunk_size)):
            chunks.append(Chunk(content=piece, source=source, page=page.number, index=i))

    logger.info("Processed %s: %d pages, %d chunks", source, len(pages), len(chunks))
    return chunks


def process_bytes(
    data: bytes,
    filename: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> List[Chunk]:
    """Chunk an in-memory document; ``filename`` supplies the format and the source."""
    suffix = Path(filename).suffix
    with tempfile.TemporaryDirectory() as tmp:
        spool = Path(tmp) / f"document{suffix}"
        spool.write_bytes(data)
        return process_document(spool, chunk_size=chunk_size, source=Path(filename).name)
