from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    source: str                # originating document, usually the file name
    page: Optional[int] = None  # 1-based, paginated formats only
    index: int = 0             # position within the page (or document)


class SearchStrategy(str, Enum):
    SEMANTIC = "semantic"
    HYBRID = "hybrid"


class SearchResult(BaseModel):
    chunk: Chunk
    similarity: float = Field(ge=0.0, le=1.0)
    original_order: int = 0
    strategy: SearchStrategy = SearchStrategy.SEMANTIC

    def format(self, preview_chars: int = 150) -> str:
        page = f" (Page {self.chunk.page})" if self.chunk.page is not None else ""
        return (
            f"Similarity: {self.similarity:.3f} | Source: {self.chunk.source}{page}\n"
            f"Content: {self.chunk.content[:preview_chars]}..."
        )


class IndexStats(BaseModel):
    total_chunks: int
    vocabulary_size: int
    total_documents: int
    chunk_sources: List[str]

    def __str__(self) -> str:
        return (
            "Index Stats:\n"
            f"  Total Chunks: {self.total_chunks}\n"
            f"  Vocabulary Size: {self.vocabulary_size}\n"
            f"  Total Documents: {self.total_documents}\n"
            f"  Sources: {', '.join(self.chunk_sources)}"
        )
