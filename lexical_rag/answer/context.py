from __future__ import annotations

from typing import List, Sequence

from ..index.schema import SearchResult

GROUNDED_HEADER = "Here are the relevant materials:"
UNGROUNDED_HEADER = (
    "Note: No relevant materials found. Please answer based on general knowledge."
)
INSTRUCTION = (
    "Please answer the user's question in English. If you used materials, please cite "
    "the sources. If based on general knowledge, please indicate so."
)


def build_context(results: Sequence[SearchResult]) -> str:
    blocks: List[str] = []
    for r in results:
        page = f", Page: {r.chunk.page}" if r.chunk.page is not None else ""
        blocks.append(f"Source: {r.chunk.source}{page}\nContent: {r.chunk.content}")
    return "\n\n".join(blocks)


def build_prompt(results: Sequence[SearchResult]) -> str:
    """Context prompt for the generation backend; the question travels separately."""
    if results:
        header = GROUNDED_HEADER
        materials = "=== Relevant Materials ===\n" + build_context(results)
    else:
        header = UNGROUNDED_HEADER
        materials = "=== Materials ===\nNo relevant materials found"
    return f"{header}\n\n{materials}\n\n{INSTRUCTION}"


def cite_sources(results: Sequence[SearchResult]) -> List[str]:
    """Distinct 'source (Page n)' labels in ranking order."""
    seen: List[str] = []
    for r in results:
        label = r.chunk.source + (f" (Page {r.chunk.page})" if r.chunk.page is not None else "")
        if label not in seen:
            seen.append(label)
    return seen
