from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Sequence, Tuple

from .schema import Chunk, IndexStats, SearchResult, SearchStrategy

logger = logging.getLogger(__name__)

# Tokens of this length or shorter are dropped.
MIN_TERM_LENGTH = 2
NORM_EPSILON = 1e-10
SEMANTIC_WEIGHT = 0.7
KEYWORD_WEIGHT = 0.3

STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "have", "has", "had", "do", "does", "did",
        "this", "that", "these", "those", "it", "its", "they", "them", "their",
    }
)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def tokenize(text: str) -> List[str]:
    """Lowercase, split on whitespace, strip non-alphanumerics, drop short and stop words."""
    terms: List[str] = []
    for raw in (text or "").lower().split():
        tok = _NON_ALNUM.sub("", raw)
        if len(tok) <= MIN_TERM_LENGTH or tok in STOP_WORDS:
            continue
        terms.append(tok)
    return terms


def term_frequencies(terms: Sequence[str]) -> Dict[str, float]:
    if not terms:
        return {}
    counts: Dict[str, float] = {}
    for t in terms:
        counts[t] = counts.get(t, 0.0) + 1.0
    total = float(len(terms))
    return {t: c / total for t, c in counts.items()}


def _clamp(x: float) -> float:
    return min(1.0, max(0.0, x))


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Cosine of two dense vectors, clamped to [0, 1].

    Returns 0.0 for empty vectors, vectors of different lengths, or a norm
    below NORM_EPSILON.
    """
    if not vec1 or not vec2 or len(vec1) != len(vec2):
        return 0.0
    dot = norm1 = norm2 = 0.0
    for a, b in zip(vec1, vec2):
        dot += a * b
        norm1 += a * a
        norm2 += b * b
    norm1 = math.sqrt(norm1)
    norm2 = math.sqrt(norm2)
    if norm1 < NORM_EPSILON or norm2 < NORM_EPSILON:
        return 0.0
    return _clamp(dot / (norm1 * norm2))


def sparse_cosine(vec1: Mapping[str, float], vec2: Mapping[str, float]) -> float:
    """Cosine over the union of keys of two sparse term->weight maps, clamped to [0, 1]."""
    if not vec1 or not vec2:
        return 0.0
    norm1 = math.sqrt(sum(w * w for w in vec1.values()))
    norm2 = math.sqrt(sum(w * w for w in vec2.values()))
    if norm1 < NORM_EPSILON or norm2 < NORM_EPSILON:
        return 0.0
    small, large = (vec1, vec2) if len(vec1) <= len(vec2) else (vec2, vec1)
    dot = sum(w * large.get(t, 0.0) for t, w in small.items())
    return _clamp(dot / (norm1 * norm2))


def keyword_overlap(query_terms: FrozenSet[str], chunk_terms: FrozenSet[str]) -> float:
    """Fraction of distinct query terms that also occur in the chunk."""
    if not query_terms or not chunk_terms:
        return 0.0
    return len(query_terms & chunk_terms) / len(query_terms)


@dataclass
class _Entry:
    chunk: Chunk
    tf: Dict[str, float]
    terms: FrozenSet[str]
    weights: Dict[str, float] = field(default_factory=dict)


class TfidfIndex:
    """In-memory TF-IDF index over document chunks.

    Each stored chunk keeps its term frequencies and a sparse tf*idf weight
    map. Weights are recomputed for every chunk whenever the corpus
    statistics change, so stored vectors always agree with the current
    vocabulary and IDF values.

    Not thread-safe: callers serialize mutation and search on one instance.
    """

    def __init__(self) -> None:
        self._entries: List[_Entry] = []
        # term -> column in the dense view; insertion order is enumeration order
        self._vocabulary: Dict[str, int] = {}
        self._document_frequency: Dict[str, int] = {}
        self._total_documents = 0
        self._stale = False

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------
    def add_chunks(self, chunks: Iterable[Chunk]) -> None:
        new_chunks = list(chunks)
        if not new_chunks:
            return

        logger.info("Adding %d chunks to index", len(new_chunks))
        for chunk in new_chunks:
            terms = tokenize(chunk.content)
            distinct = frozenset(terms)
            for t in terms:
                if t not in self._vocabulary:
                    self._vocabulary[t] = len(self._vocabulary)
            for t in distinct:
                self._document_frequency[t] = self._document_frequency.get(t, 0) + 1
            self._entries.append(_Entry(chunk=chunk, tf=term_frequencies(terms), terms=distinct))

        self._total_documents += len(new_chunks)
        self._stale = True
        self._refresh()
        logger.info(
            "Index now contains %d chunks, vocabulary size: %d",
            len(self._entries),
            len(self._vocabulary),
        )

    def remove_chunks_by_source(self, source: str) -> int:
        kept = [e for e in self._entries if e.chunk.source != source]
        removed = len(self._entries) - len(kept)
        if not removed:
            return 0
        self._entries = kept
        self._recalculate_document_frequency()
        logger.info("Removed %d chunks from source %r", removed, source)
        return removed

    def clear(self) -> None:
        self._entries = []
        self._vocabulary = {}
        self._document_frequency = {}
        self._total_documents = 0
        self._stale = False
        logger.info("Index cleared")

    def _recalculate_document_frequency(self) -> None:
        # Rebuilt from scratch; the vocabulary keeps terms whose df drops to 0.
        df: Dict[str, int] = {}
        for e in self._entries:
            for t in e.terms:
                df[t] = df.get(t, 0) + 1
        self._document_frequency = df
        self._total_documents = len(self._entries)
        self._stale = True

    # ------------------------------------------------------------------
    # weighting
    # ------------------------------------------------------------------
    def idf(self, term: str) -> float:
        df = self._document_frequency.get(term, 0)
        return math.log((self._total_documents + 1.0) / (df + 1.0)) + 1.0

    def _weigh(self, tf: Mapping[str, float]) -> Dict[str, float]:
        return {t: f * self.idf(t) for t, f in tf.items() if t in self._vocabulary}

    def _refresh(self) -> None:
        if not self._stale:
            return
        for e in self._entries:
            e.weights = self._weigh(e.tf)
        self._stale = False

    def vectorize(self, text: str) -> Dict[str, float]:
        """Sparse tf*idf vector of ``text`` against the current statistics."""
        return self._weigh(term_frequencies(tokenize(text)))

    def dense_vector(self, text: str) -> List[float]:
        """Dense tf*idf vector of ``text``, one entry per vocabulary term."""
        sparse = self.vectorize(text)
        vec = [0.0] * len(self._vocabulary)
        for t, w in sparse.items():
            vec[self._vocabulary[t]] = w
        return vec

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def search(
        self,
        query: str,
        top_k: int = 5,
        strategy: SearchStrategy = SearchStrategy.SEMANTIC,
    ) -> List[SearchResult]:
        if not self._entries or top_k <= 0:
            return []
        strategy = SearchStrategy(strategy)
        self._refresh()

        logger.debug("Searching for %r over %d chunks", query, len(self._entries))
        query_terms = tokenize(query)
        query_vec = self._weigh(term_frequencies(query_terms))
        query_set = frozenset(query_terms)

        scored: List[Tuple[float, int]] = []
        for order, e in enumerate(self._entries):
            sim = sparse_cosine(query_vec, e.weights)
            if strategy is SearchStrategy.HYBRID:
                sim = SEMANTIC_WEIGHT * sim + KEYWORD_WEIGHT * keyword_overlap(query_set, e.terms)
            scored.append((_clamp(sim), order))

        # Highest similarity first; on ties the most recently added chunk wins.
        scored.sort(reverse=True)
        results = [
            SearchResult(
                chunk=self._entries[order].chunk,
                similarity=sim,
                original_order=order,
                strategy=strategy,
            )
            for sim, order in scored[:top_k]
        ]
        if results:
            logger.debug("Search completed. Top result similarity: %.4f", results[0].similarity)
        return results

    def find_similar(self, content: str, top_k: int = 3) -> List[SearchResult]:
        return self.search(content, top_k=top_k, strategy=SearchStrategy.SEMANTIC)

    def get_chunks_by_source(self, source: str) -> List[Chunk]:
        return [e.chunk for e in self._entries if e.chunk.source == source]

    def get_stats(self) -> IndexStats:
        sources = list(dict.fromkeys(e.chunk.source for e in self._entries))
        return IndexStats(
            total_chunks=len(self._entries),
            vocabulary_size=len(self._vocabulary),
            total_documents=self._total_documents,
            chunk_sources=sources,
        )

    @property
    def chunks(self) -> Tuple[Chunk, ...]:
        return tuple(e.chunk for e in self._entries)

    @property
    def vocabulary(self) -> Tuple[str, ...]:
        return tuple(self._vocabulary)

    def document_frequency(self, term: str) -> int:
        return self._document_frequency.get(term, 0)

    @property
    def total_documents(self) -> int:
        return self._total_documents

    def __len__(self) -> int:
        return len(self._entries)
