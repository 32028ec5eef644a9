from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from pydantic import BaseModel

from llm.base import LLM
from llm.factory import make_llm

from .answer.context import build_prompt, cite_sources
from .config import AppConfig
from .index.schema import SearchResult, SearchStrategy
from .ingest.feed import IngestionFeed
from .sessions import SessionRegistry
from .utils.log import EventLog

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful teaching assistant. Answer accurately and concisely."


class Answer(BaseModel):
    question: str
    text: str
    results: List[SearchResult]
    grounded: bool
    sources: List[str]
    timers_ms: Dict[str, int]


class RagAssistant:
    """Retrieval -> prompt -> generation over one registry of session indexes.

    Results at or below ``similarity_threshold`` are dropped; when nothing is
    left the backend is asked to answer from general knowledge.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        llm: LLM,
        top_k: int = 5,
        strategy: SearchStrategy = SearchStrategy.SEMANTIC,
        similarity_threshold: float = 0.1,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> None:
        self.registry = registry
        self.llm = llm
        self.top_k = top_k
        self.strategy = SearchStrategy(strategy)
        self.similarity_threshold = similarity_threshold
        self.temperature = temperature
        self.max_tokens = max_tokens

    def retrieve(self, session_id: str, question: str) -> List[SearchResult]:
        index = self.registry.get_or_create(session_id)
        results = index.search(question, top_k=self.top_k, strategy=self.strategy)
        return [r for r in results if r.similarity > self.similarity_threshold]

    def ask(self, session_id: str, question: str) -> Answer:
        timers: Dict[str, int] = {}
        t0 = time.perf_counter()
        results = self.retrieve(session_id, question)
        timers["retrieve_ms"] = int((time.perf_counter() - t0) * 1000)

        prompt = build_prompt(results) + f"\n\nQuestion: {question}"
        if not results:
            logger.info("Session %s: no material above %.2f; answering ungrounded",
                        session_id, self.similarity_threshold)

        t1 = time.perf_counter()
        text = self.llm.generate(
            prompt,
            system=SYSTEM_PROMPT,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        timers["generate_ms"] = int((time.perf_counter() - t1) * 1000)
        timers["total_ms"] = int((time.perf_counter() - t0) * 1000)

        return Answer(
            question=question,
            text=text.strip(),
            results=results,
            grounded=bool(results),
            sources=cite_sources(results),
            timers_ms=timers,
        )


def build_feed(cfg: AppConfig, registry: SessionRegistry) -> IngestionFeed:
    event_log = EventLog(cfg.ingest.event_log) if cfg.ingest.event_log else None
    return IngestionFeed(registry, chunk_size=cfg.ingest.chunk_size, event_log=event_log)


def build_assistant(
    cfg: AppConfig,
    registry: SessionRegistry,
    llm: Optional[LLM] = None,
) -> RagAssistant:
    if llm is None:
        llm = make_llm(
            backend=cfg.llm.backend,
            model=cfg.llm.model,
            endpoint=cfg.llm.endpoint,
            offline=cfg.llm.offline,
            keep_alive=cfg.llm.keep_alive,
        )
    return RagAssistant(
        registry,
        llm,
        top_k=cfg.retrieval.top_k,
        strategy=cfg.retrieval.strategy,
        similarity_threshold=cfg.retrieval.similarity_threshold,
        temperature=cfg.llm.temperature,
        max_tokens=cfg.llm.max_tokens,
    )
