from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError
from .index.schema import SearchStrategy

logger = logging.getLogger(__name__)


class IngestConfig(BaseModel):
    chunk_size: int = Field(500, gt=0)
    event_log: Optional[str] = None  # JSON-lines file for parse errors


class RetrievalConfig(BaseModel):
    top_k: int = Field(5, ge=1)
    strategy: SearchStrategy = SearchStrategy.SEMANTIC
    similarity_threshold: float = Field(0.1, ge=0.0, le=1.0)


class LLMConfig(BaseModel):
    backend: str = "ollama"
    model: str = "llama3.1:8b"
    endpoint: Optional[str] = None
    keep_alive: Optional[str] = "30m"
    offline: bool = True
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class AppConfig(BaseModel):
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)


def load_config(path: str | Path | None) -> AppConfig:
    """Read a YAML config; a missing file yields the defaults."""
    if path is None or not Path(path).exists():
        logger.debug("No config at %s; using defaults", path)
        return AppConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping at the top level")
    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
