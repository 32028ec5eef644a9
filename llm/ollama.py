# llm/ollama.py
from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, Optional

import requests

from lexical_rag.errors import BackendError

from .base import LLM

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA = "http://localhost:11434"


def _timeouts() -> tuple[float, float]:
    """Return (connect_timeout, read_timeout) in seconds; env-overridable."""
    # Defaults: 10s connect, 600s read to handle long CPU generations
    ct = float(os.getenv("OLLAMA_CONNECT_TIMEOUT", "10"))
    rt = float(os.getenv("OLLAMA_READ_TIMEOUT", "600"))
    return (ct, rt)


def normalize_endpoint(ep: Optional[str]) -> str:
    """argument > OLLAMA_HOST > default; ensure scheme; strip trailing slash."""
    cand = (ep or os.getenv("OLLAMA_HOST") or DEFAULT_OLLAMA).strip()
    if not re.match(r"^https?://", cand):
        cand = "http://" + cand
    return cand.rstrip("/")


class OllamaLLM(LLM):
    """
    Minimal Ollama client behind the LLM interface.

        llm = OllamaLLM(model="llama3.1:8b", endpoint="http://localhost:11434", keep_alive="30m")
        text = llm.generate(prompt, system="Answer in English.")
    """

    def __init__(
        self,
        model: str,
        endpoint: Optional[str] = None,
        keep_alive: Optional[str] = None,
        **_: Any,
    ) -> None:
        self.model = model
        self.base = normalize_endpoint(endpoint)
        self.keep_alive = keep_alive

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Call /api/generate once (non-streaming) and return the 'response' text."""
        url = f"{self.base}/api/generate"
        payload: Dict[str, Any] = {"model": self.model, "prompt": prompt, "stream": False}
        if system:
            payload["system"] = system
        if self.keep_alive:
            payload["keep_alive"] = self.keep_alive

        options: Dict[str, Any] = {}
        if temperature is not None:
            options["temperature"] = float(temperature)
        if max_tokens is not None:
            # Ollama uses num_predict for token limit
            options["num_predict"] = int(max_tokens)
        if options:
            payload["options"] = options

        logger.debug("POST %s model=%s prompt_chars=%d", url, self.model, len(prompt))
        try:
            r = requests.post(url, json=payload, timeout=_timeouts())
            r.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise BackendError(f"Ollama returned HTTP {status} for {url}", status_code=status) from e
        except requests.RequestException as e:
            raise BackendError(f"Cannot reach Ollama at {self.base} ({e.__class__.__name__})") from e
        try:
            data = r.json()
        except ValueError as e:
            raise BackendError(f"Ollama returned a non-JSON body from {url}") from e

        if not isinstance(data, dict):
            raise BackendError(f"Unexpected response shape from {url}")
        return data.get("response", "")
