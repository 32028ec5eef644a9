from typing import Optional

from lexical_rag.errors import BackendError

from .base import LLM
from .ollama import OllamaLLM, normalize_endpoint


def is_local(endpoint: str) -> bool:
    return endpoint.startswith("http://localhost") or endpoint.startswith("http://127.0.0.1")


def make_llm(
    backend: str = "ollama",
    model: str = "llama3.1:8b",
    endpoint: Optional[str] = None,
    offline: bool = True,
    keep_alive: Optional[str] = None,
) -> LLM:
    backend = (backend or "ollama").lower()
    endpoint = normalize_endpoint(endpoint)

    # Offline guard: only allow localhost endpoints
    if offline and not is_local(endpoint):
        raise BackendError(f"Offline mode: refusing non-local endpoint: {endpoint}")

    if backend == "ollama":
        return OllamaLLM(model=model, endpoint=endpoint, keep_alive=keep_alive)

    raise BackendError(f"Unsupported backend: {backend}")
