from abc import ABC, abstractmethod
from typing import Optional


class LLM(ABC):
    @abstractmethod
    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Return the model's completion for ``prompt`` as plain text."""
        ...

    def __call__(self, prompt: str) -> str:
        return self.generate(prompt)
