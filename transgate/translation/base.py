"""
Base translation provider interface.
All provider backends must inherit from TranslationBackend.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Optional
from dataclasses import dataclass


@dataclass
class TranslationRequest:
    """Request for one upstream provider call."""
    texts: List[str]
    target_lang: str
    system_prompt: str
    user_prompt: str
    temperature: float = 0.0
    max_tokens: int = 2000
    kind: str = "batch"  # "batch" or "single"


@dataclass
class TranslationResponse:
    """Raw response from a provider; parsing happens in the gateway."""
    content: str
    backend: str
    model: str
    tokens_used: int = 0
    latency: float = 0.0
    metadata: Dict = None


class TranslationBackend(ABC):
    """Abstract base class for translation providers."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key
        self.model = model
        self.name = self.__class__.__name__

    @abstractmethod
    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        """
        Issue one provider call.

        Args:
            request: Prompts plus the texts being translated

        Returns:
            TranslationResponse carrying the raw model output

        Raises:
            ProviderError: on transport failure or non-success status
        """
        pass

    def is_available(self) -> bool:
        """Check if backend is configured with credentials."""
        return bool(self.api_key)

    def get_info(self) -> Dict:
        """Get backend information."""
        return {
            "name": self.name,
            "model": self.model,
            "available": self.is_available()
        }
