"""Translation provider implementations."""

from .openai_backend import OpenAIBackend

__all__ = [
    'OpenAIBackend'
]
