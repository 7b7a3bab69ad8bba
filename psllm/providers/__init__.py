"""Chat-completions API client implementations for PSLLM."""

from .base import LLMProvider, ProviderError
from .chat_completions import ChatCompletionsProvider

__all__ = [
    "LLMProvider",
    "ProviderError",
    "ChatCompletionsProvider",
]
