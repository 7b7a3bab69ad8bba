"""Base LLM provider interface and common functionality."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..config import PSLLMConfig, PSLLMError
from ..llm_handler import LLMResponse


class ProviderError(PSLLMError):
    """The chat API could not produce a response."""


class LLMProvider(ABC):
    """Abstract base class for chat API providers."""

    def __init__(self, config: PSLLMConfig):
        self.config = config

    @abstractmethod
    async def generate_response(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> LLMResponse:
        """Generate a response from the chat API.

        Args:
            messages: List of conversation messages in OpenAI format
            tools: Optional list of available tools for the LLM to call

        Returns:
            LLMResponse object containing the response and any tool calls

        Raises:
            ProviderError: when the request fails
        """
        pass

    def get_model_name(self) -> str:
        """Get the current model name being used."""
        return self.config.model
