"""OpenAI-compatible chat-completions provider."""

import json
import logging
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from ..config import PSLLMConfig
from ..llm_handler import LLMResponse, ToolCall
from ..request_builder import build_payload
from .base import LLMProvider, ProviderError

logger = logging.getLogger(__name__)

# Local servers accept any key, the SDK requires one
PLACEHOLDER_API_KEY = "not-needed"


class ChatCompletionsProvider(LLMProvider):
    """Provider for any endpoint speaking the OpenAI chat-completions API."""

    def __init__(self, config: PSLLMConfig):
        super().__init__(config)
        self.client = AsyncOpenAI(
            api_key=config.api_key or PLACEHOLDER_API_KEY,
            base_url=config.endpoint,
            timeout=config.request_timeout,
            max_retries=0,
        )

    async def generate_response(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> LLMResponse:
        """POST the messages and parse choices[0].message."""
        payload = build_payload(self.config, messages, tools)

        try:
            response = await self.client.chat.completions.create(**payload)
        except openai.RateLimitError as e:
            raise ProviderError("Rate limit exceeded. Please try again in a moment.") from e
        except openai.AuthenticationError as e:
            raise ProviderError(
                f"Authentication failed. Please check the API key for {self.config.endpoint}."
            ) from e
        except openai.APITimeoutError as e:
            raise ProviderError(
                f"Request timed out after {self.config.request_timeout} seconds."
            ) from e
        except openai.APIConnectionError as e:
            raise ProviderError(f"Cannot reach {self.config.endpoint}: {e}") from e
        except openai.APIError as e:
            raise ProviderError(f"API error: {e}") from e

        if not response.choices:
            raise ProviderError("The API returned no choices.")

        choice = response.choices[0]
        message = choice.message
        content = message.content or ""

        tool_calls = []
        for tool_call in message.tool_calls or []:
            raw_arguments = tool_call.function.arguments or "{}"
            try:
                arguments = json.loads(raw_arguments)
                if not isinstance(arguments, dict):
                    raise ValueError("arguments must be a JSON object")
                tool_calls.append(
                    ToolCall(
                        name=tool_call.function.name,
                        arguments=arguments,
                        call_id=tool_call.id,
                    )
                )
            except ValueError:
                logger.warning("Malformed tool call arguments: %s", raw_arguments)
                tool_calls.append(
                    ToolCall(
                        name=tool_call.function.name,
                        arguments={},
                        call_id=tool_call.id,
                        error=f"Malformed tool call arguments: {raw_arguments}",
                    )
                )

        usage = (
            {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }
            if response.usage
            else None
        )
        if usage:
            logger.debug("Token usage: %s", usage)

        return LLMResponse(
            content=content,
            tool_calls=tool_calls,
            model=getattr(response, "model", None) or self.get_model_name(),
            usage=usage,
            finish_reason=choice.finish_reason,
        )
