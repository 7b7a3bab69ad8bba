"""Chat request assembly: system prompts, message arrays, tool declarations."""

import os
import platform
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import PSLLMConfig

EXECUTE_TOOL_NAME = "execute_command"


class ResponseMode(str, Enum):
    """What the model is asked to return."""

    COMMAND = "command"
    CHAT = "chat"


def _shell_name(config: PSLLMConfig) -> str:
    return os.path.basename(config.shell) or config.shell


def build_system_prompt(
    mode: ResponseMode, config: PSLLMConfig, tools: Optional[bool] = None
) -> str:
    """Get the system prompt for the requested response mode."""
    if tools is None:
        tools = config.tools_enabled
    shell = _shell_name(config)
    system = platform.system() or "unknown"

    tool_hint = ""
    if tools:
        tool_hint = (
            f"\nYou may call the {EXECUTE_TOOL_NAME} tool to run a command and inspect "
            "its output. The user confirms every command before it runs."
        )

    if mode == ResponseMode.COMMAND:
        return f"""You are a command-line assistant for the {shell} shell on {system}.

The user gives you either a natural-language description of a task or a partial command.
- For a description, write the command that performs the task.
- For a partial command, complete it.

Reply with up to {config.command_candidates} alternative commands, best first, one per line.
Output commands only: no explanations, no numbering, no Markdown fences.
A command that needs several steps must still fit on a single line.{tool_hint}"""

    return f"""You are a concise terminal assistant for the {shell} shell on {system}.
Answer questions about commands, scripting and system administration.
Prefer short answers with runnable examples.{tool_hint}"""


def get_tool_declarations() -> List[Dict[str, Any]]:
    """Tool declarations sent with the request."""
    from .tools import registered_tools

    return [tool.to_declaration() for tool in registered_tools()]


def build_messages(
    system_prompt: str,
    history: Optional[List[Dict[str, Any]]] = None,
    user_message: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """System message, then history, then the new user message."""
    messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    if history:
        messages.extend(history)
    if user_message is not None:
        messages.append({"role": "user", "content": user_message})
    return messages


def build_payload(
    config: PSLLMConfig,
    messages: List[Dict[str, Any]],
    tools: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Request body for the chat-completions endpoint."""
    payload: Dict[str, Any] = {
        "model": config.model,
        "messages": messages,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
    }
    if tools:
        payload["tools"] = tools
        payload["tool_choice"] = "auto"
    return payload
