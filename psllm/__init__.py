"""PSLLM - shell commands from natural language.

Wraps an OpenAI-compatible chat-completions API to generate and complete
shell commands, answer questions with optional tool calling (the model may
ask to run commands, each one confirmed by the user) and keep a bounded,
in-memory session history for multi-turn use.

- One-shot CLI: ``psllm <description>`` prints candidate commands
- Interactive shell: ``psllm --shell`` binds Ctrl+G to generate in place
"""

from .command_proxy import CommandProxy
from .config import PSLLMConfig, load_configuration
from .context import merge_context
from .history import SessionHistory
from .llm_handler import LLMHandler
from .main import app

__version__ = "0.1.0"

__all__ = [
    "app",
    "PSLLMConfig",
    "LLMHandler",
    "CommandProxy",
    "SessionHistory",
    "load_configuration",
    "merge_context",
]
