"""Tool calling implementations for LLM integration."""

from .base import Tool, get_tool_executor, registered_tools
from .shell import CommandResult, ShellTool, detect_destructive_command

__all__ = [
    "Tool",
    "get_tool_executor",
    "registered_tools",
    "ShellTool",
    "CommandResult",
    "detect_destructive_command",
]
