"""Base tool interface for LLM tool calling."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..config import PSLLMConfig


class Tool(ABC):
    """Abstract base class for all LLM tools."""

    @abstractmethod
    async def execute(self, arguments: Dict[str, Any], config: PSLLMConfig) -> str:
        """Execute the tool with given arguments.

        Args:
            arguments: Dictionary of arguments passed from the LLM
            config: PSLLM configuration object

        Returns:
            Tool message content for the follow-up request
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Get the tool name."""
        pass

    @abstractmethod
    def get_description(self) -> str:
        """Get the tool description."""
        pass

    @abstractmethod
    def get_parameters(self) -> Dict[str, Any]:
        """JSON schema of the arguments object."""
        pass

    def to_declaration(self) -> Dict[str, Any]:
        """The tool as an OpenAI function declaration."""
        return {
            "type": "function",
            "function": {
                "name": self.get_name(),
                "description": self.get_description(),
                "parameters": self.get_parameters(),
            },
        }


def registered_tools() -> List[Tool]:
    """Every tool the model may call."""
    from .shell import ShellTool

    return [ShellTool()]


def get_tool_executor(tool_name: str) -> Optional[Tool]:
    """Get tool executor by name."""
    tools = {tool.get_name(): tool for tool in registered_tools()}
    return tools.get(tool_name)
