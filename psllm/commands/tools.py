"""Tools command implementation for toggling command execution."""

from typing import TYPE_CHECKING, List

from ..command_proxy import Command

if TYPE_CHECKING:
    from ..llm_handler import LLMHandler


class ToolsCommand(Command):
    """Command to let the model run shell commands."""

    def execute(self, args: List[str], handler: "LLMHandler") -> str:
        if not args:
            state = "enabled" if handler.tools_active() else "disabled"
            return f"Command execution tool is {state}."

        action = args[0].lower()
        if action == "on":
            handler.set_tools(True)
            return "Command execution tool enabled. Every command is confirmed first."
        if action == "off":
            handler.set_tools(False)
            return "Command execution tool disabled."
        if action == "reset":
            handler.set_tools(None)
            return "Command execution tool follows the configuration again."
        return f"Unknown tools command: {action}\n{self.get_help()}"

    def get_help(self) -> str:
        return """Control the execute_command tool:
  /tools                   - Show whether the tool is declared
  /tools on                - Declare the tool on every request
  /tools off               - Never declare the tool
  /tools reset             - Use PSLLM_TOOLS_ENABLED again"""
