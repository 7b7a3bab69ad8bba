"""Config command implementation for configuration management."""

from typing import TYPE_CHECKING, List

from ..command_proxy import Command
from ..config import PSLLMConfig, save_config

if TYPE_CHECKING:
    from ..llm_handler import LLMHandler


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


class ConfigCommand(Command):
    """Command to show and manage configuration."""

    def execute(self, args: List[str], handler: "LLMHandler") -> str:
        """Show or manage configuration."""
        if not args:
            return self._show_config(handler.config)

        command = args[0].lower()

        if command == "show":
            return self._show_config(handler.config)
        elif command == "save":
            return self._save_config(handler.config)
        else:
            return f"Unknown config command: {command}\n{self.get_help()}"

    def _show_config(self, config: PSLLMConfig) -> str:
        """Show current configuration."""
        output = "PSLLM Configuration:\n\n"

        output += "[bold blue]API Configuration:[/bold blue]\n"
        output += f"  Endpoint: {config.endpoint}\n"
        output += f"  Model: {config.model}\n"
        output += f"  API Key: {'✓ Set' if config.api_key else '✗ Not set'}\n"
        output += f"  Max tokens: {config.max_tokens}\n"
        output += f"  Temperature: {config.temperature}\n"
        output += f"  Request timeout: {config.request_timeout}s\n\n"

        output += "[bold blue]Tool Configuration:[/bold blue]\n"
        output += f"  Tools enabled: {_yes_no(config.tools_enabled)}\n"
        output += f"  Confirmation required: {_yes_no(config.require_confirmation)}\n"
        output += f"  Command timeout: {config.command_timeout}s\n"
        output += f"  Max tool rounds: {config.max_tool_rounds}\n"
        output += f"  Shell: {config.shell}\n\n"

        output += "[bold blue]History Configuration:[/bold blue]\n"
        output += f"  Session history size: {config.session_history_size}\n"
        output += f"  Command history size: {config.command_history_size}\n"
        output += f"  Command candidates: {config.command_candidates}\n\n"

        output += "[bold blue]Output Configuration:[/bold blue]\n"
        output += f"  Color: {config.color.value}\n"
        output += f"  Debug mode: {_yes_no(config.show_debug)}\n"
        output += f"  Log level: {config.log_level.value}\n"

        return output.strip()

    def _save_config(self, config: PSLLMConfig) -> str:
        """Save current configuration to file."""
        if save_config(config):
            return "Configuration saved to ~/.psllm/config.toml"
        return "Failed to save configuration"

    def get_help(self) -> str:
        """Get help text for the config command."""
        return """Show and manage configuration:
  /config                  - Show current configuration
  /config show             - Show current configuration (same as above)
  /config save             - Save current config to ~/.psllm/config.toml
                             (the API key is never written)"""
