"""Help command implementation for showing available commands."""

from typing import TYPE_CHECKING, List

from ..command_proxy import Command

if TYPE_CHECKING:
    from ..llm_handler import LLMHandler


class HelpCommand(Command):
    """Command to show help information."""

    def execute(self, args: List[str], handler: "LLMHandler") -> str:
        """Show help information."""
        if args and args[0] != "":
            return self._show_command_help(args[0].lstrip("/"), handler)
        return self._show_general_help()

    def _show_general_help(self) -> str:
        """Show general help with all available commands."""
        return """PSLLM - Shell Commands from Natural Language

USAGE:
  psllm <description>         - Generate a command (one candidate per line)
  psllm --chat <question>     - Ask a free-form question
  psllm /<command>            - Run a built-in command
  psllm --shell               - Start the interactive shell

INTERACTIVE SHELL:
  Ctrl+G                      - Turn the line into a command, again for the next one
  Alt+G                       - Previous generated command
  ?<question>                 - Ask a question (uses the session if active)

AVAILABLE COMMANDS:
  /session \\[start|stop|clear|show]  - Multi-turn session memory
  /tools \\[on|off]             - Let the model run commands (with confirmation)
  /model \\[name]               - Show or override the model
  /config \\[show|save]         - Show or save the configuration
  /help \\[command]             - Show help (this message)
  /exit, /quit                - Exit

CONFIGURATION:
  PSLLM_ENDPOINT, PSLLM_API_KEY, PSLLM_MODEL, PSLLM_MAX_TOKENS,
  PSLLM_REQUEST_TIMEOUT, PSLLM_COLOR, PSLLM_SESSION_HISTORY_SIZE, ...
  or ~/.psllm/config.toml

For command-specific help: /help <command>"""

    def _show_command_help(self, command_name: str, handler: "LLMHandler") -> str:
        """Show help for a specific command."""
        from ..command_proxy import CommandProxy

        proxy = CommandProxy(handler)
        command_help = proxy.get_command_help(command_name)

        if command_help:
            return f"Help for /{command_name}:\n\n{command_help}"
        available_commands = ", ".join(proxy.get_available_commands())
        return (
            f"Unknown command: /{command_name}\n\n"
            f"Available commands: {available_commands}\n\n"
            "Use '/help' for full help."
        )

    def get_help(self) -> str:
        """Get help text for the help command."""
        return """Show help information:
  /help                    - Show general help and all commands
  /help <command>          - Show help for specific command

Examples:
  /help session            - Show help for session command"""
