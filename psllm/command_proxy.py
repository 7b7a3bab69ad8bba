"""Slash commands shared by one-shot mode and the interactive shell."""

import shlex
import sys
import traceback
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from . import ui

if TYPE_CHECKING:
    from .llm_handler import LLMHandler

USE_HELP = "Use /help for available commands."


class Command(ABC):
    """A built-in reachable as /name."""

    @abstractmethod
    def execute(self, args: List[str], handler: "LLMHandler") -> str:
        """Run with the words after the command name; return text to show."""

    @abstractmethod
    def get_help(self) -> str:
        pass

    def validate_args(self, args: List[str]) -> bool:
        return True


class CommandProxy:
    """Routes /name lines to registered commands.

    Problems come back as text so callers can print them as they are.
    """

    def __init__(self, handler: "LLMHandler"):
        self.handler = handler
        self.commands: Dict[str, Command] = self._register_commands()

    def is_command(self, command_line: str) -> bool:
        """True when the line names a registered slash command."""
        name = command_line.strip().lstrip("/").split(maxsplit=1)
        return bool(name) and name[0] in self.commands

    @staticmethod
    def _split(command_line: str) -> Tuple[Optional[str], List[str]]:
        words = shlex.split(command_line.strip().lstrip("/"))
        if not words:
            return None, []
        return words[0], words[1:]

    def execute(self, command_line: str) -> str:
        try:
            name, args = self._split(command_line)
        except ValueError as e:
            return f"Error parsing command: {e}"

        if name is None:
            return f"No command specified. {USE_HELP}"

        command = self.commands.get(name)
        if command is None:
            return f"Unknown command: /{name}\n{USE_HELP}"

        if not command.validate_args(args):
            return f"Invalid arguments for /{name}\n{command.get_help()}"

        try:
            return command.execute(args, self.handler)
        except Exception as e:
            message = f"Command execution error: {e}"
            if self.handler.config.show_debug:
                message += "\n" + traceback.format_exc()
            return message

    def _register_commands(self) -> Dict[str, Command]:
        from .commands import (
            ConfigCommand,
            HelpCommand,
            ModelCommand,
            SessionCommand,
            ToolsCommand,
        )

        exit_command = ExitCommand()
        return {
            "help": HelpCommand(),
            "config": ConfigCommand(),
            "session": SessionCommand(),
            "model": ModelCommand(),
            "tools": ToolsCommand(),
            "exit": exit_command,
            "quit": exit_command,
        }

    def get_available_commands(self) -> List[str]:
        return sorted(self.commands)

    def get_command_help(self, command: str) -> Optional[str]:
        entry = self.commands.get(command)
        return entry.get_help() if entry is not None else None


class ExitCommand(Command):
    """Leave PSLLM from a slash command."""

    def execute(self, args: List[str], handler: "LLMHandler") -> str:
        ui.console.print("[yellow]Goodbye![/yellow]")
        sys.exit(0)

    def get_help(self) -> str:
        return "Exit PSLLM."
