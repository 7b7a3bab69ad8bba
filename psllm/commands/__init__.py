"""Built-in command implementations for command proxy mode."""

from .config import ConfigCommand
from .help import HelpCommand
from .model import ModelCommand
from .session import SessionCommand
from .tools import ToolsCommand

__all__ = [
    "ConfigCommand",
    "HelpCommand",
    "ModelCommand",
    "SessionCommand",
    "ToolsCommand",
]
