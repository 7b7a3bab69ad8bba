"""Shared UI helpers for console output and logging."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import ColorMode, LogLevel, PSLLMConfig

# Shared console instance so Rich live displays and prompts coordinate correctly.
console = Console()

_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def create_console(color: ColorMode = ColorMode.AUTO, stderr: bool = False) -> Console:
    """Build a console honoring the configured color mode."""
    if color == ColorMode.ALWAYS:
        return Console(force_terminal=True, stderr=stderr)
    if color == ColorMode.NEVER:
        return Console(no_color=True, highlight=False, stderr=stderr)
    return Console(stderr=stderr)


def configure_console(config: PSLLMConfig) -> Console:
    """Rebind the shared console to the configured color mode."""
    global console
    console = create_console(config.color)
    return console


def setup_logging(config: Optional[PSLLMConfig] = None) -> None:
    """Route the psllm logger through a RichHandler on stderr."""
    level = logging.WARNING
    color = ColorMode.AUTO
    if config is not None:
        level = _LEVELS.get(config.log_level, logging.WARNING)
        color = config.color

    logger = logging.getLogger("psllm")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=create_console(color, stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
