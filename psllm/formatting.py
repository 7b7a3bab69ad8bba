"""Response formatting: command extraction and console rendering."""

import re
from typing import List, Optional

from rich.console import Console
from rich.markdown import Markdown

from .config import ColorMode, PSLLMConfig
from .request_builder import ResponseMode

FENCE_RE = re.compile(r"^(```|~~~)")
LIST_MARKER_RE = re.compile(r"^(?:\d+[.)]\s+|[-*•]\s+)")
PROMPT_MARKER_RE = re.compile(r"^(?:PS(?:\s[^>]*)?>\s*|\$\s+|>\s+)")
INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")


def clean_command_line(line: str) -> str:
    """Strip list numbering, surrounding backticks and prompt markers."""
    line = line.strip()
    line = LIST_MARKER_RE.sub("", line, count=1)
    if len(line) >= 2 and line.startswith("`") and line.endswith("`"):
        line = line.strip("`").strip()
    line = PROMPT_MARKER_RE.sub("", line, count=1)
    return line


def _fenced_lines(lines: List[str]) -> List[str]:
    inside = False
    fenced = []
    for raw in lines:
        if FENCE_RE.match(raw.strip()):
            inside = not inside
            continue
        if inside:
            fenced.append(raw)
    return fenced


def _candidate_lines(text: str) -> List[str]:
    lines = text.splitlines()
    if any(FENCE_RE.match(line.strip()) for line in lines):
        # Prose around code blocks is explanation, not commands
        return _fenced_lines(lines)

    candidates = []
    for raw in lines:
        # "Run `du -sh *` to see sizes" yields only the code span
        spans = INLINE_CODE_RE.findall(raw)
        candidates.extend(spans or [raw])
    return candidates


def extract_commands(text: Optional[str], limit: Optional[int] = None) -> List[str]:
    """Pull candidate commands out of a model reply, best first, no duplicates."""
    if not text:
        return []

    commands: List[str] = []
    for raw in _candidate_lines(text):
        command = clean_command_line(raw)
        if not command or command in commands:
            continue
        commands.append(command)
        if limit and len(commands) >= limit:
            break
    return commands


def render_response(
    text: str,
    console: Console,
    mode: ResponseMode = ResponseMode.CHAT,
    config: Optional[PSLLMConfig] = None,
    commands: Optional[List[str]] = None,
):
    """Print a response; chat answers are rendered as Markdown when colored."""
    if mode == ResponseMode.COMMAND:
        for command in commands if commands is not None else extract_commands(text):
            console.print(command, markup=False, highlight=False, soft_wrap=True)
        return

    color = config.color if config is not None else ColorMode.AUTO
    if color != ColorMode.NEVER and console.is_terminal or color == ColorMode.ALWAYS:
        console.print(Markdown(text))
    else:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
