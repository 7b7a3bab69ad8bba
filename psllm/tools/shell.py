"""Shell command execution tool for LLM."""

import json
import logging
import os
import re
import subprocess
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..config import PSLLMConfig
from .base import Tool

logger = logging.getLogger(__name__)

# A command word may follow wrappers such as sudo -E, xargs, nohup or env
_START = r"(?:^|[\s;&|(`/])"
# Arguments of the same simple command, stopping at the next separator
_ARGS = r"[^\n;&|]*"

DESTRUCTIVE_COMMAND_PATTERNS = (
    (
        re.compile(
            _START + r"rm\b" + _ARGS + r"(--no-preserve-root|--preserve-root=0)\b",
            re.I,
        ),
        "rm with preserve-root disabled",
    ),
    (
        re.compile(
            _START
            + r"rm\b(?="
            + _ARGS
            + r"\s(?:-[a-z]*[rf][a-z]*|--recursive|--force)(?:\s|$))",
            re.I,
        ),
        "rm with recursive/force options",
    ),
    (re.compile(_START + r"find\b" + _ARGS + r"\s-delete\b", re.I), "find with -delete"),
    (re.compile(_START + r"mkfs(\.\w+)?\b", re.I), "filesystem format command"),
    (re.compile(_START + r"dd\s" + _ARGS + r"\bof=/dev/", re.I), "dd write to block device"),
    (re.compile(_START + r"shred\b", re.I), "secure delete command"),
    (re.compile(_START + r"wipefs\b", re.I), "filesystem wipe command"),
    (re.compile(_START + r"git\s+reset\s+--hard\b", re.I), "git hard reset"),
    (re.compile(_START + r"git\s+clean\s+-" + _ARGS + r"f", re.I), "git clean with force"),
    (re.compile(_START + r"docker\s+system\s+prune\b", re.I), "docker prune"),
    (
        re.compile(_START + r"(shutdown|reboot|halt|poweroff)\b", re.I),
        "system shutdown or reboot",
    ),
    (
        re.compile(r"\b(Remove-Item|rm|del|ri)\b[^\n]*\s-Recurse\b", re.I),
        "recursive Remove-Item",
    ),
    (re.compile(r"\b(Format-Volume|Clear-Disk)\b", re.I), "disk format cmdlet"),
    (re.compile(r"\b(Stop-Computer|Restart-Computer)\b", re.I), "system shutdown cmdlet"),
    (re.compile(r">\s*/dev/sd[a-z]", re.I), "write to raw disk device"),
    (re.compile(r":\(\)\s*\{\s*:\|:&\s*\};:"), "fork bomb pattern"),
)


def detect_destructive_command(command: str) -> Optional[str]:
    """Return the reason a command looks destructive, or None."""
    if not isinstance(command, str) or not command.strip():
        return None
    normalized = command.strip()
    for pattern, reason in DESTRUCTIVE_COMMAND_PATTERNS:
        if pattern.search(normalized):
            return reason
    return None


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n... [truncated {len(text) - limit} chars]"


@dataclass
class CommandResult:
    """Outcome of a model-requested command."""

    command: str
    exit_code: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    error: Optional[str] = None
    declined: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.declined and self.error is None and self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_tool_content(self) -> str:
        """JSON text sent back to the model as the tool message."""
        data = self.to_dict()
        if self.declined:
            data["error"] = "User declined to execute this command."
        return json.dumps(data)


class ShellTool(Tool):
    """Tool for executing shell commands."""

    def get_name(self) -> str:
        return "execute_command"

    def get_description(self) -> str:
        return (
            "Execute a shell command on the user's machine and return its "
            "exit code, stdout and stderr. The user confirms before it runs."
        )

    def get_parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The shell command to execute",
                },
                "reason": {
                    "type": "string",
                    "description": "Brief description of why this command is needed",
                },
            },
            "required": ["command"],
        }

    async def execute(self, arguments: Dict[str, Any], config: PSLLMConfig) -> str:
        """Run the requested command and serialise the result."""
        command = str(arguments.get("command", "")).strip()
        return self.run(command, config).to_tool_content()

    def run(self, command: str, config: PSLLMConfig) -> CommandResult:
        """Run a command through the configured shell, capturing output."""
        if not command:
            return CommandResult(command="", error="No command provided")

        # Windows picks the shell from COMSPEC
        executable = config.shell if os.name != "nt" else None
        timeout = config.command_timeout or None

        try:
            completed = subprocess.run(
                command,
                shell=True,
                executable=executable,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", timeout, command)
            return CommandResult(
                command=command,
                error=f"Command timed out after {config.command_timeout} seconds",
            )
        except FileNotFoundError:
            return CommandResult(command=command, error=f"Shell not found: {config.shell}")
        except OSError as e:
            return CommandResult(command=command, error=f"Error executing command: {e}")

        limit = config.max_tool_output_chars
        result = CommandResult(
            command=command,
            exit_code=completed.returncode,
            stdout=_truncate(completed.stdout or "", limit),
            stderr=_truncate(completed.stderr or "", limit),
        )
        logger.debug("Command exited with %s: %s", result.exit_code, command)
        return result
