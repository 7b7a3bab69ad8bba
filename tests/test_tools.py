"""Unit tests for the command execution tool."""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from psllm.request_builder import get_tool_declarations
from psllm.tools import (
    CommandResult,
    ShellTool,
    detect_destructive_command,
    get_tool_executor,
    registered_tools,
)


class TestDestructiveDetection:
    @pytest.mark.parametrize(
        "command",
        [
            "rm -rf /tmp/build",
            "sudo rm -r ~/old",
            "ls && rm --force cache.db",
            "mkfs.ext4 /dev/sdb1",
            "dd if=image.iso of=/dev/sdb bs=4M",
            "git reset --hard HEAD~3",
            "git clean -fdx",
            "docker system prune -a",
            "sudo shutdown -h now",
            "Remove-Item C:\\temp -Recurse -Force",
            "Format-Volume -DriveLetter D",
            "find . -name '*.log' | xargs rm -rf",
            "nohup rm -rf /data",
            "env rm -rf /",
            "sudo -E rm -rf /",
            "command rm --recursive old/",
            "time /bin/rm -f core",
            "find / -delete",
            "find . -type f -exec rm -f {} +",
        ],
    )
    def test_destructive(self, command):
        assert detect_destructive_command(command) is not None

    @pytest.mark.parametrize(
        "command",
        [
            "ls -la",
            "rm notes.txt",
            "rm notes.txt && ls -f",
            "rmdir empty",
            "find . -name '*.log'",
            "git status",
            "grep -rf patterns.txt .",
            "",
            "   ",
        ],
    )
    def test_harmless(self, command):
        assert detect_destructive_command(command) is None

    def test_reason_is_descriptive(self):
        assert detect_destructive_command("git reset --hard") == "git hard reset"
        assert detect_destructive_command("find /tmp -delete") == "find with -delete"


class TestCommandResult:
    def test_tool_content(self):
        result = CommandResult(command="echo hi", exit_code=0, stdout="hi\n")

        data = json.loads(result.to_tool_content())

        assert data == {
            "command": "echo hi",
            "exit_code": 0,
            "stdout": "hi\n",
            "stderr": "",
            "error": None,
            "declined": False,
        }
        assert result.succeeded

    def test_declined_content(self):
        data = json.loads(CommandResult(command="rm -rf /", declined=True).to_tool_content())

        assert data["declined"] is True
        assert "declined" in data["error"]
        assert data["exit_code"] is None


class TestShellTool:
    def test_registry(self):
        assert isinstance(get_tool_executor("execute_command"), ShellTool)
        assert get_tool_executor("read_file") is None

    def test_declarations_follow_registry(self):
        names = [tool.get_name() for tool in registered_tools()]

        declared = [tool["function"]["name"] for tool in get_tool_declarations()]

        assert declared == names
        for name in names:
            assert get_tool_executor(name).get_name() == name

    def test_run_captures_output(self, sample_config):
        with patch("psllm.tools.shell.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=2, stdout="out", stderr="err")

            result = ShellTool().run("ls missing", sample_config)

        assert result.exit_code == 2
        assert result.stdout == "out"
        assert result.stderr == "err"
        assert not result.succeeded
        args, kwargs = mock_run.call_args
        assert args[0] == "ls missing"
        assert kwargs["shell"] is True
        assert kwargs["timeout"] == sample_config.command_timeout

    def test_output_truncated(self, sample_config):
        sample_config.max_tool_output_chars = 10
        with patch("psllm.tools.shell.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="x" * 25, stderr="")

            result = ShellTool().run("yes", sample_config)

        assert result.stdout.startswith("x" * 10)
        assert "truncated 15 chars" in result.stdout

    def test_timeout(self, sample_config):
        with patch("psllm.tools.shell.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired("sleep 100", 30)

            result = ShellTool().run("sleep 100", sample_config)

        assert result.exit_code is None
        assert "timed out" in result.error

    def test_missing_shell(self, sample_config):
        with patch("psllm.tools.shell.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError()

            result = ShellTool().run("ls", sample_config)

        assert "Shell not found" in result.error

    def test_empty_command(self, sample_config):
        assert ShellTool().run("", sample_config).error == "No command provided"

    @pytest.mark.asyncio
    async def test_real_command(self, sample_config):
        content = await ShellTool().execute({"command": "echo psllm"}, sample_config)

        data = json.loads(content)
        assert data["exit_code"] == 0
        assert data["stdout"].strip() == "psllm"
