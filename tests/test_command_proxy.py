"""Unit tests for command proxy system."""

from pathlib import Path
from unittest.mock import patch

import pytest
import toml

from psllm.command_proxy import Command, CommandProxy


class TestCommandProxy:
    """Test the CommandProxy class."""

    def test_command_registration(self, handler):
        proxy = CommandProxy(handler)

        available_commands = proxy.get_available_commands()

        for cmd in ["help", "config", "session", "model", "tools", "exit", "quit"]:
            assert cmd in available_commands
        assert available_commands == sorted(available_commands)

    def test_is_command(self, handler):
        proxy = CommandProxy(handler)

        assert proxy.is_command("/help")
        assert proxy.is_command("/session start")
        assert not proxy.is_command("/usr/bin/env ls")
        assert not proxy.is_command("/")

    def test_command_with_arguments(self, handler):
        proxy = CommandProxy(handler)

        with patch.object(
            proxy.commands["session"], "execute", return_value="started"
        ) as mock_execute:
            result = proxy.execute("/session start --reset")

        assert result == "started"
        mock_execute.assert_called_once_with(["start", "--reset"], handler)

    def test_unknown_command(self, handler):
        proxy = CommandProxy(handler)

        result = proxy.execute("/unknown_command")
        assert "Unknown command: /unknown_command" in result
        assert "/help" in result

    def test_empty_command(self, handler):
        proxy = CommandProxy(handler)

        assert "No command specified" in proxy.execute("/")
        assert "No command specified" in proxy.execute("   ")

    def test_parse_error(self, handler):
        proxy = CommandProxy(handler)

        result = proxy.execute('/model "unterminated')
        assert result.startswith("Error parsing command")

    def test_invalid_arguments(self, handler):
        class StrictCommand(Command):
            def execute(self, args, handler):
                return "ran"

            def get_help(self):
                return "strict help"

            def validate_args(self, args):
                return False

        proxy = CommandProxy(handler)
        proxy.commands["strict"] = StrictCommand()

        result = proxy.execute("/strict anything")
        assert result == "Invalid arguments for /strict\nstrict help"

    def test_command_execution_error(self, handler):
        proxy = CommandProxy(handler)

        with patch.object(
            proxy.commands["help"], "execute", side_effect=Exception("Test error")
        ):
            result = proxy.execute("/help")

        assert result == "Command execution error: Test error"

    def test_command_execution_error_with_debug(self, handler):
        handler.config.show_debug = True
        proxy = CommandProxy(handler)

        with patch.object(
            proxy.commands["help"], "execute", side_effect=Exception("Test error")
        ):
            result = proxy.execute("/help")

        assert "Command execution error: Test error" in result
        assert "Traceback" in result

    def test_get_command_help(self, handler):
        proxy = CommandProxy(handler)

        assert "/session start" in proxy.get_command_help("session")
        assert proxy.get_command_help("nonexistent") is None

    def test_exit_command(self, handler):
        proxy = CommandProxy(handler)

        with pytest.raises(SystemExit) as exc_info:
            proxy.execute("/exit")
        assert exc_info.value.code == 0


class TestHelpCommand:
    def test_general_help(self, handler):
        result = CommandProxy(handler).execute("/help")

        assert result.startswith("PSLLM - Shell Commands from Natural Language")
        assert "USAGE:" in result
        assert "/session" in result

    def test_command_help(self, handler):
        result = CommandProxy(handler).execute("/help /tools")

        assert result.startswith("Help for /tools:")
        assert "/tools on" in result

    def test_unknown_command_help(self, handler):
        result = CommandProxy(handler).execute("/help bogus")

        assert result.startswith("Unknown command: /bogus")
        assert "Available commands:" in result


class TestSessionCommand:
    def test_start_and_info(self, handler):
        proxy = CommandProxy(handler)

        assert proxy.execute("/session").startswith("Session: inactive")
        result = proxy.execute("/session start")

        assert result == "Session started, keeping up to 10 messages."
        assert handler.history.active
        assert proxy.execute("/session info").startswith("Session: active")

    def test_stop_keeps_messages(self, handler):
        proxy = CommandProxy(handler)
        proxy.execute("/session start")
        handler.history.add_message("user", "list files")

        result = proxy.execute("/session stop")

        assert result.startswith("Session stopped. 1 message(s) kept")
        assert not handler.history.active
        assert len(handler.history) == 1

    def test_start_with_reset(self, handler):
        proxy = CommandProxy(handler)
        proxy.execute("/session start")
        handler.history.add_message("user", "old")

        proxy.execute("/session start --reset")

        assert len(handler.history) == 0

    def test_clear(self, handler):
        proxy = CommandProxy(handler)
        proxy.execute("/session start")
        handler.history.add_message("user", "old")

        assert proxy.execute("/session clear") == "Session history cleared."
        assert len(handler.history) == 0

    def test_show(self, handler):
        proxy = CommandProxy(handler)
        assert proxy.execute("/session show") == "Session history is empty."

        proxy.execute("/session start")
        handler.history.add_message("user", "list files")
        handler.history.add_message("assistant", "x" * 300)

        result = proxy.execute("/session show")

        assert "USER: list files" in result
        assert "ASSISTANT: " + "x" * 200 + "..." in result

    def test_unknown_action(self, handler):
        result = CommandProxy(handler).execute("/session bogus")
        assert result.startswith("Unknown session command: bogus")


class TestToolsCommand:
    def test_toggle(self, handler):
        proxy = CommandProxy(handler)

        assert proxy.execute("/tools") == "Command execution tool is disabled."
        proxy.execute("/tools on")
        assert handler.tools_active() is True
        assert proxy.execute("/tools") == "Command execution tool is enabled."
        proxy.execute("/tools off")
        assert handler.tools_active() is False
        proxy.execute("/tools reset")
        assert handler.tools_override is None


class TestModelCommand:
    def test_show_current(self, handler):
        result = CommandProxy(handler).execute("/model")

        assert result.startswith("Current Configuration:")
        assert "Model: test-model" in result
        assert "Endpoint: http://localhost:8080/v1" in result

    def test_switch_and_reset(self, handler):
        proxy = CommandProxy(handler)

        assert proxy.execute("/model other-model") == "Switched to model other-model"
        assert handler.config.model == "other-model"
        assert "overridden" in proxy.execute("/model")

        assert proxy.execute("/model reset") == "Model reset to test-model"
        assert handler.config.model == "test-model"


class TestConfigCommand:
    def test_show_config(self, handler):
        result = CommandProxy(handler).execute("/config")

        assert result.startswith("PSLLM Configuration:")
        assert "Model: test-model" in result
        assert "Session history size: 10" in result
        assert "test-key-123" not in result

    def test_save_config(self, handler):
        result = CommandProxy(handler).execute("/config save")

        assert result == "Configuration saved to ~/.psllm/config.toml"
        saved = toml.load(Path.home() / ".psllm" / "config.toml")
        assert saved["model"] == "test-model"
        assert "api_key" not in saved

    def test_save_failure(self, handler):
        with patch("psllm.commands.config.save_config", return_value=False):
            result = CommandProxy(handler).execute("/config save")
        assert result == "Failed to save configuration"

    def test_unknown_subcommand(self, handler):
        result = CommandProxy(handler).execute("/config bogus")
        assert result.startswith("Unknown config command: bogus")
