"""Unit tests for session history management."""

import pytest

from psllm.history import Message, SessionHistory


class TestMessage:
    """Test the Message class."""

    def test_llm_format(self):
        call = {"id": "call_1", "type": "function", "function": {"name": "x", "arguments": "{}"}}
        assert Message("assistant", "", tool_calls=[call]).to_llm_format() == {
            "role": "assistant",
            "content": "",
            "tool_calls": [call],
        }
        assert Message("tool", "out", tool_call_id="call_1").to_llm_format() == {
            "role": "tool",
            "content": "out",
            "tool_call_id": "call_1",
        }


class TestSessionHistory:
    """Test the SessionHistory class."""

    def test_inactive_history_records_nothing(self):
        history = SessionHistory(max_size=5)

        assert history.add_message("user", "Hello") is False
        assert len(history) == 0

    def test_add_and_get_messages(self):
        history = SessionHistory(max_size=5)
        history.start()

        history.add_message("user", "Hello")
        history.add_message("assistant", "Hi there!")

        assert history.get_messages() == [
            {"role": "user", "content": "Hello"},
            {"role": "assistant", "content": "Hi there!"},
        ]

    def test_rejects_unknown_role(self):
        history = SessionHistory(active=True)
        with pytest.raises(ValueError):
            history.add_message("system", "nope")

    def test_oldest_messages_dropped(self):
        history = SessionHistory(max_size=4, active=True)
        for i in range(3):
            history.add_message("user", f"Message {i}")
            history.add_message("assistant", f"Response {i}")

        contents = [m["content"] for m in history.get_messages()]
        assert contents == ["Message 1", "Response 1", "Message 2", "Response 2"]

    def test_orphaned_tool_results_dropped(self):
        history = SessionHistory(max_size=3, active=True)
        call = {"id": "c1", "type": "function", "function": {"name": "execute_command", "arguments": "{}"}}
        history.add_message("user", "what is here?")
        history.add_message("assistant", "", tool_calls=[call])
        history.add_message("tool", "a.txt", tool_call_id="c1")
        history.add_message("tool", "b.txt", tool_call_id="c1")
        # Pushes out the assistant tool call, leaving its results orphaned
        history.add_message("assistant", "Two files.")

        roles = [m["role"] for m in history.get_messages()]
        assert roles == ["assistant"]
        assert history.get_messages()[0]["content"] == "Two files."

    def test_shrinking_max_size_trims(self):
        history = SessionHistory(max_size=10, active=True)
        for i in range(6):
            history.add_message("user", str(i))

        history.max_size = 2

        assert [m["content"] for m in history.get_messages()] == ["4", "5"]
        with pytest.raises(ValueError):
            history.max_size = 0

    def test_stop_keeps_messages(self):
        history = SessionHistory(active=True)
        history.add_message("user", "Hello")

        history.stop()
        history.add_message("user", "ignored")

        assert history.active is False
        assert len(history) == 1

        history.start()
        assert len(history) == 1
        history.start(reset=True)
        assert len(history) == 0

    def test_clear(self):
        history = SessionHistory(active=True)
        history.add_message("user", "Hello")
        history.clear()

        assert len(history) == 0
        assert history.active is True

    def test_get_info(self):
        history = SessionHistory(max_size=8, active=True)
        history.add_message("user", "Hello")
        history.add_message("assistant", "Hi")

        info = history.get_info()

        assert info["active"] is True
        assert info["message_count"] == 2
        assert info["max_size"] == 8
        assert info["roles"] == {"user": 1, "assistant": 1, "tool": 0}
        assert info["started_at"] is not None
