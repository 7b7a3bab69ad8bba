"""Session command implementation for multi-turn memory."""

from typing import TYPE_CHECKING, List

from rich.markup import escape

from ..command_proxy import Command

if TYPE_CHECKING:
    from ..llm_handler import LLMHandler

PREVIEW_CHARS = 200


class SessionCommand(Command):
    """Command to toggle and inspect the in-memory session."""

    def execute(self, args: List[str], handler: "LLMHandler") -> str:
        action = args[0].lower() if args else "info"

        if action == "start":
            reset = "--reset" in args[1:]
            handler.start_session(reset=reset)
            return (
                f"Session started, keeping up to {handler.history.max_size} messages."
            )

        if action == "stop":
            handler.stop_session()
            return (
                f"Session stopped. {len(handler.history)} message(s) kept; "
                "use /session clear to discard them."
            )

        if action == "clear":
            handler.clear_session()
            return "Session history cleared."

        if action == "show":
            return self._show_messages(handler)

        if action == "info":
            return self._show_info(handler)

        return f"Unknown session command: {action}\n{self.get_help()}"

    def _show_info(self, handler: "LLMHandler") -> str:
        info = handler.get_session_info()
        roles = ", ".join(f"{role}: {count}" for role, count in info["roles"].items())
        output = f"Session: {'active' if info['active'] else 'inactive'}\n"
        output += f"  Messages: {info['message_count']}/{info['max_size']} ({roles})\n"
        if info["started_at"]:
            output += f"  Started: {info['started_at']}\n"
        return output.strip()

    def _show_messages(self, handler: "LLMHandler") -> str:
        messages = handler.history.messages
        if not messages:
            return "Session history is empty."

        output = ""
        for message in messages:
            content = message.content
            if message.tool_calls:
                names = ", ".join(
                    call["function"]["name"] for call in message.tool_calls
                )
                content = f"{content} (tool calls: {names})".strip()
            if len(content) > PREVIEW_CHARS:
                content = content[:PREVIEW_CHARS] + "..."
            output += f"{message.role.upper()}: {escape(content)}\n\n"
        return output.strip()

    def get_help(self) -> str:
        return """Manage the in-memory session:
  /session                 - Show whether a session is active
  /session start [--reset] - Remember messages across requests
  /session stop            - Stop remembering (messages are kept)
  /session clear           - Discard all session messages
  /session show            - Show the session messages"""
