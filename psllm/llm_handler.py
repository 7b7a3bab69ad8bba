"""LLM handler: request orchestration, session memory and tool calling."""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm

from . import ui
from .config import PSLLMConfig, load_configuration
from .context import augment_prompt, merge_context
from .formatting import extract_commands
from .history import SessionHistory
from .request_builder import (
    ResponseMode,
    build_messages,
    build_system_prompt,
    get_tool_declarations,
)

logger = logging.getLogger(__name__)


class ToolCall:
    """Represents a tool call request from the LLM."""

    def __init__(
        self,
        name: str,
        arguments: Dict[str, Any],
        call_id: Optional[str] = None,
        error: Optional[str] = None,
    ):
        self.name = name
        self.arguments = arguments
        self.call_id = call_id or f"call_{name}_{abs(hash(str(arguments)))}"
        self.error = error

    def to_message_format(self) -> Dict[str, Any]:
        """The tool call as it appears on an assistant message."""
        return {
            "id": self.call_id,
            "type": "function",
            "function": {"name": self.name, "arguments": json.dumps(self.arguments)},
        }

    def __repr__(self):
        return f"ToolCall(name='{self.name}', arguments={self.arguments})"


class LLMResponse:
    """Represents a response from the chat-completions API."""

    def __init__(
        self,
        content: str,
        tool_calls: Optional[List[ToolCall]] = None,
        model: Optional[str] = None,
        usage: Optional[Dict[str, Any]] = None,
        finish_reason: Optional[str] = None,
    ):
        self.content = content
        self.tool_calls = tool_calls or []
        self.model = model
        self.usage = usage
        self.finish_reason = finish_reason
        self.commands: List[str] = []
        self.tool_rounds = 0

    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


ConfirmCallback = Callable[[ToolCall, Optional[str]], bool]


class LLMHandler:
    """Merges context, keeps the session and drives the API and tool loop."""

    def __init__(
        self,
        config: Optional[PSLLMConfig] = None,
        config_loader: Optional[Callable[[], PSLLMConfig]] = None,
        confirm: Optional[ConfirmCallback] = None,
    ):
        if config is None and config_loader is None:
            config_loader = load_configuration
        self.config_loader = config_loader
        self.config = config if config is not None else config_loader()
        self._configured_model = self.config.model
        self.confirm = confirm or self._get_user_confirmation
        self.history = SessionHistory(self.config.session_history_size)
        self.tools_override: Optional[bool] = None
        self.model_override: Optional[str] = None
        self.provider = self._get_provider()
        self._provider_signature = self._signature(self.config)

    def _get_provider(self):
        """Create the chat-completions provider for the current config."""
        from .providers import ChatCompletionsProvider

        return ChatCompletionsProvider(self.config)

    @staticmethod
    def _signature(config: PSLLMConfig) -> Tuple[Any, ...]:
        return (config.endpoint, config.api_key, config.request_timeout)

    def reload_config(self) -> PSLLMConfig:
        """Re-read settings so environment changes apply to this request."""
        if self.config_loader is not None:
            self.config = self.config_loader()
            self._configured_model = self.config.model
        self.config.model = self.model_override or self._configured_model

        self.history.max_size = self.config.session_history_size

        signature = self._signature(self.config)
        if signature != self._provider_signature:
            logger.debug("Endpoint settings changed, recreating provider")
            self.provider = self._get_provider()
            self._provider_signature = signature
        else:
            self.provider.config = self.config
        return self.config

    def tools_active(self, use_tools: Optional[bool] = None) -> bool:
        if self.config.max_tool_rounds < 1:
            return False
        if use_tools is not None:
            return use_tools
        if self.tools_override is not None:
            return self.tools_override
        return self.config.tools_enabled

    async def chat(
        self,
        prompt: str,
        context: Any = None,
        piped: Any = None,
        mode: ResponseMode = ResponseMode.COMMAND,
        use_tools: Optional[bool] = None,
    ) -> LLMResponse:
        """Main chat interface that handles the complete request flow."""
        config = self.reload_config()

        merged = merge_context(context, piped)
        user_message = augment_prompt(prompt or "", merged)
        if not user_message:
            raise ValueError("Prompt is empty")

        tools_on = self.tools_active(use_tools)
        tools = get_tool_declarations() if tools_on else None
        history_messages = self.history.get_messages() if self.history.active else None

        messages = build_messages(
            build_system_prompt(mode, config, tools=tools_on),
            history_messages,
            user_message,
        )
        # This turn reaches the session only once it completes
        turn: List[Dict[str, Any]] = [{"role": "user", "content": user_message}]

        logger.debug(
            "Sending %d message(s) to %s (model=%s, tools=%s)",
            len(messages),
            config.endpoint,
            config.model,
            tools_on,
        )
        response = await self.provider.generate_response(messages=messages, tools=tools)

        rounds = 0
        while response.has_tool_calls():
            if rounds >= config.max_tool_rounds:
                logger.warning(
                    "Tool round limit (%d) reached, ignoring %d tool call(s)",
                    config.max_tool_rounds,
                    len(response.tool_calls),
                )
                break
            rounds += 1
            added = await self._handle_tool_calls(response)
            messages = messages + added
            turn.extend(added)
            # The last allowed round forces a plain answer
            follow_up_tools = tools if rounds < config.max_tool_rounds else None
            response = await self.provider.generate_response(
                messages=messages, tools=follow_up_tools
            )

        response.tool_rounds = rounds
        if mode == ResponseMode.COMMAND:
            response.commands = extract_commands(
                response.content, limit=config.command_candidates
            )

        turn.append({"role": "assistant", "content": response.content})
        self._commit_turn(turn)
        return response

    def _commit_turn(self, turn: List[Dict[str, Any]]):
        for message in turn:
            self.history.add_message(
                message["role"],
                message["content"],
                tool_calls=message.get("tool_calls"),
                tool_call_id=message.get("tool_call_id"),
            )

    async def generate_commands(
        self,
        prompt: str,
        context: Any = None,
        piped: Any = None,
        use_tools: Optional[bool] = None,
    ) -> List[str]:
        """Generate or complete shell commands; best candidate first."""
        response = await self.chat(
            prompt,
            context=context,
            piped=piped,
            mode=ResponseMode.COMMAND,
            use_tools=use_tools,
        )
        return response.commands

    async def _handle_tool_calls(self, response: LLMResponse) -> List[Dict[str, Any]]:
        """Run requested tools; returns the assistant and tool messages to append."""
        added: List[Dict[str, Any]] = [
            {
                "role": "assistant",
                "content": response.content,
                "tool_calls": [tc.to_message_format() for tc in response.tool_calls],
            }
        ]
        for tool_call in response.tool_calls:
            output = await self._run_tool_call(tool_call)
            added.append(
                {"role": "tool", "content": output, "tool_call_id": tool_call.call_id}
            )
        return added

    async def _run_tool_call(self, tool_call: ToolCall) -> str:
        from .tools import CommandResult, detect_destructive_command, get_tool_executor

        if tool_call.error:
            return json.dumps({"error": tool_call.error})

        executor = get_tool_executor(tool_call.name)
        if executor is None:
            logger.warning("Model requested unknown tool %s", tool_call.name)
            return json.dumps({"error": f"Unknown tool: {tool_call.name}"})

        command = str(tool_call.arguments.get("command", "")).strip()
        if not command:
            return CommandResult(command="", error="No command provided").to_tool_content()

        destructive = detect_destructive_command(command)
        # Destructive commands are always confirmed
        if destructive or self.config.require_confirmation:
            if not self.confirm(tool_call, destructive):
                logger.info("User declined command: %s", command)
                return CommandResult(command=command, declined=True).to_tool_content()

        logger.info("Executing command: %s", command)
        return await executor.execute(tool_call.arguments, self.config)

    def _get_user_confirmation(
        self, tool_call: ToolCall, destructive: Optional[str] = None
    ) -> bool:
        """Get user confirmation for a command the model wants to run."""
        console = ui.console
        command = tool_call.arguments.get("command", "")
        reason = tool_call.arguments.get("reason")

        console.print(f"\n[bold yellow]Command requested:[/bold yellow]")
        console.print(f"  [cyan]{escape(command)}[/cyan]", highlight=False)
        if reason:
            console.print(f"  [dim]{escape(str(reason))}[/dim]")

        if destructive:
            console.print(
                Panel(
                    f"This command looks destructive ({destructive}).\n"
                    "It may delete data or change the system irreversibly.",
                    title="[bold red]Warning[/bold red]",
                    border_style="red",
                )
            )
            return Confirm.ask(
                "[bold red]Run this destructive command?[/bold red]",
                default=False,
                console=console,
            )

        return Confirm.ask("Execute this command?", default=False, console=console)

    def set_tools(self, enabled: Optional[bool]):
        """Override tool declaration for this process; None restores config."""
        self.tools_override = enabled

    def set_model(self, model: Optional[str]):
        """Override the model for this process; None restores config."""
        self.model_override = model
        self.config.model = model or self._configured_model
        self.provider.config = self.config

    def start_session(self, reset: bool = False):
        self.history.start(reset=reset)

    def stop_session(self):
        self.history.stop()

    def clear_session(self):
        """Clear the current conversation session."""
        self.history.clear()

    def get_session_info(self) -> Dict[str, Any]:
        """Get information about the current session."""
        return self.history.get_info()
