"""prompt_toolkit integration: generate, complete and cycle commands in place."""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style

from . import ui
from .command_proxy import CommandProxy
from .config import PSLLMError
from .formatting import render_response
from .llm_handler import LLMHandler
from .request_builder import ResponseMode

logger = logging.getLogger(__name__)

DEFAULT_TOOLBAR = "Ctrl+G generate/next  Alt+G previous  ?<question> ask  /help"


class CommandCycler:
    """Bounded list of generated commands with a wrap-around cursor."""

    def __init__(self, max_size: int = 10):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._commands: List[str] = []
        self._index = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    @max_size.setter
    def max_size(self, value: int):
        if value < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = value
        del self._commands[value:]
        if self._index >= len(self._commands):
            self._index = 0

    @property
    def commands(self) -> List[str]:
        return list(self._commands)

    def load(self, candidates: List[str]) -> Optional[str]:
        """Put new candidates first and select the best one."""
        fresh = []
        for candidate in candidates:
            candidate = candidate.strip()
            if candidate and candidate not in fresh:
                fresh.append(candidate)
        older = [command for command in self._commands if command not in fresh]
        self._commands = (fresh + older)[: self._max_size]
        self._index = 0
        return self.current()

    def current(self) -> Optional[str]:
        if not self._commands:
            return None
        return self._commands[self._index]

    def next(self) -> Optional[str]:
        if not self._commands:
            return None
        self._index = (self._index + 1) % len(self._commands)
        return self.current()

    def previous(self) -> Optional[str]:
        if not self._commands:
            return None
        self._index = (self._index - 1) % len(self._commands)
        return self.current()

    def owns(self, text: str) -> bool:
        """True when the text is the command currently selected."""
        current = self.current()
        return current is not None and text.strip() == current

    def clear(self):
        self._commands.clear()
        self._index = 0

    def __len__(self) -> int:
        return len(self._commands)


def replace_buffer(buffer: Buffer, text: str):
    """Replace the whole input line, cursor at the end."""
    buffer.document = Document(text, cursor_position=len(text))


class LineEditorIntegration:
    """Key bindings that turn the current input line into a command."""

    def __init__(self, handler: LLMHandler, cycler: Optional[CommandCycler] = None):
        self.handler = handler
        self.cycler = cycler or CommandCycler(handler.config.command_history_size)
        self.status = ""

    async def complete_buffer(self, buffer: Buffer) -> Optional[str]:
        """Generate from the buffer text, or cycle if it holds a generated command."""
        text = buffer.text.strip()
        if not text:
            return None

        if self.cycler.owns(text):
            command = self.cycler.next()
        else:
            self.status = "Generating..."
            try:
                # Confirmation prompts cannot run inside a key binding
                candidates = await self.handler.generate_commands(text, use_tools=False)
            except PSLLMError as e:
                logger.debug("Generation failed", exc_info=True)
                self.status = f"Error: {e}"
                return None

            self.cycler.max_size = self.handler.config.command_history_size
            if not candidates:
                self.status = "No command generated"
                return None
            command = self.cycler.load(candidates)
            self.status = ""

        replace_buffer(buffer, command)
        return command

    def cycle_back(self, buffer: Buffer) -> Optional[str]:
        if not self.cycler.owns(buffer.text):
            return None
        command = self.cycler.previous()
        replace_buffer(buffer, command)
        return command

    def key_bindings(self) -> KeyBindings:
        kb = KeyBindings()
        integration = self

        @kb.add("c-g")
        async def _(event):
            """Generate a command from the line, or show the next candidate."""
            event.app.invalidate()
            await integration.complete_buffer(event.app.current_buffer)
            event.app.invalidate()

        @kb.add("escape", "g")
        def _(event):
            """Show the previous candidate."""
            integration.cycle_back(event.app.current_buffer)

        return kb

    def bottom_toolbar(self) -> str:
        return self.status or DEFAULT_TOOLBAR


class InteractiveShell:
    """A prompt loop that runs shell commands and hosts the LLM key bindings."""

    def __init__(
        self,
        handler: LLMHandler,
        proxy: Optional[CommandProxy] = None,
        session: Optional[PromptSession] = None,
    ):
        self.handler = handler
        self.proxy = proxy or CommandProxy(handler)
        self.integration = LineEditorIntegration(handler)
        self.last_exit_code = 0
        self.session = session or PromptSession(
            history=InMemoryHistory(),
            key_bindings=self.integration.key_bindings(),
            bottom_toolbar=self.integration.bottom_toolbar,
            style=Style.from_dict({"prompt": "ansicyan bold", "session": "ansigreen"}),
        )

    def get_prompt(self):
        fragments = []
        if self.handler.history.active:
            fragments.append(("class:session", "[session] "))
        fragments.append(("class:prompt", f"psllm {Path.cwd().name or '/'}> "))
        return fragments

    async def run(self):
        ui.console.print("[dim]" + DEFAULT_TOOLBAR + ", exit to quit[/dim]")
        while True:
            try:
                line = await self.session.prompt_async(self.get_prompt)
            except KeyboardInterrupt:
                continue
            except EOFError:
                break
            try:
                if not await self.handle_line(line):
                    break
            except KeyboardInterrupt:
                ui.console.print("[yellow]Cancelled[/yellow]")

    async def handle_line(self, line: str) -> bool:
        """Dispatch one input line. Returns False when the shell should exit."""
        line = line.strip()
        if not line:
            return True

        if line in ("exit", "quit", "/exit", "/quit"):
            return False

        # /usr/bin/env and friends are ordinary commands
        if line.startswith("/") and self.proxy.is_command(line):
            result = self.proxy.execute(line)
            if result:
                ui.console.print(result)
            return True

        if line.startswith("?"):
            question = line[1:].strip()
            if question:
                await self.ask(question)
            return True

        if line == "cd" or line.startswith("cd "):
            self.change_directory(line[2:].strip())
            return True

        self.run_command(line)
        return True

    async def ask(self, question: str):
        """Ask a free-form question; tool calls are confirmed interactively."""
        try:
            if self.handler.tools_active():
                response = await self.handler.chat(question, mode=ResponseMode.CHAT)
            else:
                with ui.console.status(
                    f"[dim]Thinking with {self.handler.config.model}...[/dim]"
                ):
                    response = await self.handler.chat(question, mode=ResponseMode.CHAT)
        except PSLLMError as e:
            ui.console.print(f"[bold red]Error:[/bold red] {e}")
            return
        except KeyboardInterrupt:
            ui.console.print("[yellow]Cancelled[/yellow]")
            return
        render_response(response.content, ui.console, ResponseMode.CHAT, self.handler.config)

    def change_directory(self, target: str):
        path = os.path.expanduser(os.path.expandvars(target or "~"))
        try:
            os.chdir(path)
        except OSError as e:
            ui.console.print(f"[bold red]cd:[/bold red] {e}")

    def run_command(self, command: str) -> int:
        """Run a line through the configured shell with the terminal attached."""
        config = self.handler.config
        executable = config.shell if os.name != "nt" else None
        try:
            self.last_exit_code = subprocess.run(
                command, shell=True, executable=executable
            ).returncode
        except OSError as e:
            ui.console.print(f"[bold red]Error:[/bold red] {e}")
            self.last_exit_code = 127
        except KeyboardInterrupt:
            self.last_exit_code = 130
        return self.last_exit_code
