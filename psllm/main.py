"""Main entry point for the PSLLM command-line interface."""

import asyncio
import sys
from typing import List, Optional

import typer
from rich.markdown import Markdown
from rich.panel import Panel

from . import ui
from .command_proxy import CommandProxy
from .config import (
    ColorMode,
    ConfigurationError,
    PSLLMConfig,
    PSLLMError,
    load_configuration,
    validate_api_setup,
)
from .context import read_piped_input
from .formatting import render_response
from .llm_handler import LLMHandler
from .request_builder import ResponseMode

app = typer.Typer(
    name="psllm",
    help="PSLLM - shell commands from natural language",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=False,
)


def show_welcome():
    """Display welcome message with usage instructions."""
    welcome_text = """
# PSLLM - Shell Commands from Natural Language

## Generate commands
```bash
psllm find files larger than 100MB under the current directory
git log | psllm summarize what changed this week --chat
psllm "tar -czf" --context "compress the logs directory"
```

## Interactive shell
```bash
psllm --shell
```
Type a description or a partial command and press **Ctrl+G**.
Press it again to cycle through the alternatives.

## Quick Start
1. Point at an endpoint: `export PSLLM_ENDPOINT="http://localhost:8080/v1"`
   or set `OPENAI_API_KEY` for the OpenAI API
2. Try: `psllm list listening tcp ports`
3. Or: `psllm /help` for built-in commands
    """

    ui.console.print(
        Panel(
            Markdown(welcome_text),
            title="[bold blue]PSLLM[/bold blue]",
            border_style="blue",
        )
    )


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        from . import __version__

        ui.console.print(f"PSLLM version {__version__}")
        raise typer.Exit()


def show_config_callback(value: bool):
    """Show current configuration and exit."""
    if value:
        try:
            config = load_configuration()
        except ConfigurationError as e:
            ui.console.print(f"[bold red]Error loading configuration:[/bold red] {e}")
            raise typer.Exit(1)

        ui.console.print("\n[bold blue]PSLLM Configuration[/bold blue]")
        ui.console.print(f"Endpoint: [cyan]{config.endpoint}[/cyan]")
        ui.console.print(f"Model: [cyan]{config.model}[/cyan]")
        ui.console.print(
            f"API Key: [green]{'✓ Set' if config.api_key else '✗ Not set'}[/green]"
        )
        ui.console.print(
            f"Tools: [cyan]{'Enabled' if config.tools_enabled else 'Disabled'}[/cyan]"
        )
        ui.console.print(
            f"Confirmation required: [cyan]{'Yes' if config.require_confirmation else 'No'}[/cyan]"
        )
        ui.console.print(
            f"Session history size: [cyan]{config.session_history_size}[/cyan]"
        )
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    query: List[str] = typer.Argument(
        None, help="Task description or partial command. Use /command for built-ins."
    ),
    context: List[str] = typer.Option(
        None, "--context", "-x", help="Extra context appended to the prompt"
    ),
    chat: bool = typer.Option(
        False, "--chat", help="Ask a free-form question instead of generating commands"
    ),
    tools: Optional[bool] = typer.Option(
        None,
        "--tools/--no-tools",
        "-t/-T",
        help="Let the model execute commands (each one is confirmed)",
    ),
    count: Optional[int] = typer.Option(
        None, "--count", "-n", min=1, help="Number of alternative commands"
    ),
    shell: bool = typer.Option(
        False, "--shell", "-s", help="Start the interactive shell"
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug output and detailed error information",
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config-file", "-c", help="Path to custom configuration file"
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Override the model"
    ),
    no_confirm: bool = typer.Option(
        False,
        "--no-confirm",
        "-y",
        help="Skip confirmation for non-destructive tool commands",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Minimize output, show only results"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version information and exit.",
    ),
    show_config: Optional[bool] = typer.Option(
        None,
        "--show-config",
        callback=show_config_callback,
        is_eager=True,
        help="Show current configuration and exit.",
    ),
):
    """Generate shell commands or answers from natural language."""
    if not query and not shell:
        show_welcome()
        raise typer.Exit()

    def load() -> PSLLMConfig:
        config = load_configuration(
            config_file=config_file, debug=debug, model_override=model
        )
        if count:
            config.command_candidates = count
        if no_confirm:
            config.require_confirmation = False
        return config

    try:
        config = load()
        ui.configure_console(config)
        ui.setup_logging(config)

        input_text = " ".join(query or [])

        if input_text.startswith("/"):
            handler = LLMHandler(config)
            execute_command_mode(input_text, handler, quiet)
            return

        validate_api_setup(config)

        if shell:
            handler = LLMHandler(config, config_loader=load)
            if tools is not None:
                handler.set_tools(tools)
            asyncio.run(run_shell(handler))
            return

        handler = LLMHandler(config)
        piped = read_piped_input(sys.stdin)
        mode = ResponseMode.CHAT if chat else ResponseMode.COMMAND
        asyncio.run(
            execute_llm_mode(
                input_text,
                handler,
                mode=mode,
                context=context,
                piped=piped,
                use_tools=tools,
                quiet=quiet,
            )
        )

    except ConfigurationError as e:
        handle_error(e, debug)
        ui.console.print(
            "\n[bold]Tip:[/bold] Set PSLLM_ENDPOINT and PSLLM_API_KEY, "
            "or run `psllm --show-config`."
        )
        raise typer.Exit(1)
    except PSLLMError as e:
        handle_error(e, debug)
        raise typer.Exit(1)


def execute_command_mode(input_text: str, handler: LLMHandler, quiet: bool = False):
    """Execute command in proxy mode."""
    proxy = CommandProxy(handler)
    result = proxy.execute(input_text)

    if result:
        display_result(result, handler.config, quiet)


async def execute_llm_mode(
    input_text: str,
    handler: LLMHandler,
    mode: ResponseMode = ResponseMode.COMMAND,
    context=None,
    piped=None,
    use_tools: Optional[bool] = None,
    quiet: bool = False,
):
    """Send one request and print the commands or the answer."""
    # A spinner would hide the confirmation prompt
    if quiet or handler.tools_active(use_tools):
        response = await handler.chat(
            input_text, context=context, piped=piped, mode=mode, use_tools=use_tools
        )
    else:
        with ui.console.status(f"[dim]Thinking with {handler.config.model}...[/dim]"):
            response = await handler.chat(
                input_text, context=context, piped=piped, mode=mode, use_tools=use_tools
            )

    if mode == ResponseMode.COMMAND and not response.commands:
        ui.console.print("[yellow]No command generated.[/yellow]")
        if response.content and not quiet:
            ui.console.print(response.content, markup=False)
        return response

    render_response(
        response.content, ui.console, mode, handler.config, commands=response.commands
    )
    return response


async def run_shell(handler: LLMHandler):
    """Run the interactive line-editor shell."""
    from .line_editor import InteractiveShell

    await InteractiveShell(handler).run()


def display_result(result: str, config: PSLLMConfig, quiet: bool = False):
    """Display result with appropriate formatting."""
    if not result:
        return

    if quiet:
        ui.console.print(result)
    elif config.color != ColorMode.NEVER:
        ui.console.print()
        ui.console.print(
            Panel(result, title="[bold green]Result[/bold green]", border_style="green")
        )
    else:
        ui.console.print("\n[bold green]Result:[/bold green]")
        ui.console.print(result)


def handle_error(error: Exception, debug: bool = False):
    """Handle and display errors with appropriate formatting."""
    if debug:
        ui.console.print("\n[bold red]Debug Error Details:[/bold red]")
        ui.console.print_exception()
    else:
        ui.console.print(f"\n[bold red]Error:[/bold red] {str(error)}")
        ui.console.print("[dim]Use --debug for more details[/dim]")


def run():
    app()


if __name__ == "__main__":
    run()
