"""Model command implementation for switching models."""

from typing import TYPE_CHECKING, List

from ..command_proxy import Command

if TYPE_CHECKING:
    from ..llm_handler import LLMHandler


class ModelCommand(Command):
    """Command to show or override the model for this process."""

    def execute(self, args: List[str], handler: "LLMHandler") -> str:
        config = handler.config

        if not args:
            output = "Current Configuration:\n"
            output += f"  Endpoint: {config.endpoint}\n"
            output += f"  Model: {config.model}\n"
            output += f"  API Key: {'✓ Set' if config.api_key else '✗ Not set'}\n"
            if handler.model_override:
                output += "  (model overridden for this process, '/model reset' to undo)\n"
            return output.strip()

        model_name = args[0].strip()
        if model_name.lower() == "reset":
            handler.set_model(None)
            return f"Model reset to {handler.config.model}"

        handler.set_model(model_name)
        return f"Switched to model {model_name}"

    def get_help(self) -> str:
        return """Show or switch models:
  /model                   - Show endpoint and model
  /model <name>            - Use another model for this process
  /model reset             - Go back to the configured model"""
