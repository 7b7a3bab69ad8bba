"""Configuration management for PSLLM with multi-source loading."""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from pydantic import BaseModel, Field, validator

ENV_PREFIX = "PSLLM_"
OPENAI_ENDPOINT = "https://api.openai.com/v1"


class PSLLMError(Exception):
    """Base class for PSLLM errors."""


class ConfigurationError(PSLLMError):
    """Configuration-related errors."""

    pass


class LogLevel(str, Enum):
    """Available logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ColorMode(str, Enum):
    """Console color handling."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


def _default_shell() -> str:
    if os.name == "nt":
        return os.environ.get("COMSPEC", "cmd.exe")
    return os.environ.get("SHELL") or "/bin/sh"


class PSLLMConfig(BaseModel):
    """Settings record resolved from defaults, config file and environment."""

    # API Configuration
    endpoint: str = Field(
        default=OPENAI_ENDPOINT, description="Chat-completions API base URL"
    )
    api_key: Optional[str] = Field(default=None, description="API key for endpoint")
    model: str = Field(default="gpt-4o-mini", description="Model name")
    max_tokens: int = Field(default=1024, description="Maximum completion tokens")
    temperature: float = Field(default=0.2, description="Sampling temperature")
    request_timeout: float = Field(
        default=60.0, description="HTTP request timeout in seconds"
    )

    # Tool Configuration
    tools_enabled: bool = Field(
        default=False, description="Declare the execute_command tool by default"
    )
    require_confirmation: bool = Field(
        default=True, description="Require user confirmation for tool calls"
    )
    command_timeout: int = Field(
        default=30, description="Command execution timeout in seconds"
    )
    max_tool_rounds: int = Field(
        default=3, description="Maximum follow-up requests after tool calls"
    )
    max_tool_output_chars: int = Field(
        default=8000, description="Truncate captured command output to this size"
    )
    shell: str = Field(
        default_factory=_default_shell, description="Shell used to run commands"
    )

    # History Configuration
    session_history_size: int = Field(
        default=20, description="Maximum messages kept in the session"
    )
    command_history_size: int = Field(
        default=10, description="Generated commands kept for cycling"
    )
    command_candidates: int = Field(
        default=3, description="Alternative commands requested per prompt"
    )

    # Output Configuration
    color: ColorMode = Field(default=ColorMode.AUTO, description="Color mode")
    show_debug: bool = Field(default=False, description="Show debug information")
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")

    @validator("api_key", pre=True)
    def validate_api_key(cls, v):
        """Strip whitespace, treat blank keys as missing."""
        if v is None:
            return None
        # TOML files may hold a bare number
        return str(v).strip() or None

    @validator("endpoint", pre=True)
    def normalize_endpoint(cls, v):
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @validator(
        "session_history_size",
        "command_history_size",
        "command_candidates",
        "max_tool_output_chars",
    )
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @validator("max_tool_rounds", "command_timeout")
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("must not be negative")
        return v

    def uses_public_openai(self) -> bool:
        return self.endpoint.startswith(OPENAI_ENDPOINT)

    def validate_current_setup(self) -> bool:
        """Validate that the endpoint is usable with the configured key."""
        if not self.endpoint.startswith(("http://", "https://")):
            return False
        if self.uses_public_openai():
            return self.api_key is not None and len(self.api_key.strip()) > 0
        return True


def get_config_paths() -> List[Path]:
    """Config files, most specific first."""
    paths = [Path.home() / ".psllm" / "config.toml"]
    if os.name == "nt":
        program_data = os.environ.get("ProgramData", "C:/ProgramData")
        paths.append(Path(program_data) / "psllm" / "config.toml")
    elif os.name == "posix":
        paths.append(Path("/etc/psllm/config.toml"))
    return paths


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """Load configuration from a TOML file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}")


_TRUE_WORDS = ("true", "yes", "on")
_FALSE_WORDS = ("false", "no", "off")


def _coerce_env_value(name: str, value: str) -> Any:
    """Convert by the target field's type; other fields keep the string."""
    field = PSLLMConfig.model_fields.get(name)
    annotation = field.annotation if field is not None else None

    if annotation is bool:
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    elif annotation is int:
        try:
            return int(value)
        except ValueError:
            pass
    return value


def load_environment_variables() -> Dict[str, Any]:
    """Settings from PSLLM_* variables, keyed by lower-cased field name."""
    config = {}
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX) and len(key) > len(ENV_PREFIX):
            name = key[len(ENV_PREFIX) :].lower()
            config[name] = _coerce_env_value(name, value)
    return config


def load_configuration(
    config_file: Optional[str] = None,
    debug: bool = False,
    model_override: Optional[str] = None,
) -> PSLLMConfig:
    """Load configuration from multiple sources with priority handling.

    Called on every request so that environment changes apply immediately.

    Priority order (highest to lowest):
    1. Function parameters (config_file, debug, model_override)
    2. Environment variables (PSLLM_*)
    3. User config file (~/.psllm/config.toml)
    4. System config file (/etc/psllm/config.toml)
    5. Default values
    """
    merged_config: Dict[str, Any] = {}

    config_paths = get_config_paths()
    if config_file:
        config_paths.insert(0, Path(config_file))

    for path in reversed(config_paths):  # Reverse to maintain priority
        merged_config.update(load_config_file(path))

    merged_config.update(load_environment_variables())

    if debug:
        merged_config["show_debug"] = True
        merged_config["log_level"] = LogLevel.DEBUG

    if model_override:
        merged_config["model"] = model_override

    try:
        config = PSLLMConfig(**merged_config)
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")

    if not config.api_key:
        config.api_key = os.environ.get("OPENAI_API_KEY") or None

    return config


def save_config(config: PSLLMConfig, config_path: Optional[Path] = None) -> bool:
    """Save configuration to file."""
    if config_path is None:
        config_path = Path.home() / ".psllm" / "config.toml"

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        # The API key never goes to disk
        config_dict = config.model_dump(exclude_none=True, exclude={"api_key"})

        # Convert enums to their string values for TOML serialization
        for key, value in config_dict.items():
            if hasattr(value, "value"):
                config_dict[key] = value.value

        with open(config_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)

        return True

    except OSError:
        return False


def validate_api_setup(config: PSLLMConfig) -> None:
    """Validate that the endpoint and key are usable."""
    if not config.endpoint.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"Invalid endpoint '{config.endpoint}'. "
            f"Set {ENV_PREFIX}ENDPOINT to an http(s) URL."
        )
    if not config.validate_current_setup():
        raise ConfigurationError(
            "No API key configured for the OpenAI endpoint. "
            f"Set {ENV_PREFIX}API_KEY or OPENAI_API_KEY environment variable."
        )
