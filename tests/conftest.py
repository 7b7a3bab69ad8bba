"""Test configuration for pytest."""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from psllm.config import PSLLMConfig
from psllm.llm_handler import LLMHandler, LLMResponse


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, temp_dir):
    """Keep the developer's PSLLM settings and config file out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("PSLLM_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("HOME", str(temp_dir / "home"))
    monkeypatch.setenv("SHELL", "/bin/sh")
    yield


@pytest.fixture
def sample_config():
    """Create a sample configuration for testing."""
    return PSLLMConfig(
        endpoint="http://localhost:8080/v1",
        api_key="test-key-123",
        model="test-model",
        tools_enabled=False,
        require_confirmation=True,
        session_history_size=10,
        command_candidates=3,
        shell="/bin/sh",
    )


@pytest.fixture
def mock_provider():
    """A provider whose generate_response is an AsyncMock."""
    provider = MagicMock()
    provider.generate_response = AsyncMock(
        return_value=LLMResponse(content="ls -la", tool_calls=[], model="test-model")
    )
    return provider


@pytest.fixture
def handler(sample_config, mock_provider):
    """LLM handler wired to the mock provider, confirming every command."""
    handler = LLMHandler(sample_config, confirm=MagicMock(return_value=True))
    handler.provider = mock_provider
    return handler
