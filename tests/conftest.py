"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path

import pytest

from filegate.config.schema import FileConfig
from filegate.dispatcher import Dispatcher
from filegate.sandbox.gateway import FileGateway
from filegate.sandbox.policy import SandboxPolicy


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Provide an empty workspace root."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def file_config(workspace: Path) -> FileConfig:
    """Allow the workspace with txt, json and md files."""
    return FileConfig(allowed_directories=[str(workspace)], allowed_extensions=["txt", "json", "md"])


@pytest.fixture
def policy(file_config: FileConfig, workspace: Path) -> SandboxPolicy:
    return SandboxPolicy(file_config, base_dir=workspace)


@pytest.fixture
def gateway(policy: SandboxPolicy) -> FileGateway:
    return FileGateway(policy)


@pytest.fixture
async def dispatcher(file_config: FileConfig, workspace: Path) -> Dispatcher:
    """Provide a configured dispatcher rooted at the workspace."""
    d = Dispatcher(base_dir=workspace)
    await d.configure(file_config)
    yield d
    await d.close()


@pytest.fixture
def write_prompt(workspace: Path):
    """Write a prompt definition into prompts/."""

    def _write(filename: str, data) -> Path:
        prompts = workspace / "prompts"
        prompts.mkdir(exist_ok=True)
        path = prompts / filename
        path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def weather_prompt() -> dict:
    """Prompt with one required and one optional argument."""
    return {
        "name": "weather",
        "description": "Ask about the weather",
        "arguments": [
            {"name": "city", "description": "City name", "required": True},
            {"name": "weather", "required": False},
        ],
        "messageTemplates": [
            {
                "role": "user",
                "content": [{"type": "text", "text": "Hello {{city}}, it is {{weather}}"}],
            }
        ],
        "author": "ignored",
    }
