"""Prompts defined as JSON files in ``prompts/``.

A prompt file looks like::

    {
      "name": "weather",
      "description": "Ask about the weather",
      "arguments": [{"name": "city", "required": true}],
      "messageTemplates": [
        {"role": "user", "content": [{"type": "text", "text": "Weather in {{city}}?"}]}
      ]
    }

The file is looked up by its base name, so ``prompts/weather.json`` serves
the prompt requested as ``weather``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from filegate.capabilities.base import ChangeNotifier, Unsubscribe, ensure_directory
from filegate.capabilities.templating import render_messages
from filegate.errors import internal_error, invalid_params
from filegate.sandbox.gateway import FileGateway, FileOperation, OperationType

logger = logging.getLogger(__name__)

PROMPTS_DIR = "prompts"
PROMPT_SUFFIX = ".json"


class PromptArgument(BaseModel):
    """Argument declared by a prompt."""

    model_config = ConfigDict(extra="ignore")

    name: str
    description: str | None = None
    required: bool = False


class PromptDefinition(BaseModel):
    """Full prompt file contents."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    description: str | None = None
    arguments: list[PromptArgument] | None = None
    message_templates: list[dict[str, Any]] = Field(default_factory=list, alias="messageTemplates")


def summarize_prompt(data: Any) -> dict[str, Any] | None:
    """Project parsed prompt JSON onto ``{name, description?, arguments?}``.

    Returns:
        The summary, or None when ``data`` has no string ``name``
    """
    if not isinstance(data, dict) or not isinstance(data.get("name"), str):
        return None

    summary: dict[str, Any] = {"name": data["name"]}
    if data.get("description"):
        summary["description"] = str(data["description"])
    if isinstance(data.get("arguments"), list):
        summary["arguments"] = data["arguments"]
    return summary


class PromptManager:
    """Lists and renders prompts stored as JSON files."""

    name = "prompts"
    directory = PROMPTS_DIR

    def __init__(self, gateway: FileGateway) -> None:
        self.gateway = gateway
        self._list_changed: ChangeNotifier[Callable[[], None]] = ChangeNotifier()

    async def initialize(self) -> None:
        await ensure_directory(self.gateway, self.directory, self.name)

    async def cleanup(self) -> None:
        pass

    async def list_prompts(self, cursor: str | None = None) -> dict[str, list[dict[str, Any]]]:
        """List every well-formed prompt file.

        A file that cannot be read, is not valid JSON or has no string
        ``name`` is skipped with a warning.

        Args:
            cursor: Accepted for protocol compatibility; ignored

        Returns:
            ``{"prompts": [{name, description?, arguments?}, ...]}``

        Raises:
            CapabilityError: If the prompts directory cannot be listed
        """
        listed = await self.gateway.handle_operation(FileOperation(OperationType.LIST, self.directory))
        if not listed.success:
            raise internal_error("Failed to list prompts", {"reason": listed.error})

        prompts: list[dict[str, Any]] = []
        for filename in listed.data or []:
            if not filename.endswith(PROMPT_SUFFIX):
                continue

            file_path = f"{self.directory}/{filename}"
            read = await self.gateway.handle_operation(FileOperation(OperationType.READ, file_path))
            if not read.success:
                logger.warning("Skipping %s: failed to read - %s", file_path, read.error)
                continue
            if not read.data:
                continue

            try:
                data = json.loads(read.data)
            except json.JSONDecodeError as e:
                logger.warning("Skipping %s: invalid JSON - %s", file_path, e)
                continue

            summary = summarize_prompt(data)
            if summary is None:
                logger.warning("Skipping %s: missing or invalid 'name' field", file_path)
                continue
            prompts.append(summary)

        return {"prompts": prompts}

    async def get_prompt(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Render a prompt.

        Args:
            name: Prompt file base name
            arguments: Values for the prompt's declared arguments

        Returns:
            ``{"description": str, "messages": [...]}``

        Raises:
            CapabilityError: INVALID_PARAMS for a missing required argument,
                INTERNAL_ERROR when the prompt is absent or malformed
        """
        file_path = f"{self.directory}/{name}{PROMPT_SUFFIX}"
        read = await self.gateway.handle_operation(FileOperation(OperationType.READ, file_path))
        if not read.success or not read.data:
            raise internal_error(f"Prompt {name} not found", {"reason": read.error})

        try:
            definition = PromptDefinition.model_validate_json(read.data)
        except ValidationError as e:
            logger.error("Error processing prompt %s: %s", name, e)
            raise internal_error(f"Failed to process prompt {name}") from e

        for argument in definition.arguments or []:
            if argument.required and (arguments is None or argument.name not in arguments):
                raise invalid_params(f"Missing required argument: {argument.name}")

        return {
            "description": definition.description or "",
            "messages": render_messages(definition.message_templates, arguments),
        }

    def on_prompt_list_changed(self, callback: Callable[[], None]) -> Unsubscribe:
        return self._list_changed.subscribe(callback)
