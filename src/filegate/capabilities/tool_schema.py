"""Schema types for the tool catalog."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolParameter:
    """Definition of a tool parameter."""

    name: str
    type: str  # JSON Schema type
    description: str
    required: bool = True


@dataclass(frozen=True)
class ToolAnnotations:
    """Behaviour hints shown to clients."""

    read_only: bool = False
    destructive: bool = False

    def to_dict(self) -> dict[str, bool]:
        hints: dict[str, bool] = {}
        if self.read_only:
            hints["readOnlyHint"] = True
        if self.destructive:
            hints["destructiveHint"] = True
        return hints


@dataclass
class ToolSchema:
    """Name, description and parameters of one tool."""

    name: str
    description: str
    parameters: list[ToolParameter]
    annotations: ToolAnnotations = field(default_factory=ToolAnnotations)

    @property
    def required(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def to_input_schema(self) -> dict[str, Any]:
        """Build the JSON Schema used as MCP ``inputSchema``.

        Returns:
            JSON Schema dict describing the tool arguments
        """
        properties: dict[str, Any] = {}

        for param in self.parameters:
            param_schema: dict[str, Any] = {
                "type": param.type,
                "description": param.description,
            }
            properties[param.name] = param_schema

        schema: dict[str, Any] = {
            "type": "object",
            "properties": properties,
        }
        if self.required:
            schema["required"] = self.required

        return schema

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.to_input_schema(),
            "annotations": self.annotations.to_dict(),
        }
