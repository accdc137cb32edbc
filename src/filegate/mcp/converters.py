"""Converters from dispatcher payloads to MCP SDK types."""

from __future__ import annotations

from typing import Any

from mcp import types

DEFAULT_ROLE = "user"


def to_mcp_tool(tool: dict[str, Any]) -> types.Tool:
    """Convert a ``tools/list`` entry to an MCP Tool.

    Args:
        tool: Dict with name, description, inputSchema and annotations

    Returns:
        MCP Tool instance
    """
    annotations = tool.get("annotations") or {}
    return types.Tool(
        name=tool["name"],
        description=tool.get("description"),
        inputSchema=tool["inputSchema"],
        annotations=types.ToolAnnotations(**annotations) if annotations else None,
    )


def to_text_contents(result: dict[str, Any]) -> list[types.TextContent]:
    """Extract text content items from a ``tools/call`` result."""
    contents: list[types.TextContent] = []
    for item in result.get("content", []):
        if item.get("type") == "text":
            contents.append(types.TextContent(type="text", text=item.get("text", "")))
    return contents


def to_mcp_resource(resource: dict[str, Any]) -> types.Resource:
    return types.Resource(
        uri=resource["uri"],
        name=resource["name"],
        mimeType=resource.get("mimeType"),
    )


def to_mcp_resource_template(template: dict[str, Any]) -> types.ResourceTemplate:
    return types.ResourceTemplate(
        uriTemplate=template["uriTemplate"],
        name=template["name"],
        description=template.get("description"),
        mimeType=template.get("mimeType"),
    )


def to_mcp_prompt(prompt: dict[str, Any]) -> types.Prompt:
    """Convert a ``prompts/list`` entry to an MCP Prompt.

    Argument entries without a string name are dropped.
    """
    arguments = [
        types.PromptArgument(
            name=arg["name"],
            description=arg.get("description"),
            required=bool(arg.get("required", False)),
        )
        for arg in prompt.get("arguments") or []
        if isinstance(arg, dict) and isinstance(arg.get("name"), str)
    ]
    return types.Prompt(
        name=prompt["name"],
        description=prompt.get("description"),
        arguments=arguments or None,
    )


def to_prompt_messages(messages: list[dict[str, Any]]) -> list[types.PromptMessage]:
    """Convert rendered message templates to MCP prompt messages.

    MCP prompt messages carry a single content block, so a template with a
    list of content items becomes one message per item, in order.

    Args:
        messages: Rendered templates (``{role, content}``)

    Returns:
        List of PromptMessage instances
    """
    result: list[types.PromptMessage] = []
    for message in messages:
        role = message.get("role", DEFAULT_ROLE)
        content = message.get("content")
        items = content if isinstance(content, list) else [content]
        for item in items:
            if item is None:
                continue
            result.append(types.PromptMessage.model_validate({"role": role, "content": item}))
    return result
