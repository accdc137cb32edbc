"""Placeholder substitution for prompt message templates.

Text items may contain ``{{argument}}`` placeholders. Supplied arguments are
substituted globally, one key at a time in mapping order, and every
placeholder left afterwards is removed. Because keys are applied one after
another, a supplied value that itself contains ``{{other}}`` is expanded only
if ``other`` comes later in the mapping; otherwise it is stripped as an
unfilled placeholder.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

# Non-greedy and single-line: "{{a}} and {{b}}" is two placeholders
PLACEHOLDER_PATTERN = re.compile(r"\{\{.*?\}\}")


def stringify(value: Any) -> str:
    """Render an argument value for insertion into text."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def render_text(text: str, arguments: Mapping[str, Any] | None = None) -> str:
    """Fill placeholders in ``text`` and strip the unfilled ones.

    Args:
        text: Template text
        arguments: Argument values keyed by placeholder name

    Returns:
        Text with no ``{{...}}`` placeholders left
    """
    for key, value in (arguments or {}).items():
        text = text.replace("{{" + key + "}}", stringify(value))
    return PLACEHOLDER_PATTERN.sub("", text)


def render_content_item(item: Any, arguments: Mapping[str, Any] | None) -> Any:
    if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str):
        return {**item, "text": render_text(item["text"], arguments)}
    return item


def render_messages(
    templates: list[dict[str, Any]],
    arguments: Mapping[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """Render every message template.

    Only list-valued ``content`` is processed; text items are rendered and
    every other item (images, resources) is passed through as is. Messages
    whose content is not a list are returned unchanged.

    Args:
        templates: Message templates as loaded from the prompt file
        arguments: Argument values

    Returns:
        New list of rendered messages (templates are not modified)
    """
    messages: list[dict[str, Any]] = []
    for template in templates:
        content = template.get("content")
        if isinstance(content, list):
            rendered = [render_content_item(item, arguments) for item in content]
            messages.append({**template, "content": rendered})
        else:
            messages.append(template)
    return messages
