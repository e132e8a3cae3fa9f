"""Helpers for building MCP tool results."""

from __future__ import annotations

from mcp import types
from pydantic import ValidationError


def text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    """Wrap a text payload in a CallToolResult with one text content item."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def describe_validation_error(exc: ValidationError) -> str:
    """Render a pydantic ValidationError as ``field: message`` lines."""
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "arguments"
        lines.append(f"{location}: {error['msg']}")
    return "Invalid arguments:\n" + "\n".join(f"- {line}" for line in lines)
