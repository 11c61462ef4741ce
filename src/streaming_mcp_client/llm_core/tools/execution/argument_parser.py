"""Decoding of accumulated tool-call argument strings."""

import json
from typing import Any, Dict

from ...exceptions import IncompleteArgumentsError, InvalidArgumentsError


def is_truncated(text: str) -> bool:
    """Whether ``text`` stops inside a JSON string or with unclosed brackets.

    Args:
        text: The raw arguments string.

    Returns:
        True if some string, object or array was opened and never closed.
    """
    depth = 0
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth < 0:
                return False
    return in_string or depth > 0


def parse_tool_arguments(raw_arguments: str, tool_name: str = "unknown") -> Dict[str, Any]:
    """Decode the concatenated arguments of one tool call.

    An empty (or whitespace-only) string and JSON ``null`` decode to an empty object.

    Args:
        raw_arguments: The arguments string accumulated across chunks.
        tool_name: Name of the tool, for error reporting.

    Returns:
        The decoded arguments object.

    Raises:
        IncompleteArgumentsError: If the payload was cut off before it was closed.
        InvalidArgumentsError: If the payload is complete but malformed, or not an object.
    """
    if not raw_arguments or not raw_arguments.strip():
        return {}

    try:
        parsed = json.loads(raw_arguments)
    except json.JSONDecodeError as exc:
        at_end = exc.pos >= len(raw_arguments.rstrip())
        if at_end or is_truncated(raw_arguments):
            raise IncompleteArgumentsError(
                f"Incomplete JSON arguments for tool '{tool_name}': {exc}",
                tool_name=tool_name,
                raw_arguments=raw_arguments,
            ) from exc
        raise InvalidArgumentsError(
            f"Invalid JSON arguments for tool '{tool_name}': {exc}",
            tool_name=tool_name,
            raw_arguments=raw_arguments,
        ) from exc

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise InvalidArgumentsError(
            f"Arguments for tool '{tool_name}' must decode to a JSON object, got {type(parsed).__name__}.",
            tool_name=tool_name,
            raw_arguments=raw_arguments,
        )

    return parsed
