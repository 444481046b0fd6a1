"""Convert Pydantic validation errors to the PaginateError contract."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from models.errors import PaginateError, create_validation_error

_VALUE_ERROR_PREFIX = "Value error, "


def _field_path(loc: tuple[Any, ...]) -> str:
    """Render a location like ``("pipeline", 1, "$match")`` as ``pipeline[1].$match``."""
    path = ""
    for part in loc:
        if part == "__root__":
            continue
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path


def _issue_message(issue: dict[str, Any]) -> str:
    message = issue.get("msg") or "Invalid input"
    if message.startswith(_VALUE_ERROR_PREFIX):
        message = message[len(_VALUE_ERROR_PREFIX):]
    return message


def map_pydantic_validation_error(error: ValidationError) -> PaginateError:
    """
    Map a tool request ValidationError to a VALIDATION_ERROR.

    The first issue is reported by field path; any further issues are
    summarized as a count so the message stays one line.
    """
    issues = error.errors()
    if not issues:
        return create_validation_error("Invalid input")

    first = issues[0]
    field = _field_path(tuple(first.get("loc", ())))
    message = _issue_message(first)
    if field:
        message = f"Invalid {field}: {message}"

    remaining = len(issues) - 1
    if remaining:
        message += f" (and {remaining} more issue{'s' if remaining > 1 else ''})"
    return create_validation_error(message)
