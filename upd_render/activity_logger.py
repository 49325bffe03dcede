"""High-level helpers for structured logging of generated documents."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

_ACTIVITY_LOGGER_NAME = "activity"


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False)
    except TypeError:
        return repr(value)


def _format_details(details: Mapping[str, Any]) -> str:
    lines: list[str] = []
    for key, value in details.items():
        title = key.replace("_", " ").strip() or "значение"
        lines.append(f"- **{title.title()}:** {_stringify(value)}")
    return "\n".join(lines)


def format_event(action: str, details: Optional[Mapping[str, Any]] = None) -> str:
    body_lines = [f"#### {action}"]
    if details:
        formatted = _format_details(details)
        if formatted:
            body_lines.append("")
            body_lines.append(formatted)
    return "\n".join(body_lines)


def log_render_event(
    action: str,
    *,
    details: Optional[Mapping[str, Any]] = None,
    level: int = logging.INFO,
) -> None:
    """Log a document generation event with optional structured details."""

    logger = logging.getLogger(_ACTIVITY_LOGGER_NAME)
    logger.log(level, format_event(action, details))
