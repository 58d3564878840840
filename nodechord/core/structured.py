"""Structured output parsing for agent nodes."""

from __future__ import annotations

import json
from typing import Any

from nodechord.errors.exceptions import OutputFormatError


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_json_output(text: str) -> Any:
    """Parse model output declared as JSON.

    Markdown code fences around the payload are tolerated.

    Raises:
        OutputFormatError: If the text is not valid JSON.
    """
    try:
        return json.loads(_strip_code_fence(text))
    except (json.JSONDecodeError, TypeError) as e:
        raise OutputFormatError(f"Could not parse JSON output: {e}") from e
