"""Variable substitution for node configuration.

Placeholders look like ``{{name}}`` or ``{{name.path.to.value}}`` and are
resolved against the state's variables. Unknown placeholders are left intact,
so substituting an already-substituted string is a no-op.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from nodechord.core.state import WorkflowState

TEMPLATE_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][\w\-]*(?:\.[\w\-]+)*)\s*\}\}")

_MISSING = object()


def _variables_of(state: WorkflowState | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(state, WorkflowState):
        return state.variables
    return state


def _lookup(variables: Mapping[str, Any], path: list[str]) -> Any:
    if path[0] not in variables:
        return _MISSING
    value = variables[path[0]]
    for key in path[1:]:
        if isinstance(value, Mapping) and key in value:
            value = value[key]
        elif isinstance(value, list) and key.isdigit() and int(key) < len(value):
            value = value[int(key)]
        else:
            return _MISSING
    return value


def _render(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def substitute_variables(text: str, state: WorkflowState | Mapping[str, Any]) -> str:
    """Replace ``{{...}}`` placeholders in text with values from state.

    Args:
        text: Template string.
        state: Workflow state or a plain variables mapping.

    Returns:
        String with resolvable placeholders substituted.
    """
    if not text or "{{" not in text:
        return text
    variables = _variables_of(state)

    def replacer(match: re.Match) -> str:
        value = _lookup(variables, match.group(1).split("."))
        if value is _MISSING:
            return match.group(0)
        return _render(value)

    return TEMPLATE_PATTERN.sub(replacer, text)


def substitute_deep(value: Any, state: WorkflowState | Mapping[str, Any]) -> Any:
    """Recursively substitute every string leaf and every mapping key."""
    if isinstance(value, str):
        return substitute_variables(value, state)
    if isinstance(value, dict):
        return {
            substitute_variables(str(k), state): substitute_deep(v, state)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [substitute_deep(item, state) for item in value]
    return value
