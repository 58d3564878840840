"""NodeChord core components."""

from nodechord.core.types import (
    LLMResponse,
    Message,
    MessageRole,
    ToolCallRecord,
    Usage,
)
from nodechord.core.config import EngineSettings, ProviderKeys, get_settings
from nodechord.core.state import StatePatch, WorkflowNode, WorkflowState
from nodechord.core.structured import parse_json_output
from nodechord.core.templating import substitute_deep, substitute_variables

__all__ = [
    "Message",
    "MessageRole",
    "ToolCallRecord",
    "Usage",
    "LLMResponse",
    "EngineSettings",
    "ProviderKeys",
    "get_settings",
    "WorkflowNode",
    "WorkflowState",
    "StatePatch",
    "parse_json_output",
    "substitute_variables",
    "substitute_deep",
]
