"""Node executor contract and result types.

Every executor takes a node and the current state and returns a result
carrying the state update it proposes. Executors never modify the state.

Example:
    >>> result = await executor.execute(node, state)
    >>> state = state.apply(result.to_patch())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from nodechord.core.config import EngineSettings, get_settings
from nodechord.core.state import StatePatch, WorkflowNode, WorkflowState
from nodechord.core.types import Message, ToolCallRecord, Usage


class ExecutionResult(BaseModel):
    """Base class for executor results."""

    model_config = ConfigDict(populate_by_name=True)

    @property
    def output(self) -> Any:
        """Value that becomes ``lastOutput``."""
        raise NotImplementedError

    def to_patch(self) -> StatePatch:
        """State update proposed by this result."""
        return StatePatch(variables={"lastOutput": self.output})

    def to_dict(self) -> dict[str, Any]:
        """Camel-cased envelope for callers and UIs."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RemoteToolResult(ExecutionResult):
    """Envelope of a remote-tool node."""

    results: list[dict[str, Any]] = Field(default_factory=list)
    output_value: Any = Field(None, serialization_alias="output")
    tool_calls: list[ToolCallRecord] = Field(default_factory=list, serialization_alias="toolCalls")
    extracted_field: str | None = Field(None, serialization_alias="extractedField")
    servers: list[str] = Field(default_factory=list, serialization_alias="mcpServers")
    error: str | None = None
    fallback: bool = Field(False, serialization_alias="_fallback")

    @property
    def output(self) -> Any:
        return self.output_value

    def to_patch(self) -> StatePatch:
        # lastOutput is only replaced when some server produced data
        produced = self.fallback or any(entry.get("success") for entry in self.results)
        if self.error is not None or not produced:
            return StatePatch()
        return super().to_patch()

    def to_dict(self) -> dict[str, Any]:
        envelope = super().to_dict()
        if not self.fallback:
            envelope.pop("_fallback", None)
        return envelope


class HTTPResult(ExecutionResult):
    """Response of an HTTP node. The whole envelope is the node's output."""

    status: int
    status_text: str = Field("", serialization_alias="statusText")
    headers: dict[str, str] = Field(default_factory=dict)
    data: Any = None
    url: str
    method: str

    @property
    def output(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_dict(self) -> dict[str, Any]:
        return self.output


class AgentResult(ExecutionResult):
    """Output of an agent node and the state updates it proposes."""

    value: Any = None
    tool_calls: list[ToolCallRecord] = Field(default_factory=list, serialization_alias="toolCalls")
    chat_history_updates: list[Message] = Field(
        default_factory=list, serialization_alias="chatHistoryUpdates"
    )
    variable_updates: dict[str, Any] = Field(
        default_factory=dict, serialization_alias="variableUpdates"
    )
    usage: Usage = Field(default_factory=Usage)
    provider: str | None = None
    model: str | None = None
    fallback: bool = Field(False, serialization_alias="_fallback")

    @property
    def output(self) -> Any:
        return self.value

    def to_patch(self) -> StatePatch:
        return StatePatch(
            variables=dict(self.variable_updates),
            chat_history=list(self.chat_history_updates),
        )


class NodeExecutor(ABC):
    """Executes one kind of workflow node.

    Subclasses set ``node_type`` and implement ``execute``.
    """

    node_type: str = ""

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self._settings = settings

    @property
    def settings(self) -> EngineSettings:
        """Explicit settings, else the process-wide ones read at call time."""
        return self._settings or get_settings()

    @abstractmethod
    async def execute(self, node: WorkflowNode, state: WorkflowState) -> ExecutionResult:
        """Run the node against a state snapshot."""
        ...
