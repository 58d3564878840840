"""Workflow node and execution state.

Executors never mutate a WorkflowState. Each returns a StatePatch describing
the variables to merge and the chat turns to append, and the caller folds it
in with ``WorkflowState.apply``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from nodechord.core.types import Message


@dataclass(frozen=True)
class WorkflowNode:
    """A single pipeline step, read-only for the duration of a run."""

    id: str
    type: str  # "agent", "mcp", "http"
    data: dict[str, Any] = field(default_factory=dict)
    position: dict[str, float] | None = None

    @property
    def name(self) -> str | None:
        """Declared display name of the node."""
        return self.data.get("nodeName") or self.data.get("name")


class StatePatch(BaseModel):
    """Merge instructions produced by one executor."""

    variables: dict[str, Any] = Field(default_factory=dict)
    chat_history: list[Message] = Field(default_factory=list)


class WorkflowState(BaseModel):
    """Immutable snapshot of a run's variables and chat history."""

    model_config = ConfigDict(frozen=True)

    variables: dict[str, Any] = Field(default_factory=lambda: {"input": None, "lastOutput": None})
    chat_history: list[Message] = Field(default_factory=list)

    @classmethod
    def start(cls, input: Any, **variables: Any) -> WorkflowState:
        """Create the initial state of a run."""
        return cls(variables={**variables, "input": input, "lastOutput": input})

    @property
    def input(self) -> Any:
        return self.variables.get("input")

    @property
    def last_output(self) -> Any:
        return self.variables.get("lastOutput")

    def apply(self, patch: StatePatch) -> WorkflowState:
        """Return a new snapshot with the patch merged in."""
        return self.model_copy(
            update={
                "variables": {**self.variables, **patch.variables},
                "chat_history": [*self.chat_history, *patch.chat_history],
            }
        )
