"""Core type definitions for NodeChord.

This module defines the fundamental data structures used throughout the engine.
All types use Pydantic for validation and serialization.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Role of a message in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Message(BaseModel):
    """A single role-tagged message in a conversation."""

    role: MessageRole = Field(..., description="Role of the message sender")
    content: str = Field(..., description="Content of the message")
    tool_call_id: str | None = Field(
        None, description="ID of the tool call this message responds to"
    )

    @classmethod
    def system(cls, content: str) -> Message:
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=content)


class Usage(BaseModel):
    """Normalized token accounting.

    Providers report different shapes (prompt/completion, input/output,
    promptTokenCount/candidatesTokenCount). Every adapter translates into
    this one record; the input/output fields mirror prompt/completion.
    """

    prompt_tokens: int = Field(0, ge=0)
    completion_tokens: int = Field(0, ge=0)
    total_tokens: int = Field(0, ge=0)
    input_tokens: int = Field(0, ge=0)
    output_tokens: int = Field(0, ge=0)

    @classmethod
    def of(cls, prompt: int | None, completion: int | None, total: int | None = None) -> Usage:
        """Build a usage record from prompt/completion counts."""
        prompt = prompt or 0
        completion = completion or 0
        return cls(
            prompt_tokens=prompt,
            completion_tokens=completion,
            total_tokens=total if total is not None else prompt + completion,
            input_tokens=prompt,
            output_tokens=completion,
        )

    def __add__(self, other: Usage) -> Usage:
        if not isinstance(other, Usage):
            return NotImplemented
        return Usage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )


class ToolCallRecord(BaseModel):
    """One tool invocation made during a node, with its captured outcome."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(None, description="Correlates the request with its result")
    name: str = Field(..., description="Name of the tool invoked")
    arguments: dict[str, Any] = Field(default_factory=dict)
    output: Any = Field(None, description="Tool output, or {'error': ...} on failure")
    type: str | None = Field(None, description="Provider-specific invocation type")
    server_name: str | None = Field(None, serialization_alias="serverName")


class LLMResponse(BaseModel):
    """Normalized response from an LLM provider adapter."""

    content: str = Field(..., description="Generated content")
    model: str = Field(..., description="Model used for generation")
    usage: Usage = Field(default_factory=Usage)
    finish_reason: str = Field("stop", description="Reason for completion")
    tool_calls: list[ToolCallRecord] = Field(
        default_factory=list, description="Tool invocations performed for this response"
    )
    raw_response: dict[str, Any] | None = Field(
        None, description="Raw response from the provider"
    )
