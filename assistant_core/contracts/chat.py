"""
Chat thread, history and send payloads.

Tool usage, citations and step traces are typed records rather than free-form
blobs; a citation is tagged by the kind of source it points at.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import Field, StrictFloat, StrictInt, StrictStr

from assistant_core.contracts.base import RequestModel, ResponseModel
from assistant_core.contracts.entities import ChatThread


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SourceType(str, Enum):
    """Kind of record a citation or attachment refers to."""

    MEETING = "meeting"
    FILE = "file"
    EMAIL = "email"
    KB = "kb"


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ToolUsage(ResponseModel):
    """One tool invocation made while producing a message."""

    tool: StrictStr
    cost: StrictFloat = Field(default=0.0, ge=0)
    output: Optional[StrictStr] = None


class Citation(ResponseModel):
    id: StrictStr
    type: SourceType
    source_id: StrictStr = Field(alias="sourceId")
    snippet: StrictStr
    title: StrictStr


class AgentStep(ResponseModel):
    """One entry of the assistant's step trace."""

    index: StrictInt = Field(ge=0)
    description: StrictStr
    tool: Optional[StrictStr] = None
    status: StepStatus = StepStatus.COMPLETED


class ChatThreadsResponse(ResponseModel):
    threads: Tuple[ChatThread, ...]


class ChatMessage(ResponseModel):
    role: ChatRole
    text: StrictStr
    ts: StrictStr
    tool_usage: Optional[Tuple[ToolUsage, ...]] = Field(default=None, alias="toolUsage")


class ChatHistoryResponse(ResponseModel):
    messages: Tuple[ChatMessage, ...]


class ChatSendRequest(RequestModel):
    """Send a message; leaving ``thread_id`` unset asks the server for a new thread."""

    thread_id: Optional[StrictStr] = Field(default=None, alias="threadId")
    message: StrictStr


class ChatSendResponse(ResponseModel):
    reply: StrictStr
    citations: Optional[Tuple[Citation, ...]] = None
    steps: Optional[Tuple[AgentStep, ...]] = None
