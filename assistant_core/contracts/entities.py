"""
Entity records held by the state store.

These are the same shapes the backend sends for chat threads, meetings and
emails, so the store and the contract layer share one definition.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Tuple

from pydantic import AfterValidator, BeforeValidator, Field, StrictBool, StrictInt, StrictStr
from pydantic_core import PydanticCustomError

from assistant_core.contracts.base import ResponseModel


def _require_iso_timestamp(v):
    if isinstance(v, datetime):
        return v
    if isinstance(v, str) and not v.strip().replace(".", "", 1).isdigit():
        return v
    raise PydanticCustomError("datetime_type", "Input should be an ISO-8601 datetime string")


# Carried by the field annotation, so validate_patch applies them as well
TopicIds = Annotated[Tuple[StrictStr, ...], AfterValidator(lambda v: tuple(dict.fromkeys(v)))]
IsoTimestamp = Annotated[datetime, BeforeValidator(_require_iso_timestamp)]


class FileStatus(str, Enum):
    """Processing status of an uploaded file."""

    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


class DataMode(str, Enum):
    """Whether backend calls are served from local fixtures or the live API."""

    MOCK = "mock"
    LIVE = "live"


class ProcessedFile(ResponseModel):
    """A file the user uploaded, with its topic classification."""

    id: StrictStr
    name: StrictStr
    content: StrictStr = ""
    topics: TopicIds = ()
    timestamp: IsoTimestamp = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: FileStatus = FileStatus.PROCESSING
    type: StrictStr = "unknown"
    size: StrictInt = Field(default=0, ge=0)



class Topic(ResponseModel):
    """A classification topic and the keywords that select it."""

    id: StrictStr
    name: StrictStr
    keywords: Tuple[StrictStr, ...] = ()
    color: StrictStr = "#6b7280"


class BehaviorRule(ResponseModel):
    """An output rule the assistant applies when its condition holds."""

    id: StrictStr
    name: StrictStr
    condition: StrictStr
    action: StrictStr
    enabled: StrictBool = True


class ChatThread(ResponseModel):
    id: StrictStr
    name: StrictStr
    updated_at: StrictStr = Field(alias="updatedAt")


class MeetingSummary(ResponseModel):
    """Server-side meeting digest listed in the meetings view."""

    id: StrictStr
    title: StrictStr
    date: StrictStr
    duration: StrictInt = Field(ge=0)
    participants: Tuple[StrictStr, ...] = ()
    has_transcript: StrictBool = Field(default=False, alias="hasTranscript")
    has_actions: StrictBool = Field(default=False, alias="hasActions")
    status: FileStatus = FileStatus.PROCESSED


class EmailSummary(ResponseModel):
    """Server-side email thread digest listed in the inbox view."""

    id: StrictStr
    subject: StrictStr
    thread_id: StrictStr = Field(alias="threadId")
    participants: Tuple[StrictStr, ...] = ()
    message_count: StrictInt = Field(default=0, ge=0, alias="messageCount")
    last_activity: StrictStr = Field(alias="lastActivity")
    has_actions: StrictBool = Field(default=False, alias="hasActions")
