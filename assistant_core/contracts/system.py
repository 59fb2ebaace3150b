"""Health and server-synced listing payloads."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import StrictStr

from assistant_core.contracts.base import ResponseModel
from assistant_core.contracts.entities import EmailSummary, MeetingSummary


class HealthLevel(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"


class HealthStatus(ResponseModel):
    status: HealthLevel
    http: StrictStr
    message: Optional[StrictStr] = None

    @property
    def healthy(self) -> bool:
        return self.status == HealthLevel.GREEN.value


class MeetingsResponse(ResponseModel):
    meetings: Tuple[MeetingSummary, ...]


class EmailsResponse(ResponseModel):
    emails: Tuple[EmailSummary, ...]
