"""Folder-watch and ingestion schedule payloads."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Tuple

from pydantic import Field, StrictInt, StrictStr

from assistant_core.contracts.base import RequestModel, ResponseModel


class WatchTarget(str, Enum):
    """What a watched folder feeds: documents or meeting recordings."""

    FILES = "files"
    MEETINGS = "meetings"


class WatchPath(ResponseModel):
    id: StrictStr
    path: StrictStr
    type: WatchTarget


class WatchListResponse(ResponseModel):
    paths: Tuple[WatchPath, ...]


class WatchAddRequest(RequestModel):
    path: StrictStr
    type: WatchTarget


class WatchAddResponse(ResponseModel):
    id: StrictStr


class WatchRemoveRequest(RequestModel):
    id: StrictStr


class ScheduleWindow(RequestModel):
    """Daily window (``HH:MM``) during which scheduled ingestion may run."""

    start: StrictStr
    end: StrictStr


class ScheduleUpdateRequest(RequestModel):
    target: WatchTarget
    interval_minutes: StrictInt = Field(gt=0, alias="intervalMinutes")
    window: ScheduleWindow


class SuccessResponse(ResponseModel):
    ok: Literal[True]
