"""Project, kanban, timeline and digest payloads."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import Field, StrictStr

from assistant_core.contracts.base import RequestModel, ResponseModel


class TimelineItemType(str, Enum):
    MILESTONE = "milestone"
    TASK = "task"


class DigestScope(str, Enum):
    PROJECT = "project"
    TOPIC = "topic"
    GLOBAL = "global"


class ArtifactKind(str, Enum):
    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    PRESENTATION = "presentation"
    IMAGE = "image"
    OTHER = "other"


class Link(ResponseModel):
    title: StrictStr
    url: StrictStr


class Artifact(ResponseModel):
    """A deliverable attached to a project."""

    id: StrictStr
    name: StrictStr
    kind: ArtifactKind = ArtifactKind.OTHER
    url: Optional[StrictStr] = None


class ProjectItem(ResponseModel):
    id: StrictStr
    name: StrictStr
    owner: Optional[StrictStr] = None
    status: StrictStr
    updated_at: StrictStr = Field(alias="updatedAt")


class ProjectsResponse(ResponseModel):
    items: Tuple[ProjectItem, ...]


class ProjectDetail(ResponseModel):
    id: StrictStr
    name: StrictStr
    description: StrictStr
    owner: StrictStr
    links: Optional[Tuple[Link, ...]] = None
    artifacts: Optional[Tuple[Artifact, ...]] = None


class KanbanCard(ResponseModel):
    id: StrictStr
    title: StrictStr
    assignee: Optional[StrictStr] = None
    due: Optional[StrictStr] = None


class KanbanColumn(ResponseModel):
    id: StrictStr
    title: StrictStr
    cards: Tuple[KanbanCard, ...]


class KanbanResponse(ResponseModel):
    columns: Tuple[KanbanColumn, ...]


class TimelineItem(ResponseModel):
    id: StrictStr
    type: TimelineItemType
    title: StrictStr
    start: StrictStr
    end: Optional[StrictStr] = None
    owner: Optional[StrictStr] = None
    status: Optional[StrictStr] = None
    dependencies: Optional[Tuple[StrictStr, ...]] = None


class TimelineResponse(ResponseModel):
    items: Tuple[TimelineItem, ...]


class DigestRequest(RequestModel):
    """Ask for a digest; ``id`` names the project or topic for scoped digests."""

    scope: DigestScope
    id: Optional[StrictStr] = None


class DigestSection(ResponseModel):
    title: StrictStr
    content: StrictStr
    links: Optional[Tuple[Link, ...]] = None


class DigestResponse(ResponseModel):
    sections: Tuple[DigestSection, ...]
