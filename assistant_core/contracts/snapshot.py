"""
Persisted state snapshots.

A snapshot is the full JSON image of one product's store. Restoring goes
through these models so a hand-edited or stale file cannot put duplicate ids
or malformed entities into the store. Every collection the product holds
must be present, even when empty.
"""

from __future__ import annotations

from typing import Tuple

from pydantic import Field, model_validator
from pydantic_core import PydanticCustomError

from assistant_core.contracts.base import WireModel
from assistant_core.contracts.entities import (
    BehaviorRule,
    ChatThread,
    DataMode,
    EmailSummary,
    MeetingSummary,
    ProcessedFile,
    Topic,
)


class ErikaSnapshot(WireModel):
    files: Tuple[ProcessedFile, ...]
    topics: Tuple[Topic, ...]
    behavior_rules: Tuple[BehaviorRule, ...] = Field(alias="behaviorRules")

    @model_validator(mode="after")
    def check_unique_ids(self):
        for name, field in type(self).model_fields.items():
            entities = getattr(self, name)
            if not isinstance(entities, tuple):
                continue
            seen = set()
            for index, entity in enumerate(entities):
                entity_id = entity.id
                if entity_id in seen:
                    raise PydanticCustomError(
                        "duplicate_id",
                        "unique id within {collection} (duplicate '{entity_id}')",
                        {
                            "collection": field.alias or name,
                            "entity_id": entity_id,
                            "path": f"{field.alias or name}[{index}].id",
                        },
                    )
                seen.add(entity_id)
        return self


class MarvinSnapshot(ErikaSnapshot):
    chat_threads: Tuple[ChatThread, ...] = Field(alias="chatThreads")
    meetings: Tuple[MeetingSummary, ...]
    emails: Tuple[EmailSummary, ...]
    data_mode: DataMode = Field(alias="dataMode")
