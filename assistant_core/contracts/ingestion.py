"""Upload and ingestion payloads."""

from __future__ import annotations

from typing import Tuple

from pydantic import Field, StrictInt, StrictStr

from assistant_core.contracts.base import RequestModel, ResponseModel


class UploadResponse(ResponseModel):
    run_id: StrictStr
    files_saved: StrictInt = Field(ge=0)


class IngestRequest(RequestModel):
    """Commit previously uploaded paths into a knowledge-base collection."""

    paths: Tuple[StrictStr, ...]
    collection: StrictStr


class IngestResponse(ResponseModel):
    files: StrictInt = Field(ge=0)
    chunks_added: StrictInt = Field(ge=0)
