"""
File ingestion service.

Turns files dropped by the user into ``ProcessedFile`` entities: each file
is added with status ``processing``, classified against the current topics,
then updated in place to ``processed`` (or ``error`` when it cannot be read).
"""

import mimetypes
import uuid
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import structlog

from assistant_core.contracts.entities import FileStatus, ProcessedFile
from assistant_core.contracts.ingestion import IngestResponse, UploadResponse
from assistant_core.contracts.registry import validate_patch
from assistant_core.core.exceptions import ConfigurationError
from assistant_core.data.gateway import AssistantGateway
from assistant_core.services.classification import classify
from assistant_core.store import actions
from assistant_core.store.state import EntityKind
from assistant_core.store.store import Store

logger = structlog.get_logger(__name__)


class IngestionService:
    """Local file processing plus the backend upload/ingest commit."""

    def __init__(self, store: Store, gateway: Optional[AssistantGateway] = None):
        self.store = store
        self.gateway = gateway

    def _update(self, file_id: str, **updates) -> ProcessedFile:
        patch = validate_patch(ProcessedFile, updates)
        self.store.dispatch(actions.update(EntityKind.FILE, file_id, patch))
        return self.store.state.collection(EntityKind.FILE).get(file_id)

    def _start(self, name: str, file_type: str, size: int) -> str:
        file_id = uuid.uuid4().hex
        entity = ProcessedFile(id=file_id, name=name, type=file_type, size=size)
        self.store.dispatch(actions.add(EntityKind.FILE, entity))
        return file_id

    def _finish(self, file_id: str, name: str, content: str) -> ProcessedFile:
        topics = classify(name, content, self.store.state.topics)
        processed = self._update(
            file_id, content=content, topics=topics, status=FileStatus.PROCESSED.value
        )
        logger.info("File processed", file_id=file_id, name=name, topics=list(topics))
        return processed

    def ingest_text(self, name: str, content: str, file_type: str = "text/plain") -> ProcessedFile:
        """Process content that is already in memory."""
        file_id = self._start(name, file_type, len(content.encode("utf-8")))
        return self._finish(file_id, name, content)

    def ingest_file(self, path: Union[str, Path]) -> ProcessedFile:
        """Process one local file; unreadable files end in status ``error``."""
        path = Path(path)
        file_type = mimetypes.guess_type(path.name)[0] or "unknown"
        try:
            size = path.stat().st_size
        except OSError:
            size = 0

        file_id = self._start(path.name, file_type, size)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.error("Failed to read file", path=str(path), error=str(e))
            return self._update(file_id, status=FileStatus.ERROR.value)

        return self._finish(file_id, path.name, content)

    def ingest_files(self, paths: Iterable[Union[str, Path]]) -> List[ProcessedFile]:
        results = [self.ingest_file(path) for path in paths]
        failed = sum(1 for f in results if f.status == FileStatus.ERROR.value)
        logger.info("Ingestion batch complete", total=len(results), failed=failed)
        return results

    def commit(
        self, paths: Iterable[Union[str, Path]], collection: str
    ) -> Tuple[UploadResponse, IngestResponse]:
        """
        Upload files to the backend and commit them into a knowledge-base collection.

        Raises:
            ConfigurationError: The service was built without a gateway
        """
        if self.gateway is None:
            raise ConfigurationError("Committing files requires a data gateway")

        paths = [Path(p) for p in paths]
        upload = self.gateway.upload(paths)
        ingest = self.gateway.ingest([str(p) for p in paths], collection)
        logger.info(
            "Files committed",
            run_id=upload.run_id,
            files=ingest.files,
            chunks_added=ingest.chunks_added,
            collection=collection,
        )
        return upload, ingest
