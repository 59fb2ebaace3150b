"""
Data gateway: one entry point for every backend operation, honouring the data mode.

In mock mode requests never leave the process. In live mode a transport
failure falls back to the mock backend when configured to; a payload that
breaks its contract is never papered over.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Union

import structlog

from assistant_core.contracts.base import WireModel
from assistant_core.contracts.chat import (
    ChatHistoryResponse,
    ChatSendResponse,
    ChatThreadsResponse,
)
from assistant_core.contracts.entities import DataMode
from assistant_core.contracts.ingestion import IngestResponse, UploadResponse
from assistant_core.contracts.knowledge import KBGraphResponse, KBSearchResponse
from assistant_core.contracts.projects import (
    DigestResponse,
    KanbanResponse,
    ProjectDetail,
    ProjectsResponse,
    TimelineResponse,
)
from assistant_core.contracts.registry import Payload, decode, encode
from assistant_core.contracts.system import EmailsResponse, HealthStatus, MeetingsResponse
from assistant_core.contracts.watch import (
    SuccessResponse,
    WatchAddResponse,
    WatchListResponse,
)
from assistant_core.core.config import Settings, get_settings
from assistant_core.core.exceptions import ApiError, CircuitBreakerError, ConfigurationError
from assistant_core.data.api_client import AssistantApiClient, endpoint_path
from assistant_core.data.fixtures import MockProvider

logger = structlog.get_logger(__name__)

ModeSource = Union[DataMode, str, Callable[[], Optional[Union[DataMode, str]]]]


class AssistantGateway:
    """Routes contract calls to the live client or the mock backend."""

    def __init__(
        self,
        client: Optional[AssistantApiClient] = None,
        mock: Optional[MockProvider] = None,
        mode: ModeSource = DataMode.MOCK,
        fallback_to_mock: bool = True,
    ):
        self.client = client
        self.mock = mock or MockProvider()
        self.fallback_to_mock = fallback_to_mock
        self._mode = mode

    @property
    def mode(self) -> DataMode:
        """Current data mode; re-read on every call when bound to a store."""
        value = self._mode() if callable(self._mode) else self._mode
        return DataMode(value or DataMode.MOCK)

    def _fetch(self, name: str, live: Callable[[], Any], mock: Callable[[], Any]) -> WireModel:
        mode = self.mode
        if mode == DataMode.MOCK:
            return decode(name, mock())

        if self.client is None:
            raise ConfigurationError(
                "Live data mode requires an API client", details={"contract": name}
            )

        try:
            raw = live()
        except (ApiError, CircuitBreakerError) as e:
            if not self.fallback_to_mock:
                raise
            logger.warning(
                "Live API call failed, serving mock data",
                contract=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raw = mock()
        return decode(name, raw)

    def request(self, name: str, body: Optional[Payload] = None, **path_params: str) -> WireModel:
        """
        Perform contract ``name`` and return the decoded response.

        The request body is validated before anything is sent, in either mode.

        Raises:
            SchemaViolation: The request or the response breaks the contract
            ContractError: A path parameter of the endpoint is missing
            ApiError: The live call failed and fallback is disabled
        """
        payload = encode(name, body)
        endpoint_path(name, **path_params)
        return self._fetch(
            name,
            live=lambda: self.client.call(name, payload, **path_params),
            mock=lambda: self.mock.respond(name, payload, **path_params),
        )

    def health(self) -> HealthStatus:
        return self.request("health")

    def list_meetings(self) -> MeetingsResponse:
        return self.request("meetings.list")

    def list_emails(self) -> EmailsResponse:
        return self.request("emails.list")

    def list_threads(self) -> ChatThreadsResponse:
        return self.request("chat.threads")

    def thread_history(self, thread_id: str) -> ChatHistoryResponse:
        return self.request("chat.history", thread_id=thread_id)

    def send_message(self, message: str, thread_id: Optional[str] = None) -> ChatSendResponse:
        return self.request("chat.send", {"threadId": thread_id, "message": message})

    def search(self, query: str, filters: Optional[Dict[str, str]] = None) -> KBSearchResponse:
        return self.request("kb.search", {"query": query, "filters": filters})

    def graph(self) -> KBGraphResponse:
        return self.request("kb.graph")

    def upload(self, paths: Iterable[Union[str, Path]]) -> UploadResponse:
        paths = [Path(p) for p in paths]
        return self._fetch(
            "upload",
            live=lambda: self.client.upload(paths),
            mock=lambda: self.mock.upload(paths),
        )

    def ingest(self, paths: Iterable[str], collection: str) -> IngestResponse:
        return self.request("ingest", {"paths": list(paths), "collection": collection})

    def list_projects(self) -> ProjectsResponse:
        return self.request("projects.list")

    def project(self, project_id: str) -> ProjectDetail:
        return self.request("projects.detail", project_id=project_id)

    def kanban(self, project_id: str) -> KanbanResponse:
        return self.request("projects.kanban", project_id=project_id)

    def timeline(self, project_id: str) -> TimelineResponse:
        return self.request("projects.timeline", project_id=project_id)

    def digest(self, scope: str, scope_id: Optional[str] = None) -> DigestResponse:
        return self.request("digest", {"scope": scope, "id": scope_id})

    def list_watch_paths(self) -> WatchListResponse:
        return self.request("watch.list")

    def add_watch_path(self, path: str, target: str) -> WatchAddResponse:
        return self.request("watch.add", {"path": path, "type": target})

    def remove_watch_path(self, watch_id: str) -> SuccessResponse:
        return self.request("watch.remove", {"id": watch_id})

    def update_schedule(
        self, target: str, interval_minutes: int, start: str, end: str
    ) -> SuccessResponse:
        return self.request(
            "schedule.update",
            {
                "target": target,
                "intervalMinutes": interval_minutes,
                "window": {"start": start, "end": end},
            },
        )


def create_gateway(
    settings: Optional[Settings] = None, mode: Optional[ModeSource] = None
) -> AssistantGateway:
    """Build a gateway from configuration; ``mode`` overrides the configured data mode."""
    settings = settings or get_settings()
    return AssistantGateway(
        client=AssistantApiClient(settings.api),
        mode=mode if mode is not None else settings.store.data_mode,
        fallback_to_mock=settings.api.fallback_to_mock,
    )
