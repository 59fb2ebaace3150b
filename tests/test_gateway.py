"""
Tests for the HTTP client and the mode-aware gateway.

The live client runs against ``httpx.MockTransport`` so no request leaves
the process.
"""

import json
from unittest.mock import Mock

import httpx
import pytest

from assistant_core.contracts.entities import DataMode
from assistant_core.core.config import ApiConfig
from assistant_core.core.exceptions import (
    ApiError,
    ConfigurationError,
    ContractError,
    SchemaViolation,
)
from assistant_core.data.api_client import AssistantApiClient
from assistant_core.data.fixtures import MockProvider
from assistant_core.data.gateway import AssistantGateway, create_gateway


def _config(**overrides):
    values = {"ASSISTANT_API_URL": "http://backend.test/", "ASSISTANT_MAX_RETRIES": 1}
    values.update(overrides)
    return ApiConfig(**values)


def _client(handler, **overrides):
    return AssistantApiClient(_config(**overrides), transport=httpx.MockTransport(handler))


class TestApiClient:
    """Live transport behaviour."""

    def test_get_request(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"status": "green", "http": "200"})

        assert _client(handler).call("health") == {"status": "green", "http": "200"}
        assert requests[0].method == "GET"
        assert str(requests[0].url) == "http://backend.test/health"

    def test_post_body_is_encoded_with_wire_names(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True})

        _client(handler).call(
            "schedule.update",
            {"target": "files", "intervalMinutes": 15, "window": {"start": "08:00", "end": "18:00"}},
        )
        assert bodies == [
            {"target": "files", "intervalMinutes": 15, "window": {"start": "08:00", "end": "18:00"}}
        ]

    def test_path_parameters(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={"messages": []})

        _client(handler).call("chat.history", thread_id="chat-1")
        assert urls == ["http://backend.test/chat/threads/chat-1/messages"]

    def test_missing_path_parameter(self):
        client = _client(lambda request: httpx.Response(200, json={}))
        with pytest.raises(ContractError, match="Missing path parameter"):
            client.call("projects.detail")

    def test_chat_goes_through_gateway_url(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={"reply": "hi"})

        client = _client(handler, ASSISTANT_GATEWAY_URL="http://gateway.test/")
        client.call("chat.send", {"message": "Hello"})
        client.call("chat.threads")
        assert urls == ["http://gateway.test/chat/send", "http://backend.test/chat/threads"]

    def test_api_key_header(self):
        headers = []

        def handler(request):
            headers.append(request.headers.get("authorization"))
            return httpx.Response(200, json={})

        _client(handler, ASSISTANT_API_KEY="secret").call("kb.graph")
        assert headers == ["Bearer secret"]

    def test_http_error_raises_api_error(self):
        client = _client(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(ApiError) as exc_info:
            client.call("health")
        assert exc_info.value.status_code == 503

    def test_transport_error_raises_api_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ApiError, match="unreachable"):
            _client(handler).call("health")

    def test_invalid_request_is_not_sent(self):
        handler = Mock()
        with pytest.raises(SchemaViolation):
            _client(handler).call("kb.search", {"query": 42})
        handler.assert_not_called()

    def test_non_json_body_returned_as_text(self):
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        assert client.call("health") == "<html>"

    def test_upload_sends_multipart(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_text("strategic plan")
        seen = []

        def handler(request):
            seen.append(request.headers["content-type"])
            return httpx.Response(200, json={"run_id": "run-1", "files_saved": 1})

        assert _client(handler).upload([path]) == {"run_id": "run-1", "files_saved": 1}
        assert seen[0].startswith("multipart/form-data")


class TestGatewayMockMode:
    """Mock mode is served entirely from fixtures."""

    def test_mock_mode_never_calls_client(self):
        client = Mock()
        gateway = AssistantGateway(client=client, mode=DataMode.MOCK)

        health = gateway.health()
        assert health.status == "green"
        assert health.message == "Mock mode active"
        client.call.assert_not_called()

    def test_every_fixture_satisfies_its_contract(self, mock_gateway):
        assert len(mock_gateway.list_meetings().meetings) == 3
        assert len(mock_gateway.list_emails().emails) == 2
        assert [t.id for t in mock_gateway.list_threads().threads] == ["chat-1", "chat-2"]
        assert mock_gateway.thread_history("chat-1").messages[1].tool_usage[0].tool == "kb.search"
        assert mock_gateway.graph().neighbours("kb-1") == ("meeting-1", "kb-2", "kb-3")
        assert mock_gateway.list_projects().items[0].id == "proj-1"
        assert mock_gateway.project("proj-1").artifacts[1].kind == "spreadsheet"
        assert len(mock_gateway.kanban("proj-1").columns) == 3
        assert mock_gateway.timeline("proj-1").items[0].type == "milestone"
        assert mock_gateway.digest("global").sections[0].title == "Meetings"
        assert mock_gateway.digest("project", "proj-1").sections[0].title == "Q4 Market Expansion"
        assert mock_gateway.update_schedule("files", 30, "08:00", "18:00").ok is True

    def test_search_filters_by_query_and_source(self, mock_gateway):
        results = mock_gateway.search("budget").results
        assert [r.id for r in results] == ["kb-1"]

        results = mock_gateway.search("", {"type": "email"}).results
        assert [r.id for r in results] == ["kb-3"]

    def test_send_without_thread_creates_one(self, mock_gateway):
        response = mock_gateway.send_message("Plan the offsite")
        assert response.citations[0].type == "meeting"
        assert response.steps[0].tool == "kb.search"
        assert len(mock_gateway.list_threads().threads) == 3

    def test_watch_add_and_remove(self, mock_gateway):
        watch_id = mock_gateway.add_watch_path("/data/inbox", "files").id
        assert watch_id in [p.id for p in mock_gateway.list_watch_paths().paths]

        assert mock_gateway.remove_watch_path(watch_id).ok is True
        assert watch_id not in [p.id for p in mock_gateway.list_watch_paths().paths]

    def test_upload_and_ingest(self, mock_gateway, tmp_path):
        upload = mock_gateway.upload([tmp_path / "a.txt", tmp_path / "b.txt"])
        assert upload.files_saved == 2
        ingest = mock_gateway.ingest(["a.txt", "b.txt"], "default")
        assert ingest.files == 2
        assert ingest.chunks_added == 16

    def test_unknown_project(self, mock_gateway):
        with pytest.raises(ApiError) as exc_info:
            mock_gateway.project("missing")
        assert exc_info.value.status_code == 404

    def test_missing_path_parameter(self, mock_gateway):
        with pytest.raises(ContractError, match="Missing path parameter"):
            mock_gateway.request("chat.history")

    def test_invalid_request_rejected_before_dispatch(self, mock_gateway):
        with pytest.raises(SchemaViolation):
            mock_gateway.update_schedule("files", 0, "08:00", "18:00")
        with pytest.raises(SchemaViolation):
            mock_gateway.add_watch_path("/inbox", "emails")


class TestGatewayLiveMode:
    """Live mode calls the client and falls back on transport failures only."""

    def test_live_mode_decodes_client_payload(self):
        client = Mock()
        client.call.return_value = {"status": "amber", "http": "200", "message": "degraded"}
        gateway = AssistantGateway(client=client, mode=DataMode.LIVE)

        health = gateway.health()
        assert health.status == "amber"
        client.call.assert_called_once_with("health", None)

    def test_falls_back_to_mock_on_api_error(self):
        client = Mock()
        client.call.side_effect = ApiError("down", status_code=502)
        gateway = AssistantGateway(client=client, mode=DataMode.LIVE, fallback_to_mock=True)

        assert gateway.health().message == "Mock mode active"

    def test_api_error_propagates_without_fallback(self):
        client = Mock()
        client.call.side_effect = ApiError("down", status_code=502)
        gateway = AssistantGateway(client=client, mode=DataMode.LIVE, fallback_to_mock=False)

        with pytest.raises(ApiError):
            gateway.health()

    def test_contract_violation_never_falls_back(self):
        client = Mock()
        client.call.return_value = {
            "results": [{"id": "r1", "title": "Doc", "score": "high", "source": "kb", "snippet": ""}]
        }
        gateway = AssistantGateway(client=client, mode=DataMode.LIVE, fallback_to_mock=True)

        with pytest.raises(SchemaViolation) as exc_info:
            gateway.search("doc")
        assert exc_info.value.path == "results[0].score"

    def test_live_mode_without_client(self):
        gateway = AssistantGateway(mode=DataMode.LIVE)
        with pytest.raises(ConfigurationError):
            gateway.health()

    def test_mode_follows_callable(self):
        client = Mock()
        client.call.return_value = {"status": "red", "http": "500"}
        mode = {"current": DataMode.MOCK}
        gateway = AssistantGateway(client=client, mode=lambda: mode["current"])

        assert gateway.health().status == "green"
        mode["current"] = DataMode.LIVE
        assert gateway.health().status == "red"

    def test_missing_path_parameter_never_falls_back(self):
        handler = Mock()
        gateway = AssistantGateway(
            client=_client(handler), mode=DataMode.LIVE, fallback_to_mock=True
        )

        with pytest.raises(ContractError, match="project_id"):
            gateway.request("projects.detail")
        handler.assert_not_called()

    def test_end_to_end_fallback_over_http(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        gateway = AssistantGateway(client=_client(handler), mode=DataMode.LIVE)
        threads = gateway.list_threads().threads
        assert [t.id for t in threads] == ["chat-1", "chat-2"]


class TestCreateGateway:
    def test_uses_configured_mode(self, monkeypatch):
        monkeypatch.setenv("ASSISTANT_DATA_MODE", "live")
        monkeypatch.setenv("ASSISTANT_FALLBACK_TO_MOCK", "false")
        gateway = create_gateway()
        assert gateway.mode == DataMode.LIVE
        assert gateway.fallback_to_mock is False

    def test_mode_override(self):
        assert create_gateway(mode="live").mode == DataMode.LIVE
        assert isinstance(create_gateway().mock, MockProvider)
