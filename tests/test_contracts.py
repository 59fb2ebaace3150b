"""
Tests for the wire contract layer.

Checks decode/encode round trips, strict primitive handling, closed enums,
violation paths, and the cross-field rules on graph and snapshot payloads.
"""

import json

import pytest

from assistant_core.contracts import CONTRACTS, Direction, decode, encode, get_contract
from assistant_core.contracts.base import format_path
from assistant_core.contracts.chat import ChatSendRequest
from assistant_core.core.exceptions import SchemaViolation, UnknownContractError

SEARCH_RESPONSE = {
    "results": [{"id": "r1", "title": "Doc", "score": 0.92, "source": "kb", "snippet": "..."}]
}

VALID_RESPONSES = {
    "upload": {"run_id": "run-1", "files_saved": 2},
    "ingest": {"files": 2, "chunks_added": 16},
    "kb.search": SEARCH_RESPONSE,
    "kb.graph": {
        "nodes": [{"id": "a", "label": "A", "type": "kb"}, {"id": "b", "label": "B"}],
        "edges": [{"from": "a", "to": "b", "weight": 0.5, "label": "related"}],
    },
    "chat.threads": {"threads": [{"id": "c1", "name": "Q4", "updatedAt": "2024-01-16T14:01:00Z"}]},
    "chat.history": {
        "messages": [
            {"role": "user", "text": "Hi", "ts": "2024-01-16T14:00:00Z"},
            {
                "role": "assistant",
                "text": "Hello",
                "ts": "2024-01-16T14:00:05Z",
                "toolUsage": [{"tool": "kb.search", "cost": 0.01, "output": "2 results"}],
            },
        ]
    },
    "chat.send": {
        "reply": "Done",
        "citations": [
            {
                "id": "cite-1",
                "type": "meeting",
                "sourceId": "meeting-1",
                "snippet": "Allocate budget",
                "title": "Q4 Strategy",
            }
        ],
        "steps": [{"index": 0, "description": "Search", "tool": "kb.search", "status": "completed"}],
    },
    "projects.list": {
        "items": [{"id": "p1", "name": "Launch", "status": "active", "updatedAt": "2024-01-16"}]
    },
    "projects.detail": {
        "id": "p1",
        "name": "Launch",
        "description": "New product line",
        "owner": "Alice",
        "links": [{"title": "Deck", "url": "https://example.com/deck"}],
        "artifacts": [{"id": "a1", "name": "plan.xlsx", "kind": "spreadsheet"}],
    },
    "projects.kanban": {
        "columns": [{"id": "todo", "title": "To Do", "cards": [{"id": "k1", "title": "Draft"}]}]
    },
    "projects.timeline": {
        "items": [
            {"id": "m1", "type": "milestone", "title": "Kickoff", "start": "2024-01-01"},
            {
                "id": "t1",
                "type": "task",
                "title": "Build",
                "start": "2024-01-02",
                "end": "2024-02-01",
                "dependencies": ["m1"],
            },
        ]
    },
    "digest": {"sections": [{"title": "Summary", "content": "All good"}]},
    "watch.list": {"paths": [{"id": "w1", "path": "/inbox", "type": "files"}]},
    "watch.add": {"id": "w2"},
    "watch.remove": {"ok": True},
    "schedule.update": {"ok": True},
    "meetings.list": {
        "meetings": [
            {
                "id": "meeting-1",
                "title": "Sync",
                "date": "2024-01-10T09:00:00Z",
                "duration": 30,
                "participants": ["Alice"],
                "hasTranscript": False,
                "hasActions": True,
                "status": "processing",
            }
        ]
    },
    "emails.list": {
        "emails": [
            {
                "id": "email-1",
                "subject": "Budget",
                "threadId": "thread-1",
                "participants": ["a@b.com"],
                "messageCount": 2,
                "lastActivity": "2024-01-15T16:45:00Z",
                "hasActions": False,
            }
        ]
    },
    "health": {"status": "green", "http": "200", "message": "ok"},
}

VALID_REQUESTS = {
    "ingest": {"paths": ["/tmp/a.pdf"], "collection": "default"},
    "kb.search": {"query": "budget", "filters": {"type": "file"}},
    "chat.send": {"threadId": "c1", "message": "Hello"},
    "digest": {"scope": "project", "id": "p1"},
    "watch.add": {"path": "/inbox", "type": "meetings"},
    "watch.remove": {"id": "w1"},
    "schedule.update": {
        "target": "files",
        "intervalMinutes": 30,
        "window": {"start": "08:00", "end": "18:00"},
    },
}


class TestSearchScenario:
    """The score scenario for kb.search."""

    def test_numeric_score_decodes(self):
        response = decode("kb.search", SEARCH_RESPONSE)
        assert response.results[0].score == 0.92
        assert response.results[0].id == "r1"

    def test_string_score_is_rejected(self):
        payload = {"results": [dict(SEARCH_RESPONSE["results"][0], score="high")]}
        with pytest.raises(SchemaViolation) as exc_info:
            decode("kb.search", payload)

        violation = exc_info.value
        assert violation.contract == "kb.search"
        assert violation.path == "results[0].score"
        assert violation.expected == "number"

    def test_numeric_string_is_not_coerced(self):
        payload = {"results": [dict(SEARCH_RESPONSE["results"][0], score="0.92")]}
        with pytest.raises(SchemaViolation):
            decode("kb.search", payload)

    def test_server_order_is_kept(self):
        results = [
            {"id": "low", "title": "L", "score": 0.1, "source": "kb", "snippet": ""},
            {"id": "high", "title": "H", "score": 0.9, "source": "kb", "snippet": ""},
        ]
        response = decode("kb.search", {"results": results})
        assert [r.id for r in response.results] == ["low", "high"]


class TestRoundTrip:
    """decode(encode(x)) == x for every registered contract."""

    @pytest.mark.parametrize("name", sorted(VALID_RESPONSES))
    def test_response_round_trip(self, name):
        decoded = decode(name, VALID_RESPONSES[name])
        again = decode(name, encode(name, decoded, Direction.RESPONSE))
        assert again == decoded

    @pytest.mark.parametrize("name", sorted(VALID_REQUESTS))
    def test_request_round_trip(self, name):
        encoded = encode(name, VALID_REQUESTS[name])
        assert encoded == VALID_REQUESTS[name]
        assert decode(name, encoded, Direction.REQUEST).to_wire() == encoded

    def test_every_contract_has_a_fixture(self):
        covered = set(VALID_RESPONSES) | {"snapshot.erika", "snapshot.marvin"}
        assert covered == set(CONTRACTS)

    def test_decode_accepts_json_text(self):
        response = decode("health", json.dumps({"status": "amber", "http": "503"}))
        assert response.status == "amber"
        assert response.message is None
        assert response.healthy is False

    def test_encode_omits_absent_optionals(self):
        assert encode("chat.send", {"message": "Hi"}) == {"message": "Hi"}
        assert encode("chat.send", ChatSendRequest(message="Hi")) == {"message": "Hi"}

    def test_reads_have_no_request_body(self):
        assert encode("chat.threads", None) is None
        with pytest.raises(SchemaViolation):
            encode("chat.threads", {"unexpected": True})


class TestRejection:
    """Missing fields, wrong primitives and unknown enum values are violations."""

    def test_missing_required_field(self):
        with pytest.raises(SchemaViolation) as exc_info:
            decode("upload", {"run_id": "run-1"})
        assert exc_info.value.path == "files_saved"
        assert exc_info.value.expected == "required field"

    def test_int_is_not_a_string(self):
        with pytest.raises(SchemaViolation) as exc_info:
            decode("watch.add", {"id": 1})
        assert exc_info.value.expected == "string"

    def test_int_is_not_a_boolean(self):
        payload = dict(VALID_RESPONSES["meetings.list"]["meetings"][0], hasActions=1)
        with pytest.raises(SchemaViolation) as exc_info:
            decode("meetings.list", {"meetings": [payload]})
        assert exc_info.value.path == "meetings[0].hasActions"

    def test_enum_outside_closed_set(self):
        with pytest.raises(SchemaViolation) as exc_info:
            decode("health", {"status": "blue", "http": "200"})
        assert exc_info.value.path == "status"

    def test_negative_count_rejected(self):
        with pytest.raises(SchemaViolation):
            decode("ingest", {"files": -1, "chunks_added": 0})

    def test_interval_must_be_positive(self):
        request = dict(VALID_REQUESTS["schedule.update"], intervalMinutes=0)
        with pytest.raises(SchemaViolation) as exc_info:
            encode("schedule.update", request)
        assert exc_info.value.path == "intervalMinutes"

    def test_ok_must_be_true(self):
        with pytest.raises(SchemaViolation):
            decode("watch.remove", {"ok": False})

    def test_requests_forbid_unknown_keys(self):
        with pytest.raises(SchemaViolation) as exc_info:
            encode("watch.remove", {"id": "w1", "force": True})
        assert exc_info.value.expected == "no such field"

    def test_responses_ignore_unknown_keys(self):
        response = decode("watch.add", {"id": "w1", "server_version": "2"})
        assert response.to_wire() == {"id": "w1"}

    def test_all_violations_are_reported(self):
        with pytest.raises(SchemaViolation) as exc_info:
            decode("upload", {"run_id": 5, "files_saved": "2"})
        paths = {v["path"] for v in exc_info.value.violations}
        assert paths == {"run_id", "files_saved"}

    def test_non_object_payload(self):
        with pytest.raises(SchemaViolation) as exc_info:
            decode("health", ["green"])
        assert exc_info.value.expected == "object"

    def test_invalid_json_text(self):
        with pytest.raises(SchemaViolation):
            decode("health", "{not json")

    def test_unknown_contract(self):
        with pytest.raises(UnknownContractError):
            get_contract("nope")

    def test_read_contract_has_no_request_side(self):
        with pytest.raises(SchemaViolation):
            decode("health", {}, Direction.REQUEST)


class TestGraph:
    """Node ids are unique and edges reference existing nodes."""

    def test_edge_to_unknown_node(self):
        payload = {
            "nodes": [{"id": "a", "label": "A"}],
            "edges": [{"from": "a", "to": "ghost"}],
        }
        with pytest.raises(SchemaViolation) as exc_info:
            decode("kb.graph", payload)
        assert exc_info.value.path == "edges[0].to"

    def test_duplicate_node_id(self):
        payload = {
            "nodes": [{"id": "a", "label": "A"}, {"id": "a", "label": "Again"}],
            "edges": [],
        }
        with pytest.raises(SchemaViolation) as exc_info:
            decode("kb.graph", payload)
        assert exc_info.value.path == "nodes[1].id"

    def test_neighbours(self):
        graph = decode("kb.graph", VALID_RESPONSES["kb.graph"])
        assert graph.neighbours("a") == ("b",)
        assert graph.neighbours("b") == ("a",)


class TestSnapshotContract:
    def test_duplicate_entity_ids_rejected(self):
        topic = {"id": "1", "name": "Strategy", "keywords": [], "color": "#fff"}
        with pytest.raises(SchemaViolation) as exc_info:
            decode("snapshot.erika", {"files": [], "topics": [topic, topic], "behaviorRules": []})
        assert exc_info.value.path == "topics[1].id"

    def test_every_collection_is_required(self):
        with pytest.raises(SchemaViolation) as exc_info:
            decode("snapshot.erika", {"files": [], "topics": []})
        assert exc_info.value.path == "behaviorRules"
        assert exc_info.value.expected == "required field"

    def test_marvin_snapshot_requires_its_own_collections(self):
        with pytest.raises(SchemaViolation) as exc_info:
            decode("snapshot.marvin", {"files": [], "topics": [], "behaviorRules": []})
        paths = {v["path"] for v in exc_info.value.violations}
        assert paths == {"chatThreads", "meetings", "emails", "dataMode"}

    def test_empty_marvin_snapshot(self):
        snapshot = decode(
            "snapshot.marvin",
            {
                "files": [],
                "topics": [],
                "behaviorRules": [],
                "chatThreads": [],
                "meetings": [],
                "emails": [],
                "dataMode": "live",
            },
        )
        assert snapshot.data_mode == "live"
        assert snapshot.chat_threads == ()

    def test_numeric_timestamp_rejected(self):
        with pytest.raises(SchemaViolation) as exc_info:
            decode(
                "snapshot.erika",
                {
                    "files": [{"id": "f1", "name": "plan.txt", "timestamp": 1700000000}],
                    "topics": [],
                    "behaviorRules": [],
                },
            )
        assert exc_info.value.path == "files[0].timestamp"
        assert exc_info.value.expected == "ISO-8601 datetime"

    def test_iso_timestamp_accepted(self):
        snapshot = decode(
            "snapshot.erika",
            {
                "files": [{"id": "f1", "name": "plan.txt", "timestamp": "2024-01-15T14:00:00Z"}],
                "topics": [],
                "behaviorRules": [],
            },
        )
        assert snapshot.files[0].timestamp.year == 2024


class TestFormatPath:
    def test_nested_path(self):
        assert format_path(("results", 0, "score")) == "results[0].score"
        assert format_path(("window", "start")) == "window.start"
        assert format_path(()) == ""
