"""
Mock backend: realistic demo payloads served when the data mode is ``mock``.

Payloads are returned in wire shape and still pass through the contract
layer, so the fixtures double as a check that the contracts accept what a
well-behaved server sends.
"""

import copy
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import structlog

from assistant_core.core.exceptions import ApiError

logger = structlog.get_logger(__name__)

MOCK_HEALTH = {"status": "green", "http": "200", "message": "Mock mode active"}

MOCK_MEETINGS = [
    {
        "id": "meeting-1",
        "title": "Q4 Strategy Planning Session",
        "date": "2024-01-15T14:00:00Z",
        "duration": 90,
        "participants": ["Alice Johnson", "Bob Smith", "Carol Williams", "David Brown"],
        "hasTranscript": True,
        "hasActions": True,
        "status": "processed",
    },
    {
        "id": "meeting-2",
        "title": "Product Roadmap Review",
        "date": "2024-01-12T10:30:00Z",
        "duration": 60,
        "participants": ["Eve Davis", "Frank Miller", "Grace Wilson"],
        "hasTranscript": True,
        "hasActions": False,
        "status": "processed",
    },
    {
        "id": "meeting-3",
        "title": "Weekly Team Sync",
        "date": "2024-01-10T09:00:00Z",
        "duration": 30,
        "participants": ["Alice Johnson", "Bob Smith"],
        "hasTranscript": False,
        "hasActions": True,
        "status": "processing",
    },
]

MOCK_EMAILS = [
    {
        "id": "email-1",
        "subject": "Project Timeline Updates",
        "threadId": "thread-1",
        "participants": ["alice@company.com", "bob@company.com", "carol@company.com"],
        "messageCount": 4,
        "lastActivity": "2024-01-16T10:30:00Z",
        "hasActions": True,
    },
    {
        "id": "email-2",
        "subject": "Budget Approval Request",
        "threadId": "thread-2",
        "participants": ["finance@company.com", "manager@company.com"],
        "messageCount": 2,
        "lastActivity": "2024-01-15T16:45:00Z",
        "hasActions": False,
    },
]

# Search results are listed in descending score order
MOCK_KB_ITEMS = [
    {
        "id": "kb-1",
        "title": "Q4 Strategy Planning Session - Key Decisions",
        "score": 0.95,
        "source": "meeting",
        "snippet": "Allocate additional budget to marketing, hire 3 new engineers for product development...",
        "sourceId": "meeting-1",
    },
    {
        "id": "kb-2",
        "title": "Market Analysis Report 2024 - Growth Opportunities",
        "score": 0.89,
        "source": "file",
        "snippet": "23% increase in demand for AI-powered solutions with strong growth potential...",
        "sourceId": "file-1",
    },
    {
        "id": "kb-3",
        "title": "Project Timeline Updates - Resource Constraints",
        "score": 0.76,
        "source": "email",
        "snippet": "Slight delay due to resource constraints, need to discuss alternatives...",
        "sourceId": "email-1",
    },
]

MOCK_THREADS = [
    {"id": "chat-1", "name": "Q4 Strategy Discussion", "updatedAt": "2024-01-16T14:01:00Z"},
    {"id": "chat-2", "name": "Market Research Insights", "updatedAt": "2024-01-15T11:00:00Z"},
]

MOCK_HISTORY = {
    "chat-1": [
        {
            "role": "user",
            "text": "What were the main decisions from our Q4 strategy meeting?",
            "ts": "2024-01-16T14:00:00Z",
        },
        {
            "role": "assistant",
            "text": (
                "Based on the Q4 Strategy Planning Session, there were three main decisions:\n\n"
                "1. **Budget Allocation**: Allocate additional budget to marketing initiatives\n"
                "2. **Team Expansion**: Hire 3 new engineers for product development\n"
                "3. **Customer Experience**: Implement new customer feedback system"
            ),
            "ts": "2024-01-16T14:01:00Z",
            "toolUsage": [{"tool": "kb.search", "cost": 0.002, "output": "3 results"}],
        },
    ],
    "chat-2": [
        {
            "role": "user",
            "text": "Summarize the key findings from our market analysis report",
            "ts": "2024-01-15T11:00:00Z",
        }
    ],
}

MOCK_PROJECTS = [
    {
        "id": "proj-1",
        "name": "Q4 Market Expansion",
        "owner": "Alice Johnson",
        "status": "active",
        "updatedAt": "2024-01-16T09:00:00Z",
    },
    {
        "id": "proj-2",
        "name": "Customer Feedback System",
        "owner": "Carol Williams",
        "status": "planning",
        "updatedAt": "2024-01-14T15:20:00Z",
    },
]

MOCK_PROJECT_DETAILS = {
    "proj-1": {
        "id": "proj-1",
        "name": "Q4 Market Expansion",
        "description": "Increase market share by 15% through targeted marketing and a new product line.",
        "owner": "Alice Johnson",
        "links": [{"title": "Strategy deck", "url": "https://example.com/decks/q4-strategy"}],
        "artifacts": [
            {"id": "art-1", "name": "Market Analysis Report 2024.pdf", "kind": "document"},
            {"id": "art-2", "name": "Financial Projections Q4.xlsx", "kind": "spreadsheet"},
        ],
    },
    "proj-2": {
        "id": "proj-2",
        "name": "Customer Feedback System",
        "description": "Collect and route customer feedback into the product backlog.",
        "owner": "Carol Williams",
    },
}

MOCK_KANBAN = {
    "columns": [
        {
            "id": "todo",
            "title": "To Do",
            "cards": [{"id": "card-3", "title": "Draft hiring plan", "assignee": "Bob Smith"}],
        },
        {
            "id": "doing",
            "title": "In Progress",
            "cards": [
                {
                    "id": "card-2",
                    "title": "Marketing budget proposal",
                    "assignee": "Alice Johnson",
                    "due": "2024-01-31",
                }
            ],
        },
        {"id": "done", "title": "Done", "cards": [{"id": "card-1", "title": "Market analysis"}]},
    ]
}

MOCK_TIMELINE = {
    "items": [
        {
            "id": "ms-1",
            "type": "milestone",
            "title": "Strategy approved",
            "start": "2024-01-15",
            "status": "done",
        },
        {
            "id": "task-1",
            "type": "task",
            "title": "Hire 3 engineers",
            "start": "2024-01-22",
            "end": "2024-03-29",
            "owner": "Bob Smith",
            "status": "in-progress",
            "dependencies": ["ms-1"],
        },
        {
            "id": "ms-2",
            "type": "milestone",
            "title": "New product line launch",
            "start": "2024-12-01",
            "dependencies": ["task-1"],
        },
    ]
}

MOCK_WATCH_PATHS = [
    {"id": "watch-1", "path": "~/Documents/Inbox", "type": "files"},
    {"id": "watch-2", "path": "~/Recordings/Meetings", "type": "meetings"},
]

MOCK_REPLY = (
    "Based on the Q4 Strategy Planning Session, the team agreed to allocate additional "
    "budget to marketing and to hire 3 new engineers for product development."
)

CHUNKS_PER_FILE = 8


class MockProvider:
    """
    In-process stand-in for the backend.

    Watched folders and threads created by ``chat.send`` are kept per
    instance so add/remove round-trips behave like the real service.
    """

    def __init__(self):
        self._threads: List[Dict[str, Any]] = copy.deepcopy(MOCK_THREADS)
        self._watch_paths: List[Dict[str, Any]] = copy.deepcopy(MOCK_WATCH_PATHS)
        self._handlers: Dict[str, Callable[..., Any]] = {
            "ingest": self._ingest,
            "kb.search": self._kb_search,
            "kb.graph": self._kb_graph,
            "chat.threads": self._chat_threads,
            "chat.history": self._chat_history,
            "chat.send": self._chat_send,
            "projects.list": self._projects,
            "projects.detail": self._project_detail,
            "projects.kanban": lambda body, project_id: copy.deepcopy(MOCK_KANBAN),
            "projects.timeline": lambda body, project_id: copy.deepcopy(MOCK_TIMELINE),
            "digest": self._digest,
            "watch.list": self._watch_list,
            "watch.add": self._watch_add,
            "watch.remove": self._watch_remove,
            "schedule.update": lambda body: {"ok": True},
            "meetings.list": lambda body: {"meetings": copy.deepcopy(MOCK_MEETINGS)},
            "emails.list": lambda body: {"emails": copy.deepcopy(MOCK_EMAILS)},
            "health": lambda body: dict(MOCK_HEALTH),
        }

    def respond(self, name: str, body: Optional[Dict[str, Any]] = None, **path_params: str) -> Any:
        """Return the wire payload the backend would send for ``name``."""
        handler = self._handlers.get(name)
        if handler is None:
            raise ApiError(f"Mock backend has no handler for '{name}'", status_code=404)

        logger.debug("Serving mock response", contract=name)
        return handler(body, **path_params)

    def upload(self, paths: Iterable[Path]) -> Dict[str, Any]:
        return {"run_id": f"run-{uuid.uuid4().hex[:12]}", "files_saved": len(list(paths))}

    def _ingest(self, body):
        paths = body["paths"]
        return {"files": len(paths), "chunks_added": CHUNKS_PER_FILE * len(paths)}

    def _kb_search(self, body):
        query = body["query"].lower()
        source = (body.get("filters") or {}).get("type")

        results = []
        for item in MOCK_KB_ITEMS:
            if query and query not in item["title"].lower() and query not in item["snippet"].lower():
                continue
            if source and source != "all" and item["source"] != source:
                continue
            results.append({k: v for k, v in item.items() if k != "sourceId"})
        return {"results": copy.deepcopy(results)}

    def _kb_graph(self, body):
        nodes = [{"id": item["id"], "label": item["title"], "type": "kb"} for item in MOCK_KB_ITEMS]
        nodes += [{"id": m["id"], "label": m["title"], "type": "meeting"} for m in MOCK_MEETINGS[:1]]
        nodes.append({"id": "file-1", "label": "Market Analysis Report 2024.pdf", "type": "file"})
        nodes += [{"id": e["id"], "label": e["subject"], "type": "email"} for e in MOCK_EMAILS[:1]]

        edges = [
            {"from": item["id"], "to": item["sourceId"], "weight": 1.0, "label": "derived from"}
            for item in MOCK_KB_ITEMS
        ]
        edges.append({"from": "kb-1", "to": "kb-2", "weight": 0.6, "label": "related"})
        edges.append({"from": "kb-1", "to": "kb-3", "weight": 0.4, "label": "related"})
        return {"nodes": nodes, "edges": edges}

    def _chat_threads(self, body):
        return {"threads": copy.deepcopy(self._threads)}

    def _chat_history(self, body, thread_id):
        if not any(thread["id"] == thread_id for thread in self._threads):
            raise ApiError(f"Thread {thread_id} not found", status_code=404)
        return {"messages": copy.deepcopy(MOCK_HISTORY.get(thread_id, []))}

    def _chat_send(self, body):
        if body.get("threadId") is None:
            thread_id = f"chat-{uuid.uuid4().hex[:8]}"
            self._threads.insert(
                0, {"id": thread_id, "name": body["message"][:40], "updatedAt": _now()}
            )

        return {
            "reply": MOCK_REPLY,
            "citations": [
                {
                    "id": "cite-1",
                    "type": "meeting",
                    "sourceId": "meeting-1",
                    "snippet": "Allocate additional budget to marketing, hire 3 new engineers...",
                    "title": "Q4 Strategy Planning Session",
                }
            ],
            "steps": [
                {"index": 0, "description": "Search knowledge base", "tool": "kb.search"},
                {"index": 1, "description": "Compose answer"},
            ],
        }

    def _projects(self, body):
        return {"items": copy.deepcopy(MOCK_PROJECTS)}

    def _project_detail(self, body, project_id):
        detail = MOCK_PROJECT_DETAILS.get(project_id)
        if detail is None:
            raise ApiError(f"Project {project_id} not found", status_code=404)
        return copy.deepcopy(detail)

    def _digest(self, body):
        scope = body["scope"]
        if scope == "project" and body.get("id") in MOCK_PROJECT_DETAILS:
            project = MOCK_PROJECT_DETAILS[body["id"]]
            return {
                "sections": [
                    {"title": project["name"], "content": project["description"]},
                    {"title": "Next steps", "content": "Finalize the hiring plan and budget proposal."},
                ]
            }
        return {
            "sections": [
                {
                    "title": "Meetings",
                    "content": f"{len(MOCK_MEETINGS)} meetings this week, 2 with open actions.",
                },
                {
                    "title": "Email",
                    "content": f"{len(MOCK_EMAILS)} active threads; budget approval is pending.",
                    "links": [{"title": "Budget Approval Request", "url": "mailto:finance@company.com"}],
                },
            ]
        }

    def _watch_list(self, body):
        return {"paths": copy.deepcopy(self._watch_paths)}

    def _watch_add(self, body):
        watch_id = f"watch-{uuid.uuid4().hex[:8]}"
        self._watch_paths.append({"id": watch_id, "path": body["path"], "type": body["type"]})
        return {"id": watch_id}

    def _watch_remove(self, body):
        self._watch_paths = [p for p in self._watch_paths if p["id"] != body["id"]]
        return {"ok": True}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
