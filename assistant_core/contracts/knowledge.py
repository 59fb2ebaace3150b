"""
Knowledge-base search and graph payloads.

Search results keep the order the server sent them in (descending relevance
by server contract); nothing here re-sorts them.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import Field, StrictFloat, StrictStr, model_validator
from pydantic_core import PydanticCustomError

from assistant_core.contracts.base import RequestModel, ResponseModel


class KBSearchRequest(RequestModel):
    query: StrictStr
    filters: Optional[Dict[StrictStr, StrictStr]] = None


class KBSearchResult(ResponseModel):
    id: StrictStr
    title: StrictStr
    score: StrictFloat
    source: StrictStr
    snippet: StrictStr


class KBSearchResponse(ResponseModel):
    results: Tuple[KBSearchResult, ...]


class KBGraphNode(ResponseModel):
    id: StrictStr
    label: StrictStr
    type: Optional[StrictStr] = None


class KBGraphEdge(ResponseModel):
    from_: StrictStr = Field(alias="from")
    to: StrictStr
    weight: Optional[StrictFloat] = None
    label: Optional[StrictStr] = None


class KBGraphResponse(ResponseModel):
    """Graph view of the knowledge base; node ids are unique and edges reference them."""

    nodes: Tuple[KBGraphNode, ...]
    edges: Tuple[KBGraphEdge, ...]

    @model_validator(mode="after")
    def check_references(self):
        node_ids = set()
        for index, node in enumerate(self.nodes):
            if node.id in node_ids:
                raise PydanticCustomError(
                    "duplicate_node",
                    "unique node id (duplicate '{node}')",
                    {"node": node.id, "path": f"nodes[{index}].id"},
                )
            node_ids.add(node.id)

        for index, edge in enumerate(self.edges):
            for end, wire_name in ((edge.from_, "from"), (edge.to, "to")):
                if end not in node_ids:
                    raise PydanticCustomError(
                        "unknown_node",
                        "id of an existing node (got '{node}')",
                        {"node": end, "path": f"edges[{index}].{wire_name}"},
                    )
        return self

    def neighbours(self, node_id: str) -> Tuple[str, ...]:
        """Ids of nodes connected to ``node_id`` in either direction."""
        found = []
        for edge in self.edges:
            if edge.from_ == node_id:
                found.append(edge.to)
            elif edge.to == node_id:
                found.append(edge.from_)
        return tuple(dict.fromkeys(found))
