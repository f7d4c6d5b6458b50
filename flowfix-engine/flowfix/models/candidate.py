"""Shape-coercion boundary for untrusted LLM output.

``coerce_candidate`` is the only place that inspects the raw JSON value.
Whatever it returns has the container shapes the repair stages rely on,
so they never have to re-check ``isinstance`` on top-level fields.
"""
from typing import Any

from pydantic import BaseModel, Field

from flowfix.errors import MalformedGraphError

DEFAULT_WORKFLOW_NAME = "Generated Workflow"
DEFAULT_SETTINGS = {"executionOrder": "v1"}


class CandidateGraph(BaseModel):
    """A raw candidate with guaranteed top-level shapes.

    Individual nodes and edges are still untrusted dicts at this point.
    """

    name: str
    nodes: list[dict] = Field(..., min_length=1)
    connections: dict = Field(default_factory=dict)
    settings: dict = Field(default_factory=lambda: dict(DEFAULT_SETTINGS))


def coerce_candidate(
    raw: Any,
    default_name: str = DEFAULT_WORKFLOW_NAME,
) -> CandidateGraph:
    """Coerce an arbitrary parsed JSON value into a ``CandidateGraph``.

    Raises:
        MalformedGraphError: If there is no usable, non-empty node list.
    """
    if not isinstance(raw, dict):
        raise MalformedGraphError(
            f"Invalid workflow: expected an object, got {type(raw).__name__}"
        )

    name = raw.get("name")
    if not isinstance(name, str):
        name = default_name

    raw_nodes = raw.get("nodes")
    if isinstance(raw_nodes, dict):
        # LLMs sometimes emit {"Node A": {...}, "Node B": {...}}
        raw_nodes = list(raw_nodes.values())
    if not isinstance(raw_nodes, list):
        raise MalformedGraphError("Invalid workflow: nodes is missing or not a list")
    if not raw_nodes:
        raise MalformedGraphError("Invalid workflow: no nodes")

    connections = raw.get("connections")
    if not isinstance(connections, dict):
        connections = {}

    settings = raw.get("settings")
    if not isinstance(settings, dict):
        settings = dict(DEFAULT_SETTINGS)

    return CandidateGraph(
        name=name,
        nodes=[_coerce_node(node) for node in raw_nodes],
        connections=connections,
        settings=settings,
    )


def _coerce_node(raw_node: Any) -> dict:
    if isinstance(raw_node, dict):
        return dict(raw_node)
    if isinstance(raw_node, str):
        return {"name": raw_node}
    return {}
