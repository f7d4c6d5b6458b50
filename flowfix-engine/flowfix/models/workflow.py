"""Pydantic models for a normalized n8n workflow document.

These mirror the n8n import/export format exactly, so ``to_n8n()`` output
can be pasted into the editor, downloaded as a file or pushed to the API:

{
    "name": str,
    "nodes": [{"id", "name", "type", "typeVersion", "position", "parameters"}],
    "connections": {"Source": {"main": [[{"node", "type", "index"}], ...]}},
    "settings": {...}
}
"""
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class N8NConnection(BaseModel):
    """A single edge into a target node's input."""

    node: str = Field(..., description="Target node name")
    type: str = Field("main", description="Target input type")
    index: int = Field(0, ge=0, description="Target input index")


class NodeConnections(BaseModel):
    """All outgoing edges of one source node, grouped by output branch."""

    main: list[list[N8NConnection]] = Field(
        default_factory=list,
        description="One list of edges per output branch",
    )

    def targets(self) -> list[str]:
        """Target names across all branches, in branch order."""
        return [conn.node for branch in self.main for conn in branch]


class N8NNode(BaseModel):
    """A workflow node. Unknown keys (credentials, webhookId, ...) are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., description="Unique node identifier")
    name: str = Field(..., description="Unique node name, used as edge key")
    type: str = Field(..., description="n8n node type string")
    type_version: Union[int, float] = Field(
        1,
        alias="typeVersion",
        description="n8n node type version",
    )
    position: list[Union[int, float]] = Field(
        default_factory=lambda: [0, 0],
        description="Canvas coordinates [x, y]",
    )
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="n8n node parameters",
    )


class N8NWorkflow(BaseModel):
    """A complete n8n workflow document."""

    name: str = Field(..., description="Workflow name")
    nodes: list[N8NNode] = Field(..., description="Nodes, entry node first")
    connections: dict[str, NodeConnections] = Field(
        default_factory=dict,
        description="Outgoing edges keyed by source node name",
    )
    settings: dict[str, Any] = Field(
        default_factory=lambda: {"executionOrder": "v1"},
        description="Workflow settings passthrough",
    )

    def get_node(self, name: str) -> Optional[N8NNode]:
        """Get a node by its name."""
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    def to_n8n(self) -> dict:
        """Dump to the n8n JSON wire format."""
        return self.model_dump(by_alias=True, mode="json")
