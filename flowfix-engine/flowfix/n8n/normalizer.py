"""Normalizer to repair LLM-generated n8n workflow JSON.

The normalizer handles:
- Coercing the top-level shape (name, nodes, connections, settings)
- Canonicalizing nodes (ids, unique names, types, versions, positions)
- Enforcing exactly one entry node, placed first
- Rebuilding connections so every node is reachable
- Serializing connections with IF/Switch branch conventions
- Re-laying out nodes whose positions collide

Only a candidate without a usable node list is rejected. Every other
defect is repaired, and the repair is recorded in the report.
"""
import copy
import math
from typing import Any, Callable, Optional
from uuid import uuid4

import structlog
from pydantic import BaseModel, Field

from flowfix.config import Settings, get_settings
from flowfix.models.candidate import DEFAULT_WORKFLOW_NAME, CandidateGraph, coerce_candidate
from flowfix.models.workflow import N8NNode, N8NWorkflow
from flowfix.n8n.connections import (
    add_backbone,
    add_missing_incoming,
    build_edge_map,
    serialize_edge_map,
)
from flowfix.n8n.expressions import sanitize_expressions
from flowfix.n8n.layout import LayoutConfig, placeholder_position, repair_layout
from flowfix.n8n.node_kinds import NodeKindRules, default_node_kind_rules
from flowfix.n8n.validator import validate_workflow

logger = structlog.get_logger()

# Keys the normalizer owns; anything else on a node passes through
_NODE_FIELDS = {"id", "name", "type", "typeVersion", "type_version", "position", "parameters"}


class RepairReport(BaseModel):
    """A normalized workflow plus the repairs applied to produce it."""

    workflow: N8NWorkflow
    repairs: list[str] = Field(default_factory=list)


class WorkflowNormalizer:
    """Repairs candidate workflow JSON into a valid n8n workflow.

    Instances only hold immutable configuration, so one normalizer can be
    shared freely between threads and requests.
    """

    def __init__(
        self,
        rules: Optional[NodeKindRules] = None,
        layout: Optional[LayoutConfig] = None,
        id_factory: Optional[Callable[[], str]] = None,
        default_name: str = DEFAULT_WORKFLOW_NAME,
    ):
        """Initialize normalizer.

        Args:
            rules: Node-kind tables and classification heuristics.
            layout: Grid used when node positions collide.
            id_factory: Source of fresh node ids; inject a deterministic one
                for reproducible output.
            default_name: Workflow name used when the candidate has none.
        """
        self.rules = rules or default_node_kind_rules()
        self.layout = layout or LayoutConfig()
        self.id_factory = id_factory or (lambda: str(uuid4()))
        self.default_name = default_name

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> "WorkflowNormalizer":
        """Build a normalizer from application settings."""
        settings = settings or get_settings()
        layout = LayoutConfig(
            origin_x=settings.layout_origin_x,
            origin_y=settings.layout_origin_y,
            column_gap=settings.layout_column_gap,
            row_gap=settings.layout_row_gap,
            columns=settings.layout_columns,
            max_attempts=settings.layout_max_attempts,
        )
        kwargs.setdefault("layout", layout)
        kwargs.setdefault("default_name", settings.default_workflow_name)
        return cls(**kwargs)

    def repair(self, candidate: Any) -> N8NWorkflow:
        """Repair a candidate into a valid workflow.

        Raises:
            MalformedGraphError: If the candidate has no usable node list.
        """
        return self.repair_with_report(candidate).workflow

    def repair_with_report(self, candidate: Any) -> RepairReport:
        """Repair a candidate and report every change made along the way."""
        if isinstance(candidate, N8NWorkflow):
            candidate = candidate.to_n8n()

        graph = coerce_candidate(candidate, default_name=self.default_name)
        logger.info("normalize_start", workflow_name=graph.name, node_count=len(graph.nodes))

        repairs: list[str] = []
        if graph.name != (candidate.get("name") if isinstance(candidate, dict) else None):
            repairs.append(f"named workflow {graph.name!r}")

        nodes = self._canonicalize_nodes(graph, repairs)
        nodes = self._enforce_entry_node(nodes, repairs)
        connections = self._build_connections(nodes, graph.connections, repairs)
        self._repair_layout(nodes, repairs)

        workflow = N8NWorkflow(
            name=graph.name,
            nodes=[N8NNode.model_validate(node) for node in nodes],
            connections=connections,
            settings=copy.deepcopy(graph.settings),
        )

        errors = validate_workflow(workflow.to_n8n(), self.rules)
        if errors:
            logger.warning("normalize_integrity_errors", errors=errors)

        logger.info(
            "normalize_complete",
            node_count=len(workflow.nodes),
            connection_count=sum(len(c.targets()) for c in workflow.connections.values()),
            repair_count=len(repairs),
        )

        return RepairReport(workflow=workflow, repairs=repairs)

    # =========================================================================
    # NODE CANONICALIZATION
    # =========================================================================

    def _canonicalize_nodes(self, graph: CandidateGraph, repairs: list[str]) -> list[dict]:
        used_names: set[str] = set()
        used_ids: set[str] = set()
        return [
            self._canonicalize_node(raw_node, index, used_names, used_ids, repairs)
            for index, raw_node in enumerate(graph.nodes)
        ]

    def _canonicalize_node(
        self,
        raw_node: dict,
        index: int,
        used_names: set[str],
        used_ids: set[str],
        repairs: list[str],
    ) -> dict:
        """Build one well-formed node dict from an untrusted one."""
        node_id = _coerce_token(raw_node.get("id"))
        if node_id is None or node_id in used_ids:
            node_id = self._fresh_id(used_ids)
            repairs.append(f"assigned id to node {index + 1}")
        used_ids.add(node_id)

        name = _coerce_token(raw_node.get("name"))
        if name is None:
            name = f"Node {index + 1}"
            repairs.append(f"named unnamed node {index + 1} {name!r}")
        if name in used_names:
            base = name
            suffix = 2
            while f"{base} {suffix}" in used_names:
                suffix += 1
            name = f"{base} {suffix}"
            repairs.append(f"renamed duplicate node {base!r} to {name!r}")
        used_names.add(name)

        raw_type = raw_node.get("type")
        node_type = self.rules.canonical_type(raw_type)
        if node_type != raw_type:
            repairs.append(f"set type of {name!r} to {node_type!r}")

        type_version = raw_node.get("typeVersion")
        if not _is_positive_number(type_version):
            type_version = self.rules.default_version(node_type)

        position = _coerce_position(raw_node.get("position"))
        if position is None:
            position = placeholder_position(index)

        parameters = raw_node.get("parameters")
        if isinstance(parameters, dict):
            parameters = sanitize_expressions(parameters)
        else:
            parameters = {}

        node = {
            key: copy.deepcopy(value)
            for key, value in raw_node.items()
            if key not in _NODE_FIELDS
        }
        node.update(
            id=node_id,
            name=name,
            type=node_type,
            typeVersion=type_version,
            position=position,
            parameters=parameters,
        )
        return node

    def _fresh_id(self, used_ids: set[str]) -> str:
        base = str(self.id_factory())
        node_id = base
        suffix = 2
        while node_id in used_ids:
            node_id = f"{base}-{suffix}"
            suffix += 1
        return node_id

    # =========================================================================
    # ENTRY NODE
    # =========================================================================

    def _enforce_entry_node(self, nodes: list[dict], repairs: list[str]) -> list[dict]:
        """Leave exactly one entry node, at the front of the list."""
        entry_indexes = [
            index for index, node in enumerate(nodes)
            if self.rules.is_entry_kind(node["type"])
        ]

        if not entry_indexes:
            entry = nodes[0]
            entry["type"] = self.rules.entry_type
            entry["typeVersion"] = self.rules.default_version(self.rules.entry_type)
            repairs.append(f"made {entry['name']!r} the entry node")
            return nodes

        first = entry_indexes[0]
        if first > 0:
            nodes = [nodes[first], *nodes[:first], *nodes[first + 1:]]
            repairs.append(f"moved entry node {nodes[0]['name']!r} to the front")

        for node in nodes[1:]:
            if not self.rules.is_entry_kind(node["type"]):
                continue
            node["type"] = self.rules.neutral_type
            node["typeVersion"] = self.rules.default_version(self.rules.neutral_type)
            if not node["parameters"]:
                node["parameters"] = self.rules.default_neutral_parameters()
            repairs.append(f"demoted extra entry node {node['name']!r}")

        return nodes

    # =========================================================================
    # CONNECTIONS
    # =========================================================================

    def _build_connections(
        self,
        nodes: list[dict],
        raw_connections: dict,
        repairs: list[str],
    ) -> dict:
        node_names = [node["name"] for node in nodes]
        node_types = {node["name"]: node["type"] for node in nodes}

        edge_map = build_edge_map(node_names, node_types, raw_connections, self.rules, repairs)
        add_backbone(edge_map, node_names, repairs)
        add_missing_incoming(edge_map, node_names, repairs)

        return serialize_edge_map(edge_map, node_types, self.rules)

    # =========================================================================
    # LAYOUT
    # =========================================================================

    def _repair_layout(self, nodes: list[dict], repairs: list[str]) -> None:
        positions, moved = repair_layout([node["position"] for node in nodes], self.layout)
        for node, position in zip(nodes, positions):
            node["position"] = position
        if moved:
            repairs.append("re-laid out overlapping nodes")


def repair_workflow(
    candidate: Any,
    normalizer: Optional[WorkflowNormalizer] = None,
) -> dict:
    """Repair a candidate and return it in n8n JSON format."""
    normalizer = normalizer or WorkflowNormalizer()
    return normalizer.repair(candidate).to_n8n()


def _coerce_token(value: Any) -> Optional[str]:
    """A non-blank string, or a number rendered as one."""
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _is_positive_number(value: Any) -> bool:
    return _is_finite_number(value) and value > 0


def _coerce_position(value: Any) -> Optional[list]:
    """``[x, y]`` from a 2-item list/tuple or an ``{x, y}`` mapping, else None."""
    if isinstance(value, (list, tuple)) and len(value) == 2:
        x, y = value
    elif isinstance(value, dict):
        x, y = value.get("x"), value.get("y")
    else:
        return None

    if _is_finite_number(x) and _is_finite_number(y):
        return [x, y]
    return None
