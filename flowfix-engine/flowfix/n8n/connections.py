"""Edge-graph construction, connectivity repair and connection serialization.

The declared ``connections`` object from an LLM is parsed into an edge map:

    {source_name: {target_name: target_input_index, ...}, ...}

Both levels are insertion ordered, so the map doubles as an ordered set of
targets per source. Repairs only ever add edges to it. It is then
serialized back into n8n's nested format:

    {
        "Node Name": {
            "main": [
                [{"node": "Target Node", "type": "main", "index": 0}],  # output 0
                [{"node": "Target Node 2", "type": "main", "index": 0}],  # output 1
            ]
        }
    }
"""
from typing import Any, Optional

import structlog

from flowfix.models.workflow import N8NConnection, NodeConnections
from flowfix.n8n.node_kinds import NodeKindRules

logger = structlog.get_logger()

EdgeMap = dict[str, dict[str, int]]


def build_edge_map(
    node_names: list[str],
    node_types: dict[str, str],
    raw_connections: dict,
    rules: NodeKindRules,
    notes: Optional[list[str]] = None,
) -> EdgeMap:
    """Parse declared connections, dropping edges to or from unknown nodes."""
    notes = notes if notes is not None else []
    edge_map: EdgeMap = {name: {} for name in node_names}

    for source_name, outputs in raw_connections.items():
        if not isinstance(source_name, str) or source_name not in edge_map:
            notes.append(f"dropped connections from unknown node {source_name!r}")
            logger.debug("dangling_source_dropped", source=str(source_name))
            continue

        branches = _main_branches(outputs)
        if rules.is_binary_branch_kind(node_types[source_name]):
            raw_edges = _heads_first(branches)
        else:
            raw_edges = [edge for branch in branches for edge in branch]

        for raw_edge in raw_edges:
            target, input_index = _parse_edge(raw_edge)
            if target is None or target not in edge_map:
                notes.append(
                    f"dropped edge {source_name!r} -> {target!r}: unknown target"
                )
                logger.debug(
                    "dangling_edge_dropped",
                    source=source_name,
                    target=str(target),
                )
                continue
            edge_map[source_name].setdefault(target, input_index)

    return edge_map


def add_backbone(
    edge_map: EdgeMap,
    node_names: list[str],
    notes: Optional[list[str]] = None,
) -> None:
    """Link every node to its successor in node order."""
    notes = notes if notes is not None else []
    for source, target in zip(node_names, node_names[1:]):
        if target not in edge_map[source]:
            edge_map[source][target] = 0
            notes.append(f"linked {source!r} -> {target!r} along the backbone")


def add_missing_incoming(
    edge_map: EdgeMap,
    node_names: list[str],
    notes: Optional[list[str]] = None,
) -> None:
    """Give every non-entry node without an incoming edge one from its predecessor."""
    notes = notes if notes is not None else []
    incoming = {name: 0 for name in node_names}
    for targets in edge_map.values():
        for target in targets:
            incoming[target] += 1

    for previous, current in zip(node_names, node_names[1:]):
        if incoming[current] == 0:
            edge_map[previous][current] = 0
            incoming[current] = 1
            notes.append(f"linked orphan {current!r} from {previous!r}")


def serialize_edge_map(
    edge_map: EdgeMap,
    node_types: dict[str, str],
    rules: NodeKindRules,
) -> dict[str, NodeConnections]:
    """Convert an edge map into n8n connections, skipping sources with no targets."""
    connections: dict[str, NodeConnections] = {}
    for source, targets in edge_map.items():
        if not targets:
            continue
        connections[source] = NodeConnections(
            main=serialize_targets(node_types[source], list(targets.items()), rules),
        )
    return connections


def serialize_targets(
    source_type: str,
    targets: list[tuple[str, int]],
    rules: NodeKindRules,
) -> list[list[N8NConnection]]:
    """Distribute a source's targets over output branches by node kind.

    - IF-like: output 0 gets the first target plus any beyond the second,
      output 1 gets the second target.
    - Switch-like: one target per output.
    - Everything else: one output fanning out to all targets.
    """
    edges = [
        N8NConnection(node=target, type="main", index=input_index)
        for target, input_index in targets
    ]

    if rules.is_binary_branch_kind(source_type):
        if len(edges) <= 1:
            return [edges]
        # TODO: confirm against n8n how extra IF targets should be routed;
        # they currently accumulate on the true output.
        return [[edges[0], *edges[2:]], [edges[1]]]

    if rules.is_multi_branch_kind(source_type):
        return [[edge] for edge in edges]

    return [edges]


def _main_branches(outputs: Any) -> list[list[Any]]:
    """Extract the list of ``main`` output branches from a source entry."""
    if isinstance(outputs, dict):
        main = outputs.get("main")
    elif isinstance(outputs, list):
        main = outputs
    else:
        return []

    if not isinstance(main, list):
        return []

    branches = []
    for branch in main:
        if isinstance(branch, list):
            branches.append(branch)
        elif branch is not None:
            branches.append([branch])
    return branches


def _heads_first(branches: list[list[Any]]) -> list[Any]:
    """Order IF targets so that re-serialization reproduces the same branches."""
    heads = [branch[0] for branch in branches if branch]
    tails = [edge for branch in branches for edge in branch[1:]]
    return heads + tails


def _parse_edge(raw_edge: Any) -> tuple[Optional[str], int]:
    """Normalize an edge entry to ``(target_name, target_input_index)``."""
    if isinstance(raw_edge, str):
        return raw_edge, 0
    if not isinstance(raw_edge, dict):
        return None, 0

    target = raw_edge.get("node") or raw_edge.get("name")
    if not isinstance(target, str):
        return None, 0

    input_index = raw_edge.get("index", 0)
    if isinstance(input_index, bool) or not isinstance(input_index, int) or input_index < 0:
        input_index = 0
    return target, input_index
