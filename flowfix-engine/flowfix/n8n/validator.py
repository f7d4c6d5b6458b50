"""Read-only integrity checks for a finished n8n workflow document."""
import math
from collections import deque
from typing import Optional

from flowfix.n8n.layout import position_key
from flowfix.n8n.node_kinds import NodeKindRules, default_node_kind_rules


def validate_workflow(workflow: dict, rules: Optional[NodeKindRules] = None) -> list[str]:
    """Validate workflow JSON against the normalized-graph invariants.

    Returns list of validation errors (empty if valid).
    """
    rules = rules or default_node_kind_rules()
    errors = []

    # Check required fields
    if not isinstance(workflow.get("name"), str):
        errors.append("Missing workflow name")

    nodes = workflow.get("nodes")
    if not isinstance(nodes, list):
        errors.append("Missing nodes array")
        return errors
    if not nodes:
        errors.append("Workflow has no nodes")
        return errors

    connections = workflow.get("connections")
    if not isinstance(connections, dict):
        errors.append("Missing connections object")
        connections = {}

    # Validate each node
    node_names: list[str] = []
    node_ids = set()
    positions = {}
    for index, node in enumerate(nodes):
        if not isinstance(node, dict):
            errors.append(f"Node {index + 1} is not an object")
            continue
        label = node.get("name", node.get("id", f"#{index + 1}"))

        if not isinstance(node.get("id"), str) or not node["id"]:
            errors.append(f"Node missing id: {label}")
        elif node["id"] in node_ids:
            errors.append(f"Duplicate node id: {node['id']}")
        else:
            node_ids.add(node["id"])

        if not isinstance(node.get("name"), str) or not node["name"]:
            errors.append(f"Node missing name: {label}")
        elif node["name"] in node_names:
            errors.append(f"Duplicate node name: {node['name']}")
        else:
            node_names.append(node["name"])

        if not isinstance(node.get("type"), str) or not node["type"]:
            errors.append(f"Node missing type: {label}")

        position = node.get("position")
        if not _is_point(position):
            errors.append(f"Node missing position: {label}")
        else:
            key = position_key(position)
            if key in positions:
                errors.append(f"Nodes overlap at {list(key)}: {positions[key]}, {label}")
            else:
                positions[key] = label

    # Exactly one entry node, and it comes first
    entry_nodes = [
        node.get("name") for node in nodes
        if isinstance(node, dict)
        and isinstance(node.get("type"), str)
        and rules.is_entry_kind(node["type"])
    ]
    if len(entry_nodes) != 1:
        errors.append(f"Expected exactly one entry node, found {len(entry_nodes)}")
    elif not isinstance(nodes[0], dict) or nodes[0].get("name") != entry_nodes[0]:
        errors.append(f"Entry node is not first: {entry_nodes[0]}")

    # Validate connections reference existing nodes
    known = set(node_names)
    adjacency: dict[str, list[str]] = {name: [] for name in node_names}
    for source_name, outputs in connections.items():
        if source_name not in known:
            errors.append(f"Connection source not found: {source_name}")
            continue
        branches = outputs.get("main") if isinstance(outputs, dict) else None
        if not isinstance(branches, list):
            errors.append(f"Connection outputs malformed: {source_name}")
            continue
        for branch in branches:
            if not isinstance(branch, list):
                errors.append(f"Connection branch malformed: {source_name}")
                continue
            for conn in branch:
                target = conn.get("node") if isinstance(conn, dict) else None
                if not isinstance(target, str) or target not in known:
                    errors.append(f"Connection target not found: {target}")
                else:
                    adjacency[source_name].append(target)

    # Every node reachable from the first one
    if node_names:
        reachable = _reachable_from(node_names[0], adjacency)
        for name in node_names:
            if name not in reachable:
                errors.append(f"Node not reachable from entry: {name}")

    return errors


def _is_point(value) -> bool:
    return (
        isinstance(value, list)
        and len(value) == 2
        and all(
            isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
            for v in value
        )
    )


def _reachable_from(start: str, adjacency: dict[str, list[str]]) -> set[str]:
    seen = {start}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for target in adjacency.get(current, []):
            if target not in seen:
                seen.add(target)
                queue.append(target)
    return seen
