"""Utility to print normalized n8n workflows in clean text representation."""
from typing import Optional


def print_workflow(
    workflow: dict,
    include_params: bool = False,
    repairs: Optional[list[str]] = None,
) -> str:
    """
    Render a normalized workflow as plain text for terminals and logs.

    Args:
        workflow: Workflow in n8n JSON format
        include_params: Include node parameters in output (default: False)
        repairs: Repair notes from the normalizer, listed after the flow

    Returns:
        Multi-line text: node list, flow tree and optional repair notes
    """
    lines = []

    name = workflow.get("name", "Unnamed Workflow")
    lines.append("=" * 60)
    lines.append(f"  WORKFLOW: {name}")
    lines.append("=" * 60)

    nodes = workflow.get("nodes", [])
    connections = workflow.get("connections", {})

    lines.append("  NODES:")
    lines.append("  " + "-" * 56)

    for i, node in enumerate(nodes, 1):
        node_type = node.get("type", "unknown")
        short_type = node_type.replace("n8n-nodes-base.", "")
        pos = node.get("position", [0, 0])
        icon = _get_node_icon(node_type)

        lines.append(f"  {icon} [{i}] {node.get('name', f'Node {i}')}")
        lines.append(f"       Type: {short_type} (v{node.get('typeVersion', 1)})")
        lines.append(f"       Position: ({pos[0]}, {pos[1]})")

        if include_params:
            params = node.get("parameters", {})
            if params:
                lines.append("       Parameters:")
                for key, value in params.items():
                    lines.append(f"         • {key}: {_format_param_value(value)}")

        lines.append("")

    lines.append("  FLOW:")
    lines.append("  " + "-" * 56)
    for line in _build_flow_diagram(nodes, connections):
        lines.append(f"  {line}")
    lines.append("")

    if repairs:
        lines.append(f"  REPAIRS ({len(repairs)}):")
        lines.append("  " + "-" * 56)
        for repair in repairs:
            lines.append(f"  • {repair}")
        lines.append("")

    lines.append("=" * 60)

    return "\n".join(lines)


def _get_node_icon(node_type: str) -> str:
    """Pick a display icon from the node type string."""
    type_lower = node_type.lower()

    if "webhook" in type_lower and "respond" not in type_lower:
        return "🔗"
    elif "trigger" in type_lower:
        return "⚡"
    elif type_lower.endswith(".if") or type_lower.endswith(".switch"):
        return "🔀"
    elif "http" in type_lower:
        return "🌐"
    elif "code" in type_lower:
        return "🧩"
    elif type_lower.endswith(".set"):
        return "📝"
    elif "merge" in type_lower or "aggregate" in type_lower:
        return "📦"
    elif "respond" in type_lower:
        return "📤"
    else:
        return "⚙️"


def _format_param_value(value, max_len: int = 50) -> str:
    """Short one-line preview of a parameter value."""
    if isinstance(value, str):
        if len(value) > max_len:
            return f'"{value[:max_len]}..."'
        return f'"{value}"'
    elif isinstance(value, dict):
        return f"{{...}} ({len(value)} keys)"
    elif isinstance(value, list):
        return f"[...] ({len(value)} items)"
    else:
        return str(value)


def _branch_label(node_type: str, output_index: int, output_count: int) -> str:
    """Label an output branch when a node has more than one."""
    if output_count <= 1:
        return ""
    if node_type.lower().endswith(".if"):
        return "[true] " if output_index == 0 else "[false] "
    return f"[output {output_index}] "


def _build_flow_diagram(nodes: list, connections: dict) -> list:
    """Build a text flow diagram walking forward from the entry node."""
    if not nodes:
        return ["(No nodes)"]
    if not connections:
        return ["(No connections defined)"]

    types = {node.get("name"): node.get("type", "") for node in nodes}
    lines = []
    visited = set()

    def traverse(node_name, depth=0, label=""):
        indent = "    " * depth
        icon = _get_node_icon(types.get(node_name, ""))
        if node_name in visited:
            lines.append(f"{indent}{label}↺ {node_name}")
            return
        visited.add(node_name)
        lines.append(f"{indent}{label}{icon} {node_name}")

        branches = connections.get(node_name, {}).get("main", [])
        for output_index, branch in enumerate(branches):
            branch_label = _branch_label(types.get(node_name, ""), output_index, len(branches))
            for target in branch:
                traverse(target.get("node"), depth + 1, f"└──→ {branch_label}")

    traverse(nodes[0].get("name"))

    # Anything the walk missed is listed so nothing is silently hidden
    for node in nodes:
        if node.get("name") not in visited:
            traverse(node.get("name"))

    return lines
