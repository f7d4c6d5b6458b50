"""n8n workflow normalization modules."""
from flowfix.errors import CandidateParseError, MalformedGraphError, NormalizerError
from flowfix.n8n.extraction import extract_json
from flowfix.n8n.layout import LayoutConfig
from flowfix.n8n.node_kinds import (
    N8N_NODE_CATALOG,
    NodeKindRules,
    default_node_kind_rules,
)
from flowfix.n8n.normalizer import RepairReport, WorkflowNormalizer, repair_workflow
from flowfix.n8n.validator import validate_workflow

__all__ = [
    "CandidateParseError",
    "MalformedGraphError",
    "NormalizerError",
    "extract_json",
    "LayoutConfig",
    "N8N_NODE_CATALOG",
    "NodeKindRules",
    "default_node_kind_rules",
    "RepairReport",
    "WorkflowNormalizer",
    "repair_workflow",
    "validate_workflow",
]
