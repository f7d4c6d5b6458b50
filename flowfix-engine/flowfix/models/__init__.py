"""Pydantic models for the FlowFix normalization engine."""
from flowfix.models.candidate import CandidateGraph, coerce_candidate
from flowfix.models.workflow import (
    N8NConnection,
    N8NNode,
    N8NWorkflow,
    NodeConnections,
)

__all__ = [
    "CandidateGraph",
    "coerce_candidate",
    "N8NConnection",
    "N8NNode",
    "N8NWorkflow",
    "NodeConnections",
]
