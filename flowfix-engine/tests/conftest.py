"""Shared fixtures for normalizer tests."""
import itertools

import pytest

from flowfix.n8n.normalizer import WorkflowNormalizer


@pytest.fixture
def id_factory():
    """Deterministic node ids: node-1, node-2, ..."""
    counter = itertools.count(1)
    return lambda: f"node-{next(counter)}"


@pytest.fixture
def normalizer(id_factory):
    """A normalizer with reproducible ids and default tables."""
    return WorkflowNormalizer(id_factory=id_factory)


def branch_targets(workflow, source: str) -> list[list[str]]:
    """Target names per output branch of ``source``."""
    outputs = workflow.connections.get(source)
    if outputs is None:
        return []
    return [[conn.node for conn in branch] for branch in outputs.main]
