"""Tests for edge-map construction and branch-aware serialization."""
import pytest

from flowfix.n8n.connections import (
    add_backbone,
    add_missing_incoming,
    build_edge_map,
    serialize_edge_map,
    serialize_targets,
)
from flowfix.n8n.node_kinds import default_node_kind_rules

IF = "n8n-nodes-base.if"
SWITCH = "n8n-nodes-base.switch"
SET = "n8n-nodes-base.set"


@pytest.fixture
def rules():
    return default_node_kind_rules()


def _nodes(branches):
    return [[conn.node for conn in branch] for branch in branches]


class TestBuildEdgeMap:

    def test_every_node_gets_an_entry(self, rules):
        edge_map = build_edge_map(["A", "B"], {"A": SET, "B": SET}, {}, rules)

        assert edge_map == {"A": {}, "B": {}}

    def test_unknown_source_is_dropped_with_note(self, rules):
        notes = []
        edge_map = build_edge_map(
            ["A"], {"A": SET}, {"Ghost": {"main": [[{"node": "A"}]]}}, rules, notes,
        )

        assert edge_map == {"A": {}}
        assert notes == ["dropped connections from unknown node 'Ghost'"]

    def test_unknown_target_is_dropped_with_note(self, rules):
        notes = []
        edge_map = build_edge_map(
            ["A", "B"],
            {"A": SET, "B": SET},
            {"A": {"main": [[{"node": "Nowhere"}, {"node": "B"}, {"type": "main"}]]}},
            rules,
            notes,
        )

        assert edge_map["A"] == {"B": 0}
        assert notes == [
            "dropped edge 'A' -> 'Nowhere': unknown target",
            "dropped edge 'A' -> None: unknown target",
        ]

    def test_first_input_index_wins_for_duplicate_edges(self, rules):
        edge_map = build_edge_map(
            ["A", "M"],
            {"A": SET, "M": "n8n-nodes-base.merge"},
            {"A": {"main": [[{"node": "M", "index": 1}], [{"node": "M", "index": 0}]]}},
            rules,
        )

        assert edge_map["A"] == {"M": 1}

    @pytest.mark.parametrize("index", [-1, True, "1", 1.5, None])
    def test_invalid_input_index_becomes_zero(self, rules, index):
        edge_map = build_edge_map(
            ["A", "B"], {"A": SET, "B": SET}, {"A": {"main": [[{"node": "B", "index": index}]]}}, rules,
        )

        assert edge_map["A"] == {"B": 0}

    @pytest.mark.parametrize("outputs", ["B", 3, None, {"main": "B"}, {"other": [["B"]]}])
    def test_unusable_outputs_are_ignored(self, rules, outputs):
        edge_map = build_edge_map(["A", "B"], {"A": SET, "B": SET}, {"A": outputs}, rules)

        assert edge_map["A"] == {}

    def test_if_source_reads_branch_heads_first(self, rules):
        edge_map = build_edge_map(
            ["Check", "Yes", "No", "Extra"],
            {"Check": IF, "Yes": SET, "No": SET, "Extra": SET},
            {"Check": {"main": [["Yes", "Extra"], ["No"]]}},
            rules,
        )

        assert list(edge_map["Check"]) == ["Yes", "No", "Extra"]

    def test_other_sources_read_in_declared_order(self, rules):
        edge_map = build_edge_map(
            ["A", "B", "C", "D"],
            {"A": SET, "B": SET, "C": SET, "D": SET},
            {"A": {"main": [["B", "D"], ["C"]]}},
            rules,
        )

        assert list(edge_map["A"]) == ["B", "D", "C"]


class TestConnectivity:

    def test_backbone_links_consecutive_nodes(self):
        notes = []
        edge_map = {"A": {"C": 0}, "B": {}, "C": {}}

        add_backbone(edge_map, ["A", "B", "C"], notes)

        assert edge_map == {"A": {"C": 0, "B": 0}, "B": {"C": 0}, "C": {}}
        assert notes == [
            "linked 'A' -> 'B' along the backbone",
            "linked 'B' -> 'C' along the backbone",
        ]

    def test_backbone_keeps_existing_edges(self):
        notes = []
        edge_map = {"A": {"B": 2}, "B": {}}

        add_backbone(edge_map, ["A", "B"], notes)

        assert edge_map == {"A": {"B": 2}, "B": {}}
        assert notes == []

    def test_orphan_is_linked_from_predecessor(self):
        notes = []
        edge_map = {"A": {}, "B": {}, "C": {"B": 0}}

        add_missing_incoming(edge_map, ["A", "B", "C"], notes)

        assert edge_map["B"] == {"C": 0}
        assert notes == ["linked orphan 'C' from 'B'"]

    def test_entry_node_needs_no_incoming_edge(self):
        edge_map = {"A": {"B": 0}, "B": {}}

        add_missing_incoming(edge_map, ["A", "B"])

        assert edge_map == {"A": {"B": 0}, "B": {}}


class TestSerialization:

    def test_plain_source_fans_out_on_one_output(self, rules):
        branches = serialize_targets(SET, [("A", 0), ("B", 1)], rules)

        assert _nodes(branches) == [["A", "B"]]
        assert branches[0][1].index == 1

    @pytest.mark.parametrize("targets,expected", [
        ([("A", 0)], [["A"]]),
        ([("A", 0), ("B", 0)], [["A"], ["B"]]),
        ([("A", 0), ("B", 0), ("C", 0), ("D", 0)], [["A", "C", "D"], ["B"]]),
    ])
    def test_if_source_has_true_and_false_outputs(self, rules, targets, expected):
        assert _nodes(serialize_targets(IF, targets, rules)) == expected

    def test_switch_source_gets_one_output_per_target(self, rules):
        branches = serialize_targets(SWITCH, [("A", 0), ("B", 0), ("C", 0)], rules)

        assert _nodes(branches) == [["A"], ["B"], ["C"]]

    def test_branch_kinds_match_by_suffix(self, rules):
        assert _nodes(serialize_targets("acme.If", [("A", 0), ("B", 0)], rules)) == [["A"], ["B"]]
        assert _nodes(serialize_targets("acme.ifElse", [("A", 0), ("B", 0)], rules)) == [["A", "B"]]

    def test_sources_without_targets_are_omitted(self, rules):
        connections = serialize_edge_map(
            {"A": {"B": 0}, "B": {}},
            {"A": SET, "B": SET},
            rules,
        )

        assert list(connections) == ["A"]
        assert connections["A"].targets() == ["B"]

    def test_if_branches_survive_a_reparse(self, rules):
        """Serializing, reading back heads-first and serializing again is stable."""
        names = ["Check", "Yes", "No", "Extra"]
        types = {"Check": IF, "Yes": SET, "No": SET, "Extra": SET}
        first = serialize_edge_map({"Check": {"Yes": 0, "No": 0, "Extra": 0}}, types, rules)

        raw = {source: outputs.model_dump() for source, outputs in first.items()}
        second = serialize_edge_map(build_edge_map(names, types, raw, rules), types, rules)

        assert _nodes(second["Check"].main) == [["Yes", "Extra"], ["No"]]
        assert second == first
