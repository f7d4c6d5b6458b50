"""Tests for the node catalog and node-kind classification."""
import pytest

from flowfix.n8n.node_kinds import (
    N8N_NODE_CATALOG,
    NodeKindRules,
    default_node_kind_rules,
)


@pytest.fixture
def rules():
    return default_node_kind_rules()


class TestCatalog:

    def test_catalog_types_are_qualified(self):
        for key, definition in N8N_NODE_CATALOG.items():
            assert "." in definition.type, key
            assert definition.type_version > 0, key

    def test_default_rules_take_versions_from_catalog(self, rules):
        for definition in N8N_NODE_CATALOG.values():
            assert rules.default_version(definition.type) == definition.type_version


class TestCanonicalType:

    @pytest.mark.parametrize("raw,expected", [
        (None, "n8n-nodes-base.noOp"),
        ("", "n8n-nodes-base.noOp"),
        ("   ", "n8n-nodes-base.noOp"),
        (12, "n8n-nodes-base.noOp"),
        ("httpRequest", "n8n-nodes-base.httpRequest"),
        (" slack ", "n8n-nodes-base.slack"),
        ("n8n-nodes-base.if", "n8n-nodes-base.if"),
        ("cron", "n8n-nodes-base.scheduleTrigger"),
        ("n8n-nodes-base.function", "n8n-nodes-base.code"),
        ("functionItem", "n8n-nodes-base.code"),
        ("acme.customThing", "acme.customThing"),
    ])
    def test_canonical_type(self, rules, raw, expected):
        assert rules.canonical_type(raw) == expected

    def test_default_versions(self, rules):
        assert rules.default_version("n8n-nodes-base.httpRequest") == 4
        assert rules.default_version("n8n-nodes-base.set") == 3
        assert rules.default_version("acme.customThing") == 1


class TestClassification:

    @pytest.mark.parametrize("node_type", [
        "n8n-nodes-base.manualTrigger",
        "n8n-nodes-base.webhook",
        "n8n-nodes-base.scheduleTrigger",
        "@n8n/n8n-nodes-langchain.chatTrigger",
        "acme.WEBHOOKListener",
        "n8n-nodes-base.respondToWebhook",
    ])
    def test_entry_kinds(self, rules, node_type):
        assert rules.is_entry_kind(node_type)

    def test_entry_exclusions_are_opt_in(self, rules):
        assert rules.entry_exclusions == ()

        strict = NodeKindRules(entry_exclusions=("n8n-nodes-base.respondToWebhook",))

        assert not strict.is_entry_kind("n8n-nodes-base.RespondToWebhook")
        assert strict.is_entry_kind("n8n-nodes-base.webhook")

    @pytest.mark.parametrize("node_type", [
        "n8n-nodes-base.emailReadImap",
        "n8n-nodes-base.set",
        "n8n-nodes-base.httpRequest",
        "",
    ])
    def test_non_entry_kinds(self, rules, node_type):
        assert not rules.is_entry_kind(node_type)

    def test_branch_kinds(self, rules):
        assert rules.is_binary_branch_kind("n8n-nodes-base.if")
        assert not rules.is_binary_branch_kind("n8n-nodes-base.filter")
        assert rules.is_multi_branch_kind("n8n-nodes-base.switch")
        assert not rules.is_multi_branch_kind("n8n-nodes-base.if")

    def test_neutral_parameters_are_fresh_copies(self, rules):
        first = rules.default_neutral_parameters()
        first["assignments"]["assignments"].append({"name": "x"})

        assert rules.default_neutral_parameters()["assignments"] == {"assignments": []}

    def test_rules_are_immutable(self, rules):
        with pytest.raises(Exception):
            rules.entry_type = "acme.start"

    def test_custom_namespace(self):
        rules = NodeKindRules(namespace="acme", fallback_type="acme.pass")

        assert rules.canonical_type("thing") == "acme.thing"
        assert rules.canonical_type(None) == "acme.pass"
