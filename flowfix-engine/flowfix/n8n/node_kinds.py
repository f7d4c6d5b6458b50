"""Catalog of n8n node kinds and the rules used to classify them.

The normalizer never hard-codes node types. Default typeVersions, legacy
aliases and the entry/branching predicates all come from the
``NodeKindRules`` instance it is constructed with.

Entry and branching checks are regex matches against the full type
string, not lookups in the catalog, so invented types are classified too.
"""
import copy
import re
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class NodeDefinition(BaseModel):
    """An n8n node type and the typeVersion new nodes of it get."""

    type: str  # Full n8n type string
    type_version: Union[int, float]
    name: str  # Human-readable name


# =============================================================================
# NODE CATALOG - types the normalizer knows default versions for
# =============================================================================

N8N_NODE_CATALOG: dict[str, NodeDefinition] = {
    # =========================================================================
    # TRIGGERS
    # =========================================================================
    "webhook": NodeDefinition(
        type="n8n-nodes-base.webhook",
        type_version=2,
        name="Webhook",
    ),
    "manual_trigger": NodeDefinition(
        type="n8n-nodes-base.manualTrigger",
        type_version=1,
        name="Manual Trigger",
    ),
    "schedule_trigger": NodeDefinition(
        type="n8n-nodes-base.scheduleTrigger",
        type_version=1,
        name="Schedule Trigger",
    ),
    "email_trigger_imap": NodeDefinition(
        type="n8n-nodes-base.emailReadImap",
        type_version=2,
        name="Email Trigger (IMAP)",
    ),
    "error_trigger": NodeDefinition(
        type="n8n-nodes-base.errorTrigger",
        type_version=1,
        name="Error Trigger",
    ),

    # =========================================================================
    # HTTP & API
    # =========================================================================
    "http_request": NodeDefinition(
        type="n8n-nodes-base.httpRequest",
        type_version=4,
        name="HTTP Request",
    ),
    "respond_to_webhook": NodeDefinition(
        type="n8n-nodes-base.respondToWebhook",
        type_version=1,
        name="Respond to Webhook",
    ),

    # =========================================================================
    # FLOW CONTROL
    # =========================================================================
    "if": NodeDefinition(
        type="n8n-nodes-base.if",
        type_version=2,
        name="IF",
    ),
    "switch": NodeDefinition(
        type="n8n-nodes-base.switch",
        type_version=3,
        name="Switch",
    ),
    "filter": NodeDefinition(
        type="n8n-nodes-base.filter",
        type_version=2,
        name="Filter",
    ),
    "merge": NodeDefinition(
        type="n8n-nodes-base.merge",
        type_version=3,
        name="Merge",
    ),
    "loop_over_items": NodeDefinition(
        type="n8n-nodes-base.splitInBatches",
        type_version=3,
        name="Loop Over Items",
    ),
    "wait": NodeDefinition(
        type="n8n-nodes-base.wait",
        type_version=1,
        name="Wait",
    ),
    "no_op": NodeDefinition(
        type="n8n-nodes-base.noOp",
        type_version=1,
        name="No Operation",
    ),

    # =========================================================================
    # DATA TRANSFORMATION
    # =========================================================================
    "set": NodeDefinition(
        type="n8n-nodes-base.set",
        type_version=3,
        name="Edit Fields (Set)",
    ),
    "code": NodeDefinition(
        type="n8n-nodes-base.code",
        type_version=2,
        name="Code",
    ),
    "item_lists": NodeDefinition(
        type="n8n-nodes-base.itemLists",
        type_version=3,
        name="Item Lists",
    ),
    "aggregate": NodeDefinition(
        type="n8n-nodes-base.aggregate",
        type_version=1,
        name="Aggregate",
    ),
    "date_time": NodeDefinition(
        type="n8n-nodes-base.dateTime",
        type_version=2,
        name="Date & Time",
    ),

    # =========================================================================
    # INTEGRATIONS
    # =========================================================================
    "google_sheets": NodeDefinition(
        type="n8n-nodes-base.googleSheets",
        type_version=4,
        name="Google Sheets",
    ),
    "slack": NodeDefinition(
        type="n8n-nodes-base.slack",
        type_version=2,
        name="Slack",
    ),
    "gmail": NodeDefinition(
        type="n8n-nodes-base.gmail",
        type_version=2,
        name="Gmail",
    ),
    "postgres": NodeDefinition(
        type="n8n-nodes-base.postgres",
        type_version=2,
        name="Postgres",
    ),
}


# =============================================================================
# CLASSIFICATION RULES
# =============================================================================

DEFAULT_NAMESPACE = "n8n-nodes-base"


class NodeKindRules(BaseModel):
    """Immutable lookup tables and predicates over node type strings."""

    model_config = ConfigDict(frozen=True)

    namespace: str = DEFAULT_NAMESPACE
    fallback_type: str = f"{DEFAULT_NAMESPACE}.noOp"
    entry_type: str = f"{DEFAULT_NAMESPACE}.manualTrigger"
    neutral_type: str = f"{DEFAULT_NAMESPACE}.set"
    neutral_parameters: dict = Field(
        default_factory=lambda: {
            "mode": "manual",
            "duplicateItem": False,
            "assignments": {"assignments": []},
        },
    )

    type_versions: dict[str, Union[int, float]] = Field(default_factory=dict)
    aliases: dict[str, str] = Field(
        default_factory=lambda: {
            f"{DEFAULT_NAMESPACE}.cron": f"{DEFAULT_NAMESPACE}.scheduleTrigger",
            f"{DEFAULT_NAMESPACE}.function": f"{DEFAULT_NAMESPACE}.code",
            f"{DEFAULT_NAMESPACE}.functionItem": f"{DEFAULT_NAMESPACE}.code",
        },
    )

    # Heuristics, matched case-insensitively against the full type string
    entry_pattern: str = r"trigger|webhook"
    # Exact types never treated as entry kinds; empty unless a caller opts in
    entry_exclusions: tuple[str, ...] = ()
    binary_branch_pattern: str = r"\.if$"
    multi_branch_pattern: str = r"\.switch$"

    def canonical_type(self, raw_type) -> str:
        """Qualify, alias and default a raw type value."""
        if not isinstance(raw_type, str) or not raw_type.strip():
            return self.fallback_type

        node_type = raw_type.strip()
        if "." not in node_type:
            node_type = f"{self.namespace}.{node_type}"

        return self.aliases.get(node_type, node_type)

    def default_version(self, node_type: str) -> Union[int, float]:
        """Default typeVersion for a type, 1 when unknown."""
        return self.type_versions.get(node_type, 1)

    def is_entry_kind(self, node_type: str) -> bool:
        """Trigger/webhook-like types that can start a workflow."""
        lowered = (node_type or "").lower()
        if any(lowered == excluded.lower() for excluded in self.entry_exclusions):
            return False
        return re.search(self.entry_pattern, lowered, re.IGNORECASE) is not None

    def is_binary_branch_kind(self, node_type: str) -> bool:
        """IF-like types with a true output and a false output."""
        return re.search(self.binary_branch_pattern, node_type or "", re.IGNORECASE) is not None

    def is_multi_branch_kind(self, node_type: str) -> bool:
        """Switch-like types with one output per route."""
        return re.search(self.multi_branch_pattern, node_type or "", re.IGNORECASE) is not None

    def default_neutral_parameters(self) -> dict:
        """Fresh copy of the parameter body given to demoted entry nodes."""
        return copy.deepcopy(self.neutral_parameters)


def default_node_kind_rules() -> NodeKindRules:
    """Rules seeded with typeVersions from ``N8N_NODE_CATALOG``."""
    return NodeKindRules(
        type_versions={
            definition.type: definition.type_version
            for definition in N8N_NODE_CATALOG.values()
        },
    )

