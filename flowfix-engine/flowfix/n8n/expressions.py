"""Rewrite legacy n8n expression syntax inside node parameters.

Older n8n (and LLMs trained on it) reference the current item as
``{{ item.field }}`` or ``$item['field']``. Current n8n expects
``{{$json.field}}`` and ``$json.field``. The rewrite is a plain string
substitution applied to every string inside the parameter tree.
"""
import re
from typing import Any

# {{ item.email }} -> {{$json.email }}
_BARE_ITEM_PATTERN = re.compile(r"\{\{\s*item\.")

# $item['email'] / $item["email"] -> $json.email
_INDEXED_ITEM_PATTERN = re.compile(r"\$item\[['\"]([^'\"]+)['\"]\]")


def sanitize_expression(value: str) -> str:
    """Rewrite legacy item references in a single string."""
    value = _BARE_ITEM_PATTERN.sub("{{$json.", value)
    return _INDEXED_ITEM_PATTERN.sub(r"$json.\1", value)


def sanitize_expressions(value: Any) -> Any:
    """Recursively rewrite every string in a parameter tree.

    Returns a new structure; the input is not modified.
    """
    if isinstance(value, str):
        return sanitize_expression(value)
    if isinstance(value, list):
        return [sanitize_expressions(item) for item in value]
    if isinstance(value, dict):
        return {key: sanitize_expressions(item) for key, item in value.items()}
    return value
