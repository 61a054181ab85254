"""Strip script blocks and javascript: URIs from submitted values.

Works on any JSON-like tree: dicts and lists are walked, string leaves are
cleaned, every other leaf is returned as-is. Cleaning repeats until the
string stops changing, so removals that splice together a new ``<script>``
block or ``javascript:`` prefix are caught and the result is idempotent.
"""

from __future__ import annotations

import re

from formdesk.core.errors import PayloadTooDeep
from formdesk.types import JsonValue

DEFAULT_MAX_DEPTH = 32

SCRIPT_BLOCK_RE = re.compile(r"<script\b.*?</script\s*>", re.IGNORECASE | re.DOTALL)
JAVASCRIPT_URI_RE = re.compile(r"javascript:", re.IGNORECASE)


def sanitize_text(text: str) -> str:
    while True:
        cleaned = SCRIPT_BLOCK_RE.sub("", text)
        cleaned = JAVASCRIPT_URI_RE.sub("", cleaned)
        if cleaned == text:
            return cleaned
        text = cleaned


def sanitize(value: JsonValue, *, max_depth: int = DEFAULT_MAX_DEPTH) -> JsonValue:
    """Return a cleaned copy of ``value``; raise PayloadTooDeep past ``max_depth``."""
    return _sanitize_node(value, depth=0, max_depth=max_depth)


def _sanitize_node(node: JsonValue, *, depth: int, max_depth: int) -> JsonValue:
    if isinstance(node, str):
        return sanitize_text(node)

    if isinstance(node, dict):
        if depth >= max_depth:
            raise PayloadTooDeep(max_depth)
        return {
            key: _sanitize_node(child, depth=depth + 1, max_depth=max_depth)
            for key, child in node.items()
        }

    if isinstance(node, (list, tuple)):
        if depth >= max_depth:
            raise PayloadTooDeep(max_depth)
        return [_sanitize_node(child, depth=depth + 1, max_depth=max_depth) for child in node]

    # Numbers, booleans, None.
    return node
