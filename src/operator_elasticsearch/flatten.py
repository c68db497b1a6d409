"""
Flattening of nested Elasticsearch settings documents into dot-path pairs.

Elasticsearch returns cluster settings nested by default:

    {"transient": {"cluster": {"routing": {"allocation": {"enable": "all"}}}}}

but accepts (and sometimes echoes) the flat form:

    {"transient": {"cluster.routing.allocation.enable": "all"}}

Everything that reads remote configuration goes through these helpers so the
two forms are treated identically.
"""

import json
from typing import Any

from operator_elasticsearch.errors import MalformedResponseError
from operator_elasticsearch.models import Setting


def _leaf_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    # bool, int and float render the same way they appear on the wire
    return json.dumps(value)


def _flatten_into(flat: dict[str, str], node: Any, prefix: str) -> None:
    if isinstance(node, dict):
        items = node.items()
    elif isinstance(node, list):
        items = ((str(i), v) for i, v in enumerate(node))
    else:
        flat[prefix] = _leaf_to_str(node)
        return

    for key, value in items:
        _flatten_into(flat, value, f"{prefix}.{key}" if prefix else key)


def flatten_json(document: dict[str, Any]) -> dict[str, str]:
    """
    Flatten a nested JSON object into dot-path keys.

    List elements are keyed by position ("a.b.0"). Empty objects and lists
    produce no keys. Leaves are rendered as strings; JSON null becomes "".

    Args:
        document: Parsed JSON object.

    Returns:
        Mapping of dotted key to string value.

    Example:
        >>> flatten_json({"indices": {"recovery": {"max_bytes_per_sec": "10mb"}}})
        {'indices.recovery.max_bytes_per_sec': '10mb'}
    """
    flat: dict[str, str] = {}
    _flatten_into(flat, document, "")
    return flat


def settings_from_json(document: dict[str, Any]) -> list[Setting]:
    """
    Convert a settings group into Setting entries sorted by key.

    Entries whose value resolves to the empty string are dropped; they mark
    an unset setting rather than a real leaf.
    """
    flat = flatten_json(document)
    return [
        Setting(key=key, value=flat[key])
        for key in sorted(flat)
        if flat[key] != ""
    ]


def scope(document: Any, name: str) -> dict[str, Any]:
    """
    Return a top-level settings group ("persistent" or "transient").

    Raises:
        MalformedResponseError: If the document is not an object or the
            group is missing or not an object.
    """
    if not isinstance(document, dict):
        raise MalformedResponseError(
            f"expected a JSON object, got {type(document).__name__}"
        )
    group = document.get(name)
    if not isinstance(group, dict):
        raise MalformedResponseError(f"missing '{name}' settings object")
    return group


def lookup(group: dict[str, Any], dotted_key: str) -> str | None:
    """
    Resolve a dotted key within a settings group.

    Works whether the group stores the key nested, flat, or a mix of both.

    Returns:
        The value as a string, or None when unset or empty.
    """
    value = flatten_json(group).get(dotted_key, "")
    return value or None
