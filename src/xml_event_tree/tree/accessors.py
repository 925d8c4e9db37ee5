"""Read-only helpers for finished tree nodes.

All helpers accept either the plain ``dict`` nodes handed to callers or
``ElementNode`` objects, and return ``None`` for anything else. ``None``
means absent; a present empty string is returned as ``""``.
"""

from typing import Any, List, Mapping, Optional

from .node import ATTR_KEY, TEXT_KEY, ElementNode


def _attributes(node: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(node, ElementNode):
        return node.attr
    if isinstance(node, Mapping):
        attrs = node.get(ATTR_KEY)
        if isinstance(attrs, Mapping):
            return attrs
    return None


def attribute(node: Any, key: str) -> Optional[str]:
    """Return attribute ``key`` of ``node``, or None if it is absent."""
    attrs = _attributes(node)
    if attrs is None or key not in attrs:
        return None
    return attrs[key]


def text(node: Any, key: str = "text") -> Optional[str]:
    """Return the text of ``node``.

    Falls back to the attribute named ``key`` for XML that stores leaf values
    as an attribute, e.g. ``<title text="Hello"/>``.
    """
    if isinstance(node, ElementNode):
        if node.inner_text is not None:
            return node.inner_text
    elif isinstance(node, Mapping) and TEXT_KEY in node:
        return node[TEXT_KEY]
    return attribute(node, key)


def children(node: Any, name: str) -> List[Any]:
    """All children of ``node`` tagged ``name``, as a list in document order."""
    if isinstance(node, ElementNode):
        return node.get_children(name)
    if not isinstance(node, Mapping) or name in (ATTR_KEY, TEXT_KEY):
        return []
    value = node.get(name)
    if isinstance(value, list):
        return list(value)
    if isinstance(value, Mapping):
        return [value]
    return []


def child(node: Any, name: str, index: int = 0) -> Optional[Any]:
    """The ``index``-th child of ``node`` tagged ``name``, or None."""
    found = children(node, name)
    if -len(found) <= index < len(found):
        return found[index]
    return None


get_element_attr = attribute
get_element_text = text
