"""Tree building engine for event-driven XML parsing.

Key Components:
    TreeBuilder: State machine turning lexical events into a tree
    ElementNode: One element with attributes, text and child slots
    DocumentRoot: Top-level container keyed by the root tag name
    BuildResult: Finished tree with diagnostics and metrics
"""

from .accessors import (
    attribute,
    child,
    children,
    get_element_attr,
    get_element_text,
    text,
)
from .builder import BuildResult, TreeBuilder, WriteCursor, build_tree
from .node import (
    ChildSlot,
    DocumentRoot,
    ElementNode,
    Many,
    Single,
    to_json,
)

__all__ = [
    "attribute",
    "child",
    "children",
    "get_element_attr",
    "get_element_text",
    "text",
    "BuildResult",
    "TreeBuilder",
    "WriteCursor",
    "build_tree",
    "ChildSlot",
    "DocumentRoot",
    "ElementNode",
    "Many",
    "Single",
    "to_json",
]
