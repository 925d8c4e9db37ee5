"""Element nodes and child slots of the output tree.

Children are addressed by tag name. Each name owns one slot that is either a
``Single`` node or, from the second occurrence on, a ``Many`` sequence in
document order. A missing key means the tag never occurred.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# Keys every rendered node carries; child tags cannot use them
NAME_KEY = "name"
ATTR_KEY = "attr"
TEXT_KEY = "innerText"
RESERVED_KEYS = frozenset({NAME_KEY, ATTR_KEY, TEXT_KEY})


@dataclass(eq=False)
class ElementNode:
    """One XML element: lowercased name, attributes, text and child slots."""

    name: str
    attr: Dict[str, str] = field(default_factory=dict)
    inner_text: Optional[str] = None
    children: Dict[str, "ChildSlot"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Element name cannot be empty")

    @property
    def has_text(self) -> bool:
        return self.inner_text is not None

    def attach_child(self, child: "ElementNode") -> bool:
        """Attach ``child`` under its tag name.

        Returns:
            True if this attachment promoted a single child to a sequence
        """
        return attach(self.children, child)

    def get_children(self, name: str) -> List["ElementNode"]:
        """All children with tag ``name`` in document order."""
        slot = self.children.get(name)
        return list(slot.nodes) if slot is not None else []

    def to_dict(self) -> Dict[str, Any]:
        """Render the node in its JSON shape."""
        result: Dict[str, Any] = {NAME_KEY: self.name, ATTR_KEY: dict(self.attr)}
        if self.inner_text is not None:
            result[TEXT_KEY] = self.inner_text
        for name, slot in self.children.items():
            if name in RESERVED_KEYS:
                continue
            result[name] = slot.to_json()
        return result


@dataclass(eq=False)
class Single:
    """Slot holding the only occurrence of a tag so far."""

    node: ElementNode

    @property
    def nodes(self) -> List[ElementNode]:
        return [self.node]

    def to_json(self) -> Dict[str, Any]:
        return self.node.to_dict()


@dataclass(eq=False)
class Many:
    """Slot holding two or more occurrences of a tag in document order."""

    nodes: List[ElementNode]

    def __post_init__(self) -> None:
        if len(self.nodes) < 2:
            raise ValueError("Many slot needs at least two nodes")

    def to_json(self) -> List[Dict[str, Any]]:
        return [node.to_dict() for node in self.nodes]


ChildSlot = Union[Single, Many]


def attach(slots: Dict[str, ChildSlot], node: ElementNode) -> bool:
    """Attach ``node`` into ``slots`` keyed by its name.

    Returns:
        True if an existing single child was promoted to a sequence
    """
    slot = slots.get(node.name)
    if slot is None:
        slots[node.name] = Single(node)
        return False
    if isinstance(slot, Single):
        slots[node.name] = Many([slot.node, node])
        return True
    if isinstance(slot, Many):
        slot.nodes.append(node)
        return False
    raise TypeError(f"Unknown child slot type: {type(slot).__name__}")


@dataclass(eq=False)
class DocumentRoot:
    """Top-level container mapping the root tag name to its element."""

    children: Dict[str, ChildSlot] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.children

    @property
    def root_element(self) -> Optional[ElementNode]:
        """The first top-level element, if any."""
        for slot in self.children.values():
            return slot.nodes[0]
        return None

    def attach_child(self, child: ElementNode) -> bool:
        return attach(self.children, child)

    def iter_elements(self) -> List[ElementNode]:
        """All elements, each parent before its children."""
        elements: List[ElementNode] = []

        def collect(slots: Dict[str, ChildSlot]) -> None:
            for slot in slots.values():
                for node in slot.nodes:
                    elements.append(node)
                    collect(node.children)

        collect(self.children)
        return elements

    def to_dict(self) -> Dict[str, Any]:
        return {name: slot.to_json() for name, slot in self.children.items()}


def to_json(
    tree: Union[DocumentRoot, ElementNode, Dict[str, Any]],
    indent: Optional[int] = None
) -> str:
    """Serialize a document root or node to a JSON string."""
    if isinstance(tree, (DocumentRoot, ElementNode)):
        tree = tree.to_dict()
    return json.dumps(tree, indent=indent, ensure_ascii=False)
