"""Named object hierarchy of an avatar (attachment tree)."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

Vector3 = tuple[float, float, float]

ORIGIN: Vector3 = (0.0, 0.0, 0.0)


class BoneSlot(Enum):
    """Armature bones an asset item can be attached to."""

    HIPS = "hips"
    HEAD = "head"
    NECK = "neck"
    CHEST = "chest"
    LEFT_HAND = "left_hand"
    RIGHT_HAND = "right_hand"
    LEFT_LOWER_LEG = "left_lower_leg"
    RIGHT_LOWER_LEG = "right_lower_leg"


@dataclass(eq=False)
class Node:
    """A named node in the avatar hierarchy.

    Children are ordered. ``parent`` is maintained by :meth:`add_child` and
    :meth:`detach`; never assign it directly.
    """

    name: str
    children: list[Node] = field(default_factory=list)
    local_position: Vector3 = ORIGIN
    active: bool = True
    parent: Node | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    def add_child(self, child: Node) -> Node:
        """Reparent ``child`` under this node (appended last)."""
        child.detach()
        child.parent = self
        self.children.append(child)
        return child

    def detach(self) -> None:
        """Remove this node from its parent, if any."""
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def child(self, name: str) -> Node | None:
        """Return the first direct child called ``name``."""
        for candidate in self.children:
            if candidate.name == name:
                return candidate
        return None

    def find(self, path: str) -> Node | None:
        """Resolve a ``/`` separated path of child names below this node."""
        node: Node | None = self
        for part in (p for p in path.split("/") if p):
            if node is None:
                return None
            node = node.child(part)
        return node

    def walk(self) -> Iterator[Node]:
        """Yield this node and every descendant in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def descendants(self) -> Iterator[Node]:
        """Yield every node below this one in pre-order (excluding self)."""
        for child in self.children:
            yield from child.walk()

    def descendant_names(self) -> list[str]:
        return [node.name for node in self.descendants()]

    def path(self) -> str:
        """Path from the hierarchy root down to this node (root excluded)."""
        parts: list[str] = []
        node: Node | None = self
        while node is not None and node.parent is not None:
            parts.append(node.name)
            node = node.parent
        return "/".join(reversed(parts))

    def clone(self) -> Node:
        """Deep copy detached from any parent."""
        parent, self.parent = self.parent, None
        try:
            return copy.deepcopy(self)
        finally:
            self.parent = parent

    def shape(self) -> tuple[str, tuple[Any, ...]]:
        """Name-only structural fingerprint, used for tree equality checks."""
        return (self.name, tuple(child.shape() for child in self.children))


def node_to_dict(node: Node) -> dict[str, Any]:
    """Serialize a node tree to plain data."""
    data: dict[str, Any] = {"name": node.name}
    if node.local_position != ORIGIN:
        data["position"] = list(node.local_position)
    if not node.active:
        data["active"] = False
    if node.children:
        data["children"] = [node_to_dict(child) for child in node.children]
    return data


def node_from_dict(data: dict[str, Any]) -> Node:
    """Build a node tree from plain data (inverse of :func:`node_to_dict`)."""
    if not isinstance(data, dict) or not str(data.get("name", "")).strip():
        raise ValueError("Hierarchy node must be a mapping with a 'name'")
    position = data.get("position") or ORIGIN
    if len(position) != 3:
        raise ValueError(f"Node {data['name']!r} position must have 3 components")
    return Node(
        name=str(data["name"]),
        children=[node_from_dict(child) for child in data.get("children") or []],
        local_position=tuple(float(v) for v in position),  # type: ignore[arg-type]
        active=bool(data.get("active", True)),
    )
