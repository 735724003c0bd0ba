"""JSON value -> node tree."""

from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

ROOT_ID = "root"
CLOSING_SEGMENT = "]"

_KEY_ESCAPES = str.maketrans({"\\": "\\\\", ".": "\\.", "[": "\\[", "]": "\\]"})


class NodeType(Enum):
    OBJECT = auto()
    ARRAY = auto()
    PRIMITIVE = auto()
    CLOSING = auto()


class PathKind(Enum):
    ROOT = auto()
    OBJECT = auto()
    ARRAY = auto()


@dataclass(frozen=True)
class NodePath:
    """Location of a node: the holding container's kind, its key and the full path."""

    kind: PathKind
    key: str | int | None = None
    segments: tuple[str | int, ...] = ()


@dataclass(eq=False)
class TreeNode:
    id: str
    path: NodePath
    type: NodeType
    level: int
    value: object = None
    children: list[TreeNode] = field(default_factory=list)
    is_collapsible: bool = False
    parent_id: str | None = None
    index: int = 0  # position among the parent's children
    sibling_count: int = 1

    @property
    def is_container(self) -> bool:
        return self.type in (NodeType.OBJECT, NodeType.ARRAY)

    @property
    def is_closing(self) -> bool:
        return self.type is NodeType.CLOSING

    @property
    def is_last(self) -> bool:
        return self.index >= self.sibling_count - 1

    def __repr__(self) -> str:
        return f"TreeNode({self.id!r}, {self.type.name})"


def _segment(step: str | int) -> str:
    # bool is an int subclass but never a valid index
    if isinstance(step, int) and not isinstance(step, bool):
        return f"[{step}]"
    return str(step).translate(_KEY_ESCAPES)


def generate_node_id(segments: Sequence[str | int]) -> str:
    """Build a node id from its path.

    ``[]`` maps to ``"root"``; every other path is ``root.<seg>.<seg>...``
    where index steps render as ``[i]`` and keys have ``\\ . [ ]`` escaped,
    so two different paths never share an id.
    """
    if not segments:
        return ROOT_ID
    return ".".join([ROOT_ID, *(_segment(s) for s in segments)])


def closing_id(owner_id: str) -> str:
    """Id of the closing marker that belongs to *owner_id*."""
    return f"{owner_id}.{CLOSING_SEGMENT}"


def classify_value(value: object) -> NodeType:
    if isinstance(value, dict):
        return NodeType.OBJECT
    if isinstance(value, (list, tuple)):
        return NodeType.ARRAY
    return NodeType.PRIMITIVE


def build_tree(
    value: object,
    segments: tuple[str | int, ...] = (),
    level: int = 0,
    parent: TreeNode | None = None,
    index: int = 0,
    sibling_count: int = 1,
) -> TreeNode:
    """Recursively convert a parsed JSON value into a :class:`TreeNode`.

    Containers keep one child per element/member in iteration order. Only
    non-empty containers are collapsible; ``{}`` and ``[]`` stay plain.
    """
    node_type = classify_value(value)
    if parent is None:
        path = NodePath(PathKind.ROOT, None, segments)
    elif parent.type is NodeType.ARRAY:
        path = NodePath(PathKind.ARRAY, segments[-1], segments)
    else:
        path = NodePath(PathKind.OBJECT, segments[-1], segments)

    node = TreeNode(
        id=generate_node_id(segments),
        path=path,
        type=node_type,
        level=level,
        value=value if node_type is NodeType.PRIMITIVE else None,
        parent_id=parent.id if parent is not None else None,
        index=index,
        sibling_count=sibling_count,
    )

    if node_type is NodeType.OBJECT:
        items: list[tuple[str | int, object]] = list(value.items())  # type: ignore[union-attr]
    elif node_type is NodeType.ARRAY:
        items = list(enumerate(value))  # type: ignore[arg-type]
    else:
        return node

    node.is_collapsible = bool(items)
    count = len(items)
    node.children = [
        build_tree(child, (*segments, key), level + 1, node, i, count)
        for i, (key, child) in enumerate(items)
    ]
    return node


def iter_nodes(root: TreeNode) -> Iterator[TreeNode]:
    """Pre-order walk over the static tree (no closing markers)."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def count_nodes(root: TreeNode) -> tuple[int, int]:
    """Return ``(containers, primitives)`` in the tree under *root*."""
    containers = primitives = 0
    for node in iter_nodes(root):
        if node.is_container:
            containers += 1
        else:
            primitives += 1
    return containers, primitives


def make_closing(owner: TreeNode) -> TreeNode:
    """Synthesise the closing-brace node for an expanded container."""
    return TreeNode(
        id=closing_id(owner.id),
        path=owner.path,
        type=NodeType.CLOSING,
        level=owner.level,
        value="}" if owner.type is NodeType.OBJECT else "]",
        parent_id=owner.id,
        index=owner.index,
        sibling_count=owner.sibling_count,
    )


def format_path(segments: Sequence[str | int]) -> str:
    """Render a path as ``.users[0].name``; the root is ``.``.

    Keys that are not identifiers are quoted: ``.["a b"]``.
    """
    parts: list[str] = []
    for step in segments:
        if isinstance(step, int) and not isinstance(step, bool):
            parts.append(f"[{step}]")
        elif str(step).isidentifier():
            parts.append(f".{step}")
        else:
            parts.append(f"[{json.dumps(str(step), ensure_ascii=False)}]")
    if not parts or parts[0].startswith("["):
        parts.insert(0, ".")
    return "".join(parts)


def value_type(node: TreeNode) -> str:
    """JSON type name of *node*: object, array, string, number, boolean or null."""
    if node.type is NodeType.OBJECT:
        return "object"
    if node.type is NodeType.ARRAY:
        return "array"
    value = node.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "string"
