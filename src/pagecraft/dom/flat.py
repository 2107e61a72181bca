# src/pagecraft/dom/flat.py
"""
Flat builder data: the editor's storage format, a map of node id to node
record with parent/child references instead of nesting.
"""
from typing import Any, Dict, List, Set

from pagecraft.errors import SerializationFailure
from .core import LEAF_KINDS, DocumentNode, NodeKind, StyleRecord, new_node_id

ROOT_KEY = "ROOT"


def flatten_document(root: DocumentNode) -> Dict[str, Dict[str, Any]]:
    """Flattens a tree into `{id: {kind, props, style, nodes, parent, rawContent}}`, root keyed ROOT."""
    flat: Dict[str, Dict[str, Any]] = {}
    stack = [(root, None)]
    while stack:
        node, parent_key = stack.pop()
        key = ROOT_KEY if parent_key is None else node.id
        flat[key] = {
            "kind": node.kind.value,
            "props": node.props,
            "style": node.style.model_dump(exclude_none=True, exclude_defaults=True),
            "nodes": [child.id for child in node.children],
            "parent": parent_key,
            "rawContent": node.raw_content,
        }
        stack.extend((child, key) for child in reversed(node.children))
    return flat


def unflatten_document(data: Dict[str, Dict[str, Any]], root_key: str = ROOT_KEY) -> DocumentNode:
    """
    Rebuilds a tree from flat builder data.

    Raises SerializationFailure for dangling references, nodes claimed by more
    than one parent, cycles or records that violate the node contract.
    """
    if root_key not in data:
        raise SerializationFailure(f"Flat document has no '{root_key}' entry")

    nodes: Dict[str, DocumentNode] = {}
    claimed: Set[str] = set()
    pending: List[str] = [root_key]
    order: List[str] = []

    while pending:
        key = pending.pop()
        record = data.get(key)
        if not isinstance(record, dict):
            raise SerializationFailure(f"Flat document references missing node '{key}'")
        child_keys = record.get("nodes") or []
        for child_key in child_keys:
            if child_key == root_key or child_key in claimed:
                raise SerializationFailure(f"Node '{child_key}' has more than one parent or forms a cycle")
            claimed.add(child_key)
        nodes[key] = _node_from_record(key, record, root_key)
        if nodes[key].kind in LEAF_KINDS and child_keys:
            raise SerializationFailure(f"{nodes[key].kind.value} node '{key}' cannot have children")
        order.append(key)
        pending.extend(reversed(child_keys))

    # Children are attached after every node exists; `order` is parent-before-child.
    for key in order:
        nodes[key].children = [nodes[child_key] for child_key in data[key].get("nodes") or []]
    return nodes[root_key]


def _node_from_record(key: str, record: Dict[str, Any], root_key: str) -> DocumentNode:
    try:
        kind = NodeKind(record.get("kind"))
        if (kind == NodeKind.ROOT) != (key == root_key):
            raise SerializationFailure(f"Root kind is only allowed for the '{root_key}' entry")
        return DocumentNode(
            id=key if key != root_key else new_node_id(),
            kind=kind,
            props=record.get("props") or {},
            style=StyleRecord.model_validate(record.get("style") or {}),
            raw_content=record.get("rawContent"),
        )
    except ValueError as e:
        raise SerializationFailure(f"Invalid flat node '{key}': {e}") from e
