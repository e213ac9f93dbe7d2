"""
QuillMind Client — Tree Reducers
==================================

What:  Pure functions from (Forest, action arguments) to a new Forest.
How:   Nodes live in a flat map, so finding a node is a dict lookup and
       replacing it never copies its ancestors: a reducer builds a new
       `nodes` dict that reuses every untouched node object. A reducer
       that changes nothing returns the very same Forest.

Also converts between the arena and the nested
`{id, name, type, children}` shape a tree view renders.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from quillmind.tree.nodes import (
    Forest,
    NodeId,
    NodeKind,
    TreeNode,
    TreeStateError,
    node_key,
)

logger = logging.getLogger(__name__)


def _forest(roots: Tuple[str, ...], nodes: Dict[str, TreeNode]) -> Forest:
    # Skips re-validation so untouched node objects keep their identity.
    return Forest.model_construct(roots=roots, nodes=nodes)


def set_tree(forest: Forest) -> Forest:
    """Replace the whole forest, checking its shape first."""
    validate_forest(forest)
    return forest


def add_project(forest: Forest, node: TreeNode) -> Forest:
    """Append a new project node to the forest root."""
    if node.kind is not NodeKind.PROJECT:
        raise TreeStateError(f"Only project nodes can be added at the root, got {node.kind.value}")
    if node.children:
        raise TreeStateError("A new project node must not carry children")
    key = node.key
    if key in forest.nodes:
        raise TreeStateError(f"Node {key} is already in the tree")

    node = node.model_copy(update={"parent": None, "project_id": node.id})
    return _forest(forest.roots + (key,), {**forest.nodes, key: node})


def add_file_to_project(forest: Forest, project_id: NodeId, file: TreeNode) -> Forest:
    """
    Append `file` to the children of the top-level project `project_id`.

    An unknown project leaves the forest unchanged.
    """
    if file.kind is not NodeKind.FILE:
        raise TreeStateError(f"Expected a file node, got {file.kind.value}")
    project = forest.project(project_id)
    if project is None:
        logger.debug("add_file_to_project: project %s not in tree; ignored", project_id)
        return forest

    key = file.key
    if key in forest.nodes:
        raise TreeStateError(f"Node {key} is already in the tree")

    file = file.model_copy(update={"parent": project.key, "project_id": project.id})
    project = project.model_copy(update={"children": project.children + (key,)})
    return _forest(forest.roots, {**forest.nodes, project.key: project, key: file})


def update_file_content(forest: Forest, file_id: NodeId, content: Optional[str]) -> Forest:
    """
    Replace the cached content of file `file_id` (None forgets it).

    Only that node is replaced; every other node keeps its identity. An
    absent id, or content equal to what is cached, returns `forest` itself.
    """
    key = node_key(NodeKind.FILE, file_id)
    node = forest.nodes.get(key)
    if node is None or node.content == content:
        return forest
    return _forest(forest.roots, {**forest.nodes, key: node.model_copy(update={"content": content})})


def remove_node(forest: Forest, key: str) -> Forest:
    """Drop a node and its whole subtree. An absent key is a no-op."""
    node = forest.nodes.get(key)
    if node is None:
        return forest

    doomed = set(_walk(forest, [key]))
    nodes = {k: n for k, n in forest.nodes.items() if k not in doomed}
    roots = forest.roots
    if node.parent is None:
        roots = tuple(k for k in roots if k != key)
    else:
        parent = nodes[node.parent]
        nodes[parent.key] = parent.model_copy(
            update={"children": tuple(k for k in parent.children if k != key)}
        )
    return _forest(roots, nodes)


def _walk(forest: Forest, start: Iterable[str]) -> Iterable[str]:
    """Depth-first keys of the subtrees under `start` (pre-order)."""
    stack = list(reversed(list(start)))
    seen = set()
    while stack:
        key = stack.pop()
        if key in seen:
            raise TreeStateError(f"Node {key} is reached twice (cycle or shared child)")
        seen.add(key)
        yield key
        node = forest.nodes.get(key)
        if node is not None:
            stack.extend(reversed(node.children))


def validate_forest(forest: Forest) -> None:
    """
    Raise TreeStateError unless the forest is acyclic, every referenced key
    exists, every node has exactly the parent that lists it, and only
    folders have children.
    """
    reached = 0
    for key in _walk(forest, forest.roots):
        node = forest.nodes.get(key)
        if node is None:
            raise TreeStateError(f"Dangling reference to node {key}")
        if node.key != key:
            raise TreeStateError(f"Node stored under {key} has key {node.key}")
        if key in forest.roots:
            if node.kind is not NodeKind.PROJECT or node.parent is not None:
                raise TreeStateError(f"Root {key} must be a project without a parent")
        if node.children and not node.is_folder:
            raise TreeStateError(f"File node {key} cannot have children")
        for child in node.children:
            child_node = forest.nodes.get(child)
            if child_node is not None and child_node.parent != key:
                raise TreeStateError(f"Node {child} is listed under {key} but its parent is {child_node.parent}")
        reached += 1
    if reached != len(forest.nodes):
        raise TreeStateError("Forest contains nodes that are not reachable from a root")


# ── Nested shape ──────────────────────────────────────────────────────────

def build_forest(nested: Iterable[Dict[str, Any]]) -> Forest:
    """
    Build a Forest from nested dicts.

    Each top-level item is a project; children are `type: "folder"` or
    `type: "file"` items with their own `children`. Files may carry
    `content`. Duplicate keys raise TreeStateError.
    """
    nodes: Dict[str, TreeNode] = {}
    roots: List[str] = []

    def visit(item: Dict[str, Any], parent: Optional[TreeNode]) -> str:
        item_type = item.get("type", "folder" if parent is None else "file")
        if parent is None:
            kind = NodeKind.PROJECT
        elif item_type == "folder":
            kind = NodeKind.FOLDER
        elif item_type == "file":
            kind = NodeKind.FILE
        else:
            raise TreeStateError(f"Unknown node type {item_type!r}")

        project_id = item["id"] if parent is None else parent.project_id
        key = node_key(kind, item["id"])
        if key in nodes:
            raise TreeStateError(f"Node {key} appears more than once")

        node = TreeNode(
            kind=kind,
            id=item["id"],
            name=item.get("name", ""),
            project_id=project_id,
            parent=parent.key if parent is not None else None,
            content=item.get("content") if kind is NodeKind.FILE else None,
        )
        nodes[key] = node
        if kind is NodeKind.FILE:
            if item.get("children"):
                raise TreeStateError(f"File node {key} cannot have children")
            return key
        child_keys = tuple(visit(child, node) for child in item.get("children") or ())
        nodes[key] = node.model_copy(update={"children": child_keys})
        return key

    for item in nested:
        roots.append(visit(item, None))
    return _forest(tuple(roots), nodes)


def to_nested(forest: Forest) -> List[Dict[str, Any]]:
    """Render the forest back into nested dicts, keeping child order."""

    def render(key: str) -> Dict[str, Any]:
        node = forest.nodes[key]
        out: Dict[str, Any] = {
            "id": node.id,
            "key": key,
            "name": node.name,
            "type": "file" if node.kind is NodeKind.FILE else "folder",
            "project_id": node.project_id,
        }
        if node.kind is NodeKind.FILE:
            out["content"] = node.content
        else:
            out["children"] = [render(child) for child in node.children]
        return out

    return [render(key) for key in forest.roots]
