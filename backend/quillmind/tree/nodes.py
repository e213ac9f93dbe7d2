"""
QuillMind Client — Tree Nodes
===============================

What:  Frozen node models and the Forest arena that holds them.

Node keys:
    Projects and files come from different tables, so their numeric ids
    overlap. Nodes are stored under "<kind>-<id>" keys ("project-3",
    "folder-notes", "file-9") and a node's `id` stays the persistent
    identifier its server mutations are routed by.

Shape invariants:
    - every key in `roots` and in any `children` tuple is present in `nodes`
    - each node has at most one parent (`parent` is that parent's key)
    - only PROJECT and FOLDER nodes have children; roots are PROJECT nodes
"""

import enum
from typing import Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

NodeId = Union[int, str]


class TreeStateError(ValueError):
    """A tree mutation would break the forest's shape invariants."""


class NodeKind(str, enum.Enum):
    PROJECT = "project"
    FOLDER = "folder"
    FILE = "file"


def node_key(kind: NodeKind, node_id: NodeId) -> str:
    return f"{NodeKind(kind).value}-{node_id}"


class TreeNode(BaseModel):
    """
    One node of the forest.

    `content` is the cached file text; None means it has not been fetched
    yet, which is different from an empty file ("").
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    id: NodeId
    name: str
    project_id: Optional[NodeId] = None
    parent: Optional[str] = None
    children: Tuple[str, ...] = ()
    content: Optional[str] = None

    @property
    def key(self) -> str:
        return node_key(self.kind, self.id)

    @property
    def is_folder(self) -> bool:
        return self.kind is not NodeKind.FILE


def project_node(project_id: NodeId, name: str) -> TreeNode:
    return TreeNode(kind=NodeKind.PROJECT, id=project_id, name=name, project_id=project_id)


def folder_node(folder_id: NodeId, name: str, project_id: NodeId) -> TreeNode:
    return TreeNode(kind=NodeKind.FOLDER, id=folder_id, name=name, project_id=project_id)


def file_node(
    file_id: NodeId,
    name: str,
    project_id: NodeId,
    content: Optional[str] = None,
) -> TreeNode:
    return TreeNode(
        kind=NodeKind.FILE,
        id=file_id,
        name=name,
        project_id=project_id,
        content=content,
    )


class Forest(BaseModel):
    """
    Immutable snapshot of every project tree.

    Treat `nodes` as read-only: reducers build a new dict for every change
    and never write into an existing one.
    """

    model_config = ConfigDict(frozen=True)

    roots: Tuple[str, ...] = ()
    nodes: Dict[str, TreeNode] = {}

    def get(self, key: str) -> Optional[TreeNode]:
        return self.nodes.get(key)

    def project(self, project_id: NodeId) -> Optional[TreeNode]:
        """Top-level lookup only; projects are never nested."""
        key = node_key(NodeKind.PROJECT, project_id)
        return self.nodes.get(key) if key in self.roots else None

    def file(self, file_id: NodeId) -> Optional[TreeNode]:
        return self.nodes.get(node_key(NodeKind.FILE, file_id))

    def children_of(self, key: str) -> Tuple[TreeNode, ...]:
        node = self.nodes.get(key)
        if node is None:
            return ()
        return tuple(self.nodes[k] for k in node.children)

    def __contains__(self, key: object) -> bool:
        return key in self.nodes
