"""
QuillMind Client — Tree State
===============================

What:  The client-side projection of a user's projects and files.
How:   An immutable Forest: a flat map from node key to frozen node, plus
       the ordered root keys. Every mutation is a pure reducer returning a
       new Forest that shares all untouched nodes with the old one.
Who:   Owned by the UI root through a TreeStore; filled and kept in step
       with the server by quillmind.client.sync.
"""

from quillmind.tree.nodes import (
    Forest,
    NodeKind,
    TreeNode,
    TreeStateError,
    file_node,
    folder_node,
    node_key,
    project_node,
)
from quillmind.tree.reducers import (
    add_file_to_project,
    add_project,
    build_forest,
    remove_node,
    set_tree,
    to_nested,
    update_file_content,
)
from quillmind.tree.store import TreeState, TreeStore

__all__ = [
    "Forest",
    "NodeKind",
    "TreeNode",
    "TreeStateError",
    "TreeState",
    "TreeStore",
    "add_file_to_project",
    "add_project",
    "build_forest",
    "file_node",
    "folder_node",
    "node_key",
    "project_node",
    "remove_node",
    "set_tree",
    "to_nested",
    "update_file_content",
]
