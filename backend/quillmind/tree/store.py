"""
QuillMind Client — Tree Store
===============================

What:  The explicit state container for the tree, owned by the UI root.
How:   Holds one immutable TreeState (forest + key of the file being
       edited). Each mutation runs a pure reducer; when the reducer returns
       a different state, subscribers are called with it.

Single-threaded by contract: mutate only from the UI's event context.
"""

import logging
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict

from quillmind.tree import reducers
from quillmind.tree.nodes import Forest, NodeId, NodeKind, TreeNode, TreeStateError

logger = logging.getLogger(__name__)

Listener = Callable[["TreeState"], None]


class TreeState(BaseModel):
    model_config = ConfigDict(frozen=True)

    forest: Forest = Forest()
    current_key: Optional[str] = None

    @property
    def current_file(self) -> Optional[TreeNode]:
        """The file being edited, read from the forest so it is never stale."""
        if self.current_key is None:
            return None
        return self.forest.get(self.current_key)


class TreeStore:
    def __init__(self, state: Optional[TreeState] = None):
        self._state = state or TreeState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> TreeState:
        return self._state

    @property
    def forest(self) -> Forest:
        return self._state.forest

    @property
    def current_file(self) -> Optional[TreeNode]:
        return self._state.current_file

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, forest: Forest, current_key: Optional[str]) -> TreeState:
        if current_key is not None and current_key not in forest:
            current_key = None
        if forest is self._state.forest and current_key == self._state.current_key:
            return self._state

        self._state = TreeState.model_construct(forest=forest, current_key=current_key)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    # ── Actions ───────────────────────────────────────────────────────────

    def set_tree(self, forest: Forest) -> TreeState:
        return self._commit(reducers.set_tree(forest), self._state.current_key)

    def add_project(self, node: TreeNode) -> TreeState:
        return self._commit(reducers.add_project(self.forest, node), self._state.current_key)

    def add_file_to_project(self, project_id: NodeId, file: TreeNode) -> TreeState:
        return self._commit(
            reducers.add_file_to_project(self.forest, project_id, file),
            self._state.current_key,
        )

    def update_file_content(self, file_id: NodeId, content: Optional[str]) -> TreeState:
        return self._commit(
            reducers.update_file_content(self.forest, file_id, content),
            self._state.current_key,
        )

    def remove_node(self, key: str) -> TreeState:
        return self._commit(reducers.remove_node(self.forest, key), self._state.current_key)

    def set_current_file(self, node: Optional[TreeNode]) -> TreeState:
        """Select the file to edit, or clear the selection with None."""
        if node is None:
            return self._commit(self.forest, None)
        if node.kind is not NodeKind.FILE:
            raise TreeStateError(f"Only file nodes can be opened, got {node.kind.value}")
        if node.key not in self.forest:
            raise TreeStateError(f"Node {node.key} is not in the tree")
        return self._commit(self.forest, node.key)
