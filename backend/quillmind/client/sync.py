"""
QuillMind Client — Tree Sync Helpers
======================================

What:  Keep a TreeStore consistent with the server.
How:   Structural changes (new project, new file, deletes) are applied to
       the tree only after the server confirms them. Content edits are
       optimistic: the tree shows the new text immediately and goes back
       to the previous text if the save fails.
"""

import logging
from typing import Optional

import httpx

from quillmind.client.api_client import ApiError, QuillMindClient
from quillmind.schemas.project import FileDetail, ProjectResponse
from quillmind.tree.nodes import Forest, NodeKind, TreeNode, TreeStateError, file_node, node_key, project_node
from quillmind.tree.reducers import build_forest
from quillmind.tree.store import TreeStore

logger = logging.getLogger(__name__)


async def load_forest(client: QuillMindClient) -> Forest:
    """
    Build the forest from the server: projects newest first, each with its
    files by name. Content is not fetched until a file is opened.
    """
    nested = []
    for project in await client.list_projects():
        files = await client.list_files(project.id)
        nested.append({
            "id": project.id,
            "name": project.name,
            "type": "folder",
            "children": [{"id": f.id, "name": f.name, "type": "file"} for f in files],
        })
    forest = build_forest(nested)
    logger.info("Loaded %d projects (%d nodes)", len(forest.roots), len(forest.nodes))
    return forest


async def open_file(client: QuillMindClient, store: TreeStore, file_id: int) -> TreeNode:
    """Fetch a file's content into the tree and make it the current file."""
    detail = await client.get_file(file_id)
    if store.forest.file(file_id) is None:
        store.add_file_to_project(
            detail.project_id,
            file_node(detail.id, detail.name, detail.project_id, content=detail.content),
        )
    else:
        store.update_file_content(file_id, detail.content)

    node = store.forest.file(file_id)
    if node is None:
        raise TreeStateError(f"Project {detail.project_id} of file {file_id} is not loaded")
    store.set_current_file(node)
    return node


async def persist_file_content(
    client: QuillMindClient,
    store: TreeStore,
    file_id: int,
    content: str,
) -> FileDetail:
    """
    Show `content` locally at once, then save it.

    If the server refuses the save (or cannot be reached) the previous
    cached content is restored and the error is re-raised.
    """
    node = store.forest.file(file_id)
    previous: Optional[str] = node.content if node is not None else None

    store.update_file_content(file_id, content)
    try:
        detail = await client.update_file_content(file_id, content)
    except (ApiError, httpx.HTTPError):
        if node is not None:
            store.update_file_content(file_id, previous)
            logger.warning("Save of file %s failed; local edit rolled back", file_id)
        raise

    store.update_file_content(file_id, detail.content)
    return detail


async def create_project(client: QuillMindClient, store: TreeStore, name: str) -> ProjectResponse:
    project = await client.create_project(name)
    store.add_project(project_node(project.id, project.name))
    return project


async def create_file(
    client: QuillMindClient,
    store: TreeStore,
    project_id: int,
    name: str,
    file_type: Optional[str] = None,
) -> FileDetail:
    detail = await client.create_file(project_id, name, file_type=file_type)
    store.add_file_to_project(
        project_id,
        file_node(detail.id, detail.name, detail.project_id, content=detail.content),
    )
    return detail


async def delete_file(client: QuillMindClient, store: TreeStore, file_id: int) -> None:
    await client.delete_file(file_id)
    store.remove_node(node_key(NodeKind.FILE, file_id))


async def delete_project(client: QuillMindClient, store: TreeStore, project_id: int) -> None:
    await client.delete_project(project_id)
    store.remove_node(node_key(NodeKind.PROJECT, project_id))
