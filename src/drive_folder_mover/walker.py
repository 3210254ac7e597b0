"""
Subtree walker for discovering every folder under a source folder.

This module is responsible for:
- Fetching the root folder's metadata once
- Listing folder-only children for each discovered folder
- Recording each folder with its ancestry chain from the root
- Rejecting folders observed twice instead of overwriting them

The walk uses an explicit stack instead of recursion so very deep trees do
not exhaust the interpreter's recursion limit. All calls are read-only.
"""

import logging
from typing import List

from .client import DirectoryClient
from .errors import InconsistencyError, InvalidInputError
from .types import FolderNode, SubtreeIndex

logger = logging.getLogger(__name__)


def discover(client: DirectoryClient, root_id: str) -> SubtreeIndex:
    """
    Discover all folders transitively reachable from root_id.

    Folders are visited depth-first in listing order. The returned index
    always holds the root first and every folder after its parent.

    Args:
        client: Directory client used for the read-only queries
        root_id: Identifier of the folder to walk

    Returns:
        Mapping of folder id to FolderNode, including the root

    Raises:
        InvalidInputError: If root_id is empty
        NotFoundError: If the root is not accessible
        InconsistencyError: If a folder id is reached twice
    """
    if not root_id:
        raise InvalidInputError("A root folder id is required")

    root = client.get_metadata(root_id)
    parent_id = root.parents[0] if root.parents else None
    index: SubtreeIndex = {
        root_id: FolderNode(id=root_id, name=root.name, parent_id=parent_id, ancestry=(root_id,))
    }
    logger.info(f"Walking folder tree of '{root.name}' ({root_id})")

    # Nodes still to be listed; popped from the end
    pending: List[FolderNode] = [index[root_id]]

    while pending:
        node = pending.pop()
        children: List[FolderNode] = []

        for child in client.list_children(node.id, folder_only=True):
            if child.id in index:
                known = index[child.id]
                raise InconsistencyError(
                    f"Folder {child.id} reached again under {node.id} at depth "
                    f"{node.depth + 1} (already recorded under {known.parent_id} "
                    f"at depth {known.depth})"
                )
            folder = FolderNode(
                id=child.id,
                name=child.name,
                parent_id=node.id,
                ancestry=node.ancestry + (child.id,),
            )
            index[child.id] = folder
            children.append(folder)
            logger.debug(f"Found folder '{child.name}' ({child.id}) at depth {folder.depth}")

        # Reversed so the first listed child is walked first
        pending.extend(reversed(children))

    logger.info(f"Discovered {len(index)} folder(s) under {root_id}")
    return index
