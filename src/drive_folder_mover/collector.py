"""
File collector: lists the children of every discovered folder.

Children are not filtered by type here. A child folder is normally already
part of the subtree index and is excluded later by the plan builder.
"""

import logging
from typing import List

from .client import DirectoryClient
from .errors import InconsistencyError
from .types import FolderTreeEntry, SubtreeIndex

logger = logging.getLogger(__name__)


def collect_files(client: DirectoryClient, index: SubtreeIndex) -> List[FolderTreeEntry]:
    """
    Build one FolderTreeEntry per folder of the index, in index order.

    Raises:
        InconsistencyError: If an ancestry chain references a folder
                            missing from the index
    """
    entries: List[FolderTreeEntry] = []
    total_children = 0

    for folder_id, node in index.items():
        missing = [a for a in node.ancestry if a not in index]
        if missing:
            raise InconsistencyError(
                f"Folder {folder_id} has ancestors missing from the index: {missing}"
            )

        children = list(client.list_children(folder_id))
        total_children += len(children)
        entries.append(FolderTreeEntry(
            folder_chain_by_id=list(node.ancestry),
            folder_chain_by_name=[index[a].name for a in node.ancestry],
            files_in_folder=children,
        ))
        logger.debug(f"'{node.name}' ({folder_id}) has {len(children)} child item(s)")

    logger.info(f"Collected {total_children} child item(s) from {len(entries)} folder(s)")
    return entries
