"""
Tree mirror planner: recreates the source folder skeleton at the destination.

This module is responsible for:
- Creating one destination folder per source folder, parents first
- Placing the source root's mirror directly under the destination folder
- Skipping source folders that were already mirrored (dedup by id and name)
- Recording rejected creations instead of aborting the whole tree
- Assigning placeholder ids in dry-run mode (no remote calls)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .client import DirectoryClient
from .errors import InvalidInputError, RemoteRejectedError
from .types import DestinationMap, FolderTreeEntry, MirrorFolder

logger = logging.getLogger(__name__)

DRY_RUN_PREFIX = "dry-run:"


@dataclass
class MirrorResult:
    """Destination folders created for a tree, plus the ones that failed."""
    destination_map: DestinationMap = field(default_factory=dict)
    created_count: int = 0
    # Source folder id -> reason its mirror does not exist
    failures: Dict[str, str] = field(default_factory=dict)


def mirror(
    client: DirectoryClient,
    entries: List[FolderTreeEntry],
    destination_root_id: str,
    dry_run: bool = False
) -> MirrorResult:
    """
    Recreate every folder of the entries' ancestry chains under destination_root_id.

    Chains are walked left to right, so a folder's parent mirror always
    exists before the folder itself is created. When a creation is rejected
    (permission, quota, not found) the folder and every descendant stay
    unmirrored and are listed in MirrorResult.failures.

    Args:
        client: Directory client used for create_folder calls
        entries: Collected entries; every chain must start at the source root
        destination_root_id: Existing folder receiving the root's mirror
        dry_run: If True, assign placeholder ids instead of creating folders

    Returns:
        MirrorResult with the destination map and failures

    Raises:
        InvalidInputError: If destination_root_id is empty
        RemoteUnavailableError: If the service cannot be reached
    """
    if not destination_root_id:
        raise InvalidInputError("A destination folder id is required")

    result = MirrorResult()
    destinations = result.destination_map

    for entry in entries:
        chain = entry.folder_chain_by_id

        for j, (source_id, name) in enumerate(zip(chain, entry.folder_chain_by_name)):
            existing = destinations.get(source_id)
            if existing is not None:
                if existing.name != name:
                    logger.warning(
                        f"Folder {source_id} seen as '{name}' but mirrored as "
                        f"'{existing.name}', keeping the first mirror"
                    )
                continue

            if source_id in result.failures:
                continue

            if j == 0:
                parent_id = destination_root_id
            else:
                parent_mirror = destinations.get(chain[j - 1])
                if parent_mirror is None:
                    result.failures[source_id] = (
                        f"mirror of parent folder {chain[j - 1]} was not created"
                    )
                    logger.warning(f"Not mirroring '{name}' ({source_id}): "
                                   f"{result.failures[source_id]}")
                    break
                parent_id = parent_mirror.new_id

            if dry_run:
                new_id = f"{DRY_RUN_PREFIX}{source_id}"
                logger.info(f"[DRY RUN] Would create folder '{name}' in {parent_id}")
            else:
                try:
                    new_id = client.create_folder(name, parent_id)
                except RemoteRejectedError as e:
                    result.failures[source_id] = str(e)
                    logger.error(f"Could not create mirror of '{name}' ({source_id}): {e}")
                    break
                logger.debug(f"Created folder '{name}' ({new_id}) in {parent_id}")

            destinations[source_id] = MirrorFolder(new_id=new_id, name=name)
            result.created_count += 1

    logger.info(
        f"Mirrored {result.created_count} folder(s) under {destination_root_id}"
        + (f", {len(result.failures)} failed" if result.failures else "")
    )
    return result
