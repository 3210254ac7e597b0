"""
Move plan builder: turns a collected snapshot into an ordered batch.

The plan is a pure function of the collected entries and the destination
map; it performs no remote calls. Operation order:
1. One ATTACH per leaf file, moving it from its source folder to the mirror
2. One DELETE per source folder, deepest folders first

Folders without a mirror keep their files in place. Such folders, and
every ancestor of them, are not deleted, since deleting a folder also
removes whatever it still contains.
"""

import logging
from typing import Dict, List, Set, Tuple

from .types import (
    DestinationMap,
    FolderTreeEntry,
    MoveOperation,
    MovePlan,
    OperationKind,
)

logger = logging.getLogger(__name__)


def internal_folder_ids(entries: List[FolderTreeEntry]) -> Set[str]:
    """Return every folder id appearing in any ancestry chain."""
    return {folder_id for entry in entries for folder_id in entry.folder_chain_by_id}


def count_eligible_files(entries: List[FolderTreeEntry]) -> int:
    """Count children that are not folders of the subtree itself."""
    internal = internal_folder_ids(entries)
    return sum(
        1
        for entry in entries
        for child in entry.files_in_folder
        if child.id not in internal
    )


def build_plan(entries: List[FolderTreeEntry], destination_map: DestinationMap) -> MovePlan:
    """
    Build the batch of ATTACH and DELETE operations for a mirrored tree.

    Args:
        entries: Collected entries, one per folder of the subtree
        destination_map: Mirrors created by the planner, keyed by source folder id

    Returns:
        MovePlan. When no file can be attached the plan holds no operations
        at all (nothing to move), but still carries its diagnostics.
    """
    internal = internal_folder_ids(entries)
    plan = MovePlan()
    attach_ops: List[MoveOperation] = []
    retained: Set[str] = set()
    ancestry: Dict[str, Tuple[str, ...]] = {}

    for entry in entries:
        folder_id = entry.folder_id
        ancestry[folder_id] = tuple(entry.folder_chain_by_id)
        files = [child for child in entry.files_in_folder if child.id not in internal]
        target = destination_map.get(folder_id)

        if target is None:
            plan.skipped_folder_ids.append(folder_id)
            retained.update(entry.folder_chain_by_id)
            if not files:
                plan.diagnostics.append(
                    f"Folder '{entry.folder_name}' ({folder_id}) has no mirror; kept in place"
                )
            for child in files:
                plan.skipped_file_ids.append(child.id)
                plan.diagnostics.append(
                    f"File '{child.name}' ({child.id}) not moved: folder "
                    f"'{entry.folder_name}' ({folder_id}) has no mirror"
                )
            continue

        for child in files:
            attach_ops.append(MoveOperation(
                kind=OperationKind.ATTACH,
                target_id=child.id,
                parent_id=target.new_id,
                previous_parent_id=folder_id,
            ))

    plan.folder_ancestry = ancestry

    for message in plan.diagnostics:
        logger.warning(message)

    if not attach_ops:
        logger.warning("No files eligible for moving, nothing to move")
        return plan

    # sorted() is stable, so folders of equal depth keep discovery order
    doomed = sorted(
        (folder_id for folder_id in ancestry if folder_id not in retained),
        key=lambda folder_id: len(ancestry[folder_id]),
        reverse=True,
    )
    delete_ops = [
        MoveOperation(kind=OperationKind.DELETE, target_id=folder_id)
        for folder_id in doomed
    ]

    plan.operations = attach_ops + delete_ops
    logger.info(
        f"Planned {len(attach_ops)} file move(s) and {len(delete_ops)} folder deletion(s)"
        + (f", {len(retained)} folder(s) kept" if retained else "")
    )
    return plan
