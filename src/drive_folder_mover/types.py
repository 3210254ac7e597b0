"""
Type definitions and data classes for the folder mover application.

This module defines:
- FolderNode: A folder discovered while walking the source subtree
- ItemMetadata / ChildItem: Remote item shapes returned by a directory client
- FolderTreeEntry: One discovered folder with its ancestry and children
- MirrorFolder: The recreated destination folder for a source folder
- MoveOperation / OperationResult: Batch mutations and their outcomes
- MovePlan: The ordered batch built from a snapshot of the subtree
- MoveRequest: One (source, destination) pair from a move list
- ReportEntry: Data class for CSV report rows
- MoveOutcome: The user-visible result of one folder move
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


@dataclass(slots=True)
class FolderNode:
    """
    Represents a folder discovered during the subtree walk.

    Attributes:
        id: The folder's remote identifier
        name: The folder's display name
        parent_id: Identifier of the immediate parent (outside scope for the root)
        ancestry: Identifiers from the discovery root down to this folder,
                  always starting with the root id and ending with ``id``
    """
    id: str
    name: str
    parent_id: Optional[str]
    ancestry: Tuple[str, ...]

    @property
    def depth(self) -> int:
        return len(self.ancestry) - 1


# Folder id -> FolderNode, root first, ancestors before descendants
SubtreeIndex = Dict[str, FolderNode]


@dataclass(slots=True)
class ItemMetadata:
    """Metadata of a single remote item."""
    id: str
    name: str
    drive_id: Optional[str] = None
    parents: List[str] = field(default_factory=list)

    @property
    def in_shared_drive(self) -> bool:
        return self.drive_id is not None


@dataclass(slots=True)
class ChildItem:
    """A child returned by a list-children query."""
    id: str
    name: str
    parents: List[str] = field(default_factory=list)
    is_folder: bool = False


@dataclass
class FolderTreeEntry:
    """A discovered folder, its chain from the root and its immediate children."""
    folder_chain_by_id: List[str]
    folder_chain_by_name: List[str]
    files_in_folder: List[ChildItem] = field(default_factory=list)

    @property
    def folder_id(self) -> str:
        return self.folder_chain_by_id[-1]

    @property
    def folder_name(self) -> str:
        return self.folder_chain_by_name[-1]


@dataclass(slots=True)
class MirrorFolder:
    """A folder created at the destination for one source folder."""
    new_id: str
    name: str


# Source folder id -> MirrorFolder, filled ancestor-first
DestinationMap = Dict[str, MirrorFolder]


class OperationKind(Enum):
    """Kind of remote mutation."""
    ATTACH = "attach"      # Add new parent, remove old parent
    DELETE = "delete"      # Delete an emptied source folder
    REPARENT = "reparent"  # Direct move of the source folder itself


@dataclass(frozen=True)
class MoveOperation:
    """A single mutation to submit to the directory service."""
    kind: OperationKind
    target_id: str
    parent_id: Optional[str] = None
    previous_parent_id: Optional[str] = None


@dataclass
class OperationResult:
    """Result of one submitted mutation."""
    operation: MoveOperation
    success: bool
    message: str = ""


@dataclass
class MovePlan:
    """
    The ordered batch built from a collected snapshot.

    All ATTACH operations precede every DELETE operation.
    """
    operations: List[MoveOperation] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
    skipped_folder_ids: List[str] = field(default_factory=list)
    skipped_file_ids: List[str] = field(default_factory=list)
    # Folder id -> ancestry chain, for every folder of the subtree
    folder_ancestry: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def attach_operations(self) -> List[MoveOperation]:
        return [op for op in self.operations if op.kind == OperationKind.ATTACH]

    @property
    def delete_operations(self) -> List[MoveOperation]:
        return [op for op in self.operations if op.kind == OperationKind.DELETE]

    @property
    def nothing_to_move(self) -> bool:
        return not self.attach_operations


@dataclass(frozen=True)
class MoveRequest:
    """A source folder to move into a destination folder."""
    source_id: str
    destination_id: str


class MoveState(Enum):
    """States of the move orchestrator."""
    CHECKING_CONTEXT = "checking_context"
    DIRECT_MOVE = "direct_move"
    TREE_MIRROR = "tree_mirror"
    SUBMITTED = "submitted"
    DONE = "done"
    FAILED = "failed"


class MoveStatus(Enum):
    """Status of a folder move."""
    DIRECT_MOVE = "direct_move"          # Reparented in a single call
    MOVED = "moved"                      # Tree mirrored, every operation succeeded
    PARTIAL = "partial"                  # Tree mirrored with skipped files or failed operations
    NOTHING_TO_MOVE = "nothing_to_move"  # No file eligible for attachment
    DRY_RUN = "dry_run"                  # Would move (dry run mode)
    FAILED = "failed"                    # Aborted by an error


@dataclass
class MoveOutcome:
    """Result of moving one folder."""
    source_id: str
    destination_id: str
    status: MoveStatus
    moved_file_count: int = 0
    recreated_folder_count: int = 0
    deleted_folder_count: int = 0
    skipped_folder_ids: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    results: List[OperationResult] = field(default_factory=list)

    @property
    def failed_results(self) -> List[OperationResult]:
        return [r for r in self.results if not r.success]


@dataclass
class ReportEntry:
    """Entry for the CSV report."""
    timestamp: str
    source_id: str
    destination_id: str
    status: str
    moved_files: int
    recreated_folders: int
    deleted_folders: int
    skipped_folders: str
    errors: str
