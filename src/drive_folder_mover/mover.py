"""
Folder mover: orchestrates moving a folder subtree to a new parent.

This module is responsible for:
- Checking whether either endpoint lives in a shared drive
- Reparenting the folder in a single call when neither does
- Otherwise walking, collecting, mirroring, planning and submitting
- Supporting dry-run mode (read-only calls, nothing created or moved)
- Turning per-branch problems into outcome errors instead of aborting
- Processing move lists and keeping statistics across moves

State machine of one move:

    CHECKING_CONTEXT -> DIRECT_MOVE | TREE_MIRROR -> SUBMITTED -> DONE

FAILED is entered from any state when an error aborts the move. The error
is re-raised by move_folder(); move_all() converts it into a FAILED outcome.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from .client import DirectoryClient
from .collector import collect_files
from .errors import InvalidInputError, MoveError
from .executor import execute_plan
from .plan import build_plan, count_eligible_files
from .planner import mirror
from .types import (
    ItemMetadata,
    MoveOutcome,
    MoveRequest,
    MoveState,
    MoveStatus,
    OperationKind,
)
from .walker import discover

logger = logging.getLogger(__name__)


class FolderMover:
    """
    Moves folders between parents through a directory client.

    One instance may perform any number of independent moves; nothing but
    statistics is carried from one move to the next.
    """

    def __init__(
        self,
        client: DirectoryClient,
        dry_run: bool = False,
        force_tree_mirror: bool = False,
        max_moves: Optional[int] = None
    ):
        """
        Initialize the mover.

        Args:
            client: Directory client for all remote calls
            dry_run: If True, plan moves without creating or moving anything
            force_tree_mirror: If True, mirror the tree even outside shared drives
            max_moves: Optional limit on number of moves in move_all()
        """
        self.client = client
        self.dry_run = dry_run
        self.force_tree_mirror = force_tree_mirror
        self.max_moves = max_moves
        self.state: Optional[MoveState] = None

        self._stats: Dict[MoveStatus, int] = {status: 0 for status in MoveStatus}

    def _enter(self, state: MoveState) -> None:
        previous = self.state.value if self.state else "start"
        logger.debug(f"State {previous} -> {state.value}")
        self.state = state

    def move_folder(
        self,
        source_id: str,
        destination_id: str,
        force_tree_mirror: Optional[bool] = None
    ) -> MoveOutcome:
        """
        Move the folder source_id, with everything inside it, into destination_id.

        Args:
            source_id: Folder to move
            destination_id: Existing folder receiving it
            force_tree_mirror: Overrides the instance setting for this move

        Returns:
            MoveOutcome describing what moved and what did not

        Raises:
            InvalidInputError: If an id is missing, both ids are equal, or the
                destination lies inside the source tree
            NotFoundError: If either folder is not accessible
            RemoteUnavailableError: If the service cannot be reached
            InconsistencyError: If the source tree cannot be trusted
        """
        if not source_id or not destination_id:
            raise InvalidInputError("Both a source and a destination folder id are required")
        if source_id == destination_id:
            raise InvalidInputError(f"Cannot move folder {source_id} into itself")

        force = self.force_tree_mirror if force_tree_mirror is None else force_tree_mirror

        self.state = None
        self._enter(MoveState.CHECKING_CONTEXT)
        try:
            outcome = self._move(source_id, destination_id, force)
        except MoveError as e:
            self._enter(MoveState.FAILED)
            logger.error(f"Moving {source_id} to {destination_id} failed: {e}")
            raise

        self._enter(MoveState.DONE)
        self._stats[outcome.status] += 1
        return outcome

    def _move(self, source_id: str, destination_id: str, force: bool) -> MoveOutcome:
        source = self.client.get_metadata(source_id)
        destination = self.client.get_metadata(destination_id)

        if not force and not (source.in_shared_drive or destination.in_shared_drive):
            logger.info("Neither folder is in a shared drive, moving directly")
            self._enter(MoveState.DIRECT_MOVE)
            return self._direct_move(source, destination_id)

        if force:
            logger.info("Tree mirroring forced")
        else:
            logger.info("Shared drive involved, mirroring folder tree")
        self._enter(MoveState.TREE_MIRROR)
        return self._mirror_tree(source, destination_id)

    def _direct_move(self, source: ItemMetadata, destination_id: str) -> MoveOutcome:
        outcome = MoveOutcome(
            source_id=source.id,
            destination_id=destination_id,
            status=MoveStatus.DIRECT_MOVE,
        )
        if self.dry_run:
            logger.info(f"[DRY RUN] Would move '{source.name}' ({source.id}) to {destination_id}")
            outcome.status = MoveStatus.DRY_RUN
            return outcome

        self.client.reparent(source.id, destination_id, source.parents)
        self._enter(MoveState.SUBMITTED)
        logger.info(f"Moved '{source.name}' ({source.id}) to {destination_id}")
        return outcome

    def _mirror_tree(self, source: ItemMetadata, destination_id: str) -> MoveOutcome:
        outcome = MoveOutcome(
            source_id=source.id,
            destination_id=destination_id,
            status=MoveStatus.NOTHING_TO_MOVE,
        )

        index = discover(self.client, source.id)
        if destination_id in index:
            raise InvalidInputError(
                f"Cannot move folder {source.id} into its own subfolder {destination_id}"
            )
        entries = collect_files(self.client, index)

        if count_eligible_files(entries) == 0:
            logger.warning(f"No files found under '{source.name}' ({source.id}), nothing to move")
            return outcome

        mirrored = mirror(self.client, entries, destination_id, dry_run=self.dry_run)
        outcome.recreated_folder_count = mirrored.created_count
        outcome.errors.extend(
            f"Folder {folder_id} not recreated: {reason}"
            for folder_id, reason in mirrored.failures.items()
        )

        plan = build_plan(entries, mirrored.destination_map)
        outcome.skipped_folder_ids.extend(plan.skipped_folder_ids)
        outcome.errors.extend(plan.diagnostics)

        if plan.nothing_to_move:
            # Files exist but none has a mirror to go to
            outcome.status = MoveStatus.PARTIAL
            logger.error(f"No file of '{source.name}' ({source.id}) could be moved")
            return outcome

        if self.dry_run:
            outcome.status = MoveStatus.DRY_RUN
            outcome.moved_file_count = len(plan.attach_operations)
            outcome.deleted_folder_count = len(plan.delete_operations)
            logger.info(
                f"[DRY RUN] Would move {outcome.moved_file_count} file(s) and "
                f"delete {outcome.deleted_folder_count} folder(s)"
            )
            return outcome

        execution = execute_plan(self.client, plan)
        self._enter(MoveState.SUBMITTED)

        outcome.results = execution.results
        for result in execution.results:
            if not result.success:
                outcome.errors.append(result.message)
            elif result.operation.kind == OperationKind.ATTACH:
                outcome.moved_file_count += 1
            elif result.operation.kind == OperationKind.DELETE:
                outcome.deleted_folder_count += 1

        for folder_id in execution.withheld_folder_ids:
            if folder_id not in outcome.skipped_folder_ids:
                outcome.skipped_folder_ids.append(folder_id)

        outcome.status = MoveStatus.PARTIAL if outcome.errors else MoveStatus.MOVED
        logger.info(
            f"Moved {outcome.moved_file_count} file(s) of '{source.name}', "
            f"recreated {outcome.recreated_folder_count} folder(s), "
            f"deleted {outcome.deleted_folder_count} folder(s)"
        )
        return outcome

    def move_all(
        self,
        requests: Iterable[MoveRequest],
        progress_callback: Optional[Callable[[int, int, MoveRequest], None]] = None
    ) -> List[MoveOutcome]:
        """
        Move every requested folder, continuing past failures.

        Args:
            requests: MoveRequest objects to process
            progress_callback: Optional callable(current, total, request) for progress

        Returns:
            List of MoveOutcome objects, one per processed request
        """
        requests = list(requests)
        total = len(requests)

        # Apply max_moves limit if set
        if self.max_moves is not None and total > self.max_moves:
            logger.warning(
                f"Limiting moves to {self.max_moves} of {total} "
                f"(--max-moves safety limit)"
            )
            requests = requests[:self.max_moves]
            total = len(requests)

        logger.info(f"Processing {total} folder move(s)...")
        outcomes: List[MoveOutcome] = []

        for i, request in enumerate(requests):
            if progress_callback:
                progress_callback(i + 1, total, request)

            try:
                outcome = self.move_folder(request.source_id, request.destination_id)
            except MoveError as e:
                outcome = MoveOutcome(
                    source_id=request.source_id,
                    destination_id=request.destination_id,
                    status=MoveStatus.FAILED,
                    errors=[f"{type(e).__name__}: {e}"],
                )
                self._stats[MoveStatus.FAILED] += 1
            outcomes.append(outcome)

        logger.info(f"Completed processing {total} folder move(s)")
        return outcomes

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about move operations.

        Returns:
            Dictionary mapping status names to counts
        """
        return {status.value: count for status, count in self._stats.items()}

    def get_summary(self) -> str:
        """
        Get a human-readable summary of move operations.

        Returns:
            Formatted summary string
        """
        stats = self.get_stats()
        total = sum(stats.values())

        lines = [f"Move Summary ({total} total):"]

        if self.dry_run:
            lines.append(f"  Would move: {stats['dry_run']}")
        else:
            lines.append(f"  Moved directly: {stats['direct_move']}")
            lines.append(f"  Moved by tree mirror: {stats['moved']}")
            if stats["partial"]:
                lines.append(f"  Partially moved: {stats['partial']}")

        if stats["nothing_to_move"]:
            lines.append(f"  Nothing to move: {stats['nothing_to_move']}")
        if stats["failed"]:
            lines.append(f"  Failed: {stats['failed']}")

        return "\n".join(lines)

    def reset_stats(self) -> None:
        """Reset statistics for a new batch."""
        self._stats = {status: 0 for status in MoveStatus}
