"""
Batch executor: submits a move plan and aggregates per-operation results.

The plan is submitted in two phases. File attachments go first; folder
deletions go second and only for folders whose files all reached their
mirror. A failed attachment keeps its source folder and that folder's
ancestors in place. Nothing already applied is rolled back.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Set

from .client import DirectoryClient
from .types import MovePlan, OperationResult

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Per-operation results of a submitted plan."""
    results: List[OperationResult] = field(default_factory=list)
    # Folders whose deletion was withheld because a file stayed inside
    withheld_folder_ids: List[str] = field(default_factory=list)


def execute_plan(client: DirectoryClient, plan: MovePlan) -> ExecutionResult:
    """
    Submit the plan's operations through the client.

    Args:
        client: Directory client performing the batch submission
        plan: A plan with at least one ATTACH operation

    Returns:
        ExecutionResult with one result per submitted operation
    """
    execution = ExecutionResult()

    attach_results = client.submit_batch(plan.attach_operations)
    execution.results.extend(attach_results)

    keep: Set[str] = set()
    for result in attach_results:
        if not result.success:
            source_folder = result.operation.previous_parent_id
            keep.update(plan.folder_ancestry.get(source_folder, (source_folder,)))

    delete_ops = []
    for op in plan.delete_operations:
        if op.target_id in keep:
            execution.withheld_folder_ids.append(op.target_id)
        else:
            delete_ops.append(op)

    if execution.withheld_folder_ids:
        logger.warning(
            f"Keeping {len(execution.withheld_folder_ids)} source folder(s) that "
            f"still hold files: {', '.join(execution.withheld_folder_ids)}"
        )

    if delete_ops:
        execution.results.extend(client.submit_batch(delete_ops))

    failed = sum(1 for r in execution.results if not r.success)
    logger.info(
        f"Submitted {len(execution.results)} operation(s), {failed} failed"
    )
    return execution
