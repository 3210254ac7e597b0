"""
CSV reports of move outcomes.

One row is written per moved folder. A report can be read back to find
the sources that were already moved, so an interrupted move list can be
resumed without touching them again.
"""

import csv
import logging
from dataclasses import asdict, fields
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Set, Union

from .types import MoveOutcome, MoveStatus, ReportEntry

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [f.name for f in fields(ReportEntry)]

COMPLETED_STATUSES = {MoveStatus.DIRECT_MOVE.value, MoveStatus.MOVED.value}


def to_report_entry(outcome: MoveOutcome, timestamp: str = None) -> ReportEntry:
    """Flatten an outcome into a report row."""
    return ReportEntry(
        timestamp=timestamp or datetime.now().isoformat(timespec="seconds"),
        source_id=outcome.source_id,
        destination_id=outcome.destination_id,
        status=outcome.status.value,
        moved_files=outcome.moved_file_count,
        recreated_folders=outcome.recreated_folder_count,
        deleted_folders=outcome.deleted_folder_count,
        skipped_folders=" ".join(outcome.skipped_folder_ids),
        errors=" | ".join(outcome.errors),
    )


def write_report(outcomes: Iterable[MoveOutcome], report_path: Union[str, Path]) -> int:
    """
    Write outcomes to a CSV report, creating parent directories as needed.

    Returns:
        Number of rows written
    """
    path = Path(report_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rows: List[ReportEntry] = [to_report_entry(outcome) for outcome in outcomes]
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=REPORT_COLUMNS)
        writer.writeheader()
        for row in rows:
            writer.writerow(asdict(row))

    logger.info(f"Wrote {len(rows)} row(s) to report: {path}")
    return len(rows)


def load_completed_sources(report_path: Union[str, Path]) -> Set[str]:
    """
    Read a previous report and return the source ids that were fully moved.

    Raises:
        FileNotFoundError: If the report doesn't exist
        ValueError: If the report lacks the source_id or status column
    """
    path = Path(report_path)
    if not path.exists():
        raise FileNotFoundError(f"Report not found: {path}")

    completed: Set[str] = set()
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = {"source_id", "status"} - set(reader.fieldnames or [])
        if missing:
            raise ValueError(
                f"Report {path} is missing column(s): {', '.join(sorted(missing))}"
            )
        for row in reader:
            if row["status"] in COMPLETED_STATUSES and row["source_id"]:
                completed.add(row["source_id"])

    logger.info(f"Found {len(completed)} completed move(s) in {path}")
    return completed
