"""
Excel move list reader.

This module is responsible for:
- Reading XLSX files using openpyxl
- Extracting source folder ids from Column A and destination ids from Column B
- Treating all values as strings (ids are never numbers)
- Skipping empty rows and rows with only one id, with warnings
- Deduplicating by source id while preserving original order
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

import openpyxl

from .types import MoveRequest

logger = logging.getLogger(__name__)


def load_move_requests(
    excel_path: Union[str, Path],
    sheet_name: str = None,
    has_header: bool = False
) -> List[MoveRequest]:
    """
    Load (source, destination) folder id pairs from an Excel file.

    Column A holds the folder to move, Column B the folder receiving it.
    Whitespace is trimmed. A source listed twice is kept once; if the second
    listing names another destination it is skipped with a warning.

    Args:
        excel_path: Path to the XLSX file
        sheet_name: Optional sheet name (defaults to active sheet)
        has_header: If True, the first row is skipped

    Returns:
        List of unique MoveRequest objects in original order

    Raises:
        FileNotFoundError: If the Excel file doesn't exist
        ValueError: If the file cannot be parsed or contains no complete row
    """
    path = Path(excel_path)

    if not path.exists():
        raise FileNotFoundError(f"Excel file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    logger.info(f"Loading move list from: {path}")

    try:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except Exception as e:
        raise ValueError(f"Failed to open Excel file: {e}") from e

    try:
        if sheet_name:
            if sheet_name not in workbook.sheetnames:
                available = ", ".join(workbook.sheetnames)
                raise ValueError(
                    f"Sheet '{sheet_name}' not found. Available: {available}"
                )
            worksheet = workbook[sheet_name]
        else:
            worksheet = workbook.active
            logger.debug(f"Using active sheet: {worksheet.title}")

        requests: List[MoveRequest] = []
        destinations: Dict[str, str] = {}
        row_count = 0
        skipped_count = 0
        duplicate_count = 0

        for row in worksheet.iter_rows(
            min_row=2 if has_header else 1, min_col=1, max_col=2, values_only=True
        ):
            row_count += 1
            cells = list(row) + [None, None]
            source, destination = _cell_text(cells[0]), _cell_text(cells[1])

            if not source and not destination:
                skipped_count += 1
                continue

            if not source or not destination:
                skipped_count += 1
                logger.warning(
                    f"Row {row_count}: Needs both a source and a destination id, skipping"
                )
                continue

            if source in destinations:
                duplicate_count += 1
                if destinations[source] != destination:
                    logger.warning(
                        f"Row {row_count}: '{source}' already listed with destination "
                        f"'{destinations[source]}', skipping '{destination}'"
                    )
                continue

            destinations[source] = destination
            requests.append(MoveRequest(source_id=source, destination_id=destination))
            logger.debug(f"Row {row_count}: Added {source} -> {destination}")

    finally:
        workbook.close()

    if not requests:
        raise ValueError(
            f"No move requests found in Columns A and B of '{path}'. "
            f"Checked {row_count} rows."
        )

    logger.info(
        f"Loaded {len(requests)} move requests "
        f"(skipped {skipped_count} incomplete, {duplicate_count} duplicates)"
    )

    return requests


def _cell_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()
