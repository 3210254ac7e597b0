"""
Command line interface.

Usage:
    python -m drive_folder_mover SOURCE_ID DESTINATION_ID [options]
    python -m drive_folder_mover --excel moves.xlsx [options]

Exit codes: 0 when every move completed (or nothing needed moving),
1 when any move failed or was partial, 2 for invalid arguments or setup errors.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .auth import load_credentials
from .config import Settings
from .drive import GoogleDriveClient
from .errors import MoveError
from .excel import load_move_requests
from .mover import FolderMover
from .report import load_completed_sources, write_report
from .types import MoveRequest, MoveStatus

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

OK_STATUSES = {
    MoveStatus.DIRECT_MOVE,
    MoveStatus.MOVED,
    MoveStatus.NOTHING_TO_MOVE,
    MoveStatus.DRY_RUN,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drive-folder-mover",
        description=(
            "Move Google Drive folders, including everything inside them, "
            "to a new parent folder. Inside shared drives the folder tree is "
            "recreated at the destination and the files are moved into it."
        ),
    )
    parser.add_argument("source", nargs="?", help="ID of the folder to move")
    parser.add_argument("destination", nargs="?", help="ID of the folder receiving it")
    parser.add_argument(
        "--excel", metavar="XLSX",
        help="Move list: source ids in Column A, destination ids in Column B",
    )
    parser.add_argument("--sheet", help="Worksheet of the move list (default: active)")
    parser.add_argument(
        "--header", action="store_true", help="Skip the first row of the move list"
    )
    parser.add_argument(
        "--credentials", metavar="JSON",
        help="Service account or authorized user file (env: DRIVE_MOVER_CREDENTIALS)",
    )
    parser.add_argument(
        "--access-token", help="OAuth access token (env: DRIVE_MOVER_ACCESS_TOKEN)"
    )
    parser.add_argument(
        "--force-tree-mirror", action="store_true",
        help="Recreate the tree even when neither folder is in a shared drive",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Show what would be moved without changing anything",
    )
    parser.add_argument(
        "--max-moves", type=int, metavar="N", help="Process at most N move requests"
    )
    parser.add_argument("--report", metavar="CSV", help="Write a CSV report of the outcomes")
    parser.add_argument(
        "--resume", metavar="CSV",
        help="Skip sources reported as moved in a previous report",
    )
    parser.add_argument("--page-size", type=int, help="Items per list request")
    parser.add_argument("--batch-size", type=int, help="Calls per batch request (max 100)")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # googleapiclient logs every discovery and request at INFO
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def collect_requests(args: argparse.Namespace) -> List[MoveRequest]:
    """
    Turn command line arguments into the list of move requests.

    Raises:
        ValueError: If neither or both of SOURCE/DESTINATION and --excel are given
    """
    if args.excel:
        if args.source or args.destination:
            raise ValueError("Give either SOURCE DESTINATION or --excel, not both")
        requests = load_move_requests(args.excel, args.sheet, args.header)
    elif args.source and args.destination:
        requests = [MoveRequest(source_id=args.source, destination_id=args.destination)]
    else:
        raise ValueError("SOURCE and DESTINATION are required unless --excel is given")

    if args.resume:
        completed = load_completed_sources(args.resume)
        remaining = [r for r in requests if r.source_id not in completed]
        if len(remaining) < len(requests):
            logger.info(f"Skipping {len(requests) - len(remaining)} already moved source(s)")
        requests = remaining

    return requests


def build_client(settings: Settings) -> GoogleDriveClient:
    credentials = load_credentials(
        settings.credentials_file, settings.scopes, settings.access_token
    )
    return GoogleDriveClient.from_credentials(credentials, settings)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        settings = Settings.from_env().merged(
            credentials_file=args.credentials,
            access_token=args.access_token,
            page_size=args.page_size,
            batch_size=args.batch_size,
        )
        requests = collect_requests(args)
        if not requests:
            logger.info("Nothing left to move")
            return 0
        client = build_client(settings)
    except (MoveError, ValueError, OSError) as e:
        logger.error(str(e))
        return 2

    mover = FolderMover(
        client,
        dry_run=args.dry_run,
        force_tree_mirror=args.force_tree_mirror,
        max_moves=args.max_moves,
    )

    def progress(current: int, total: int, request: MoveRequest) -> None:
        logger.info(f"[{current}/{total}] {request.source_id} -> {request.destination_id}")

    outcomes = mover.move_all(requests, progress_callback=progress)

    for outcome in outcomes:
        for error in outcome.errors:
            logger.warning(f"{outcome.source_id}: {error}")

    if args.report:
        write_report(outcomes, args.report)

    print(mover.get_summary())
    return 0 if all(o.status in OK_STATUSES for o in outcomes) else 1
