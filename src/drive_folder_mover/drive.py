"""
Google Drive v3 implementation of the directory client.

This module is responsible for:
- Building Drive search expressions for list queries
- Following nextPageToken until a listing is exhausted
- Translating HttpError and socket errors into errors.py exceptions
- Submitting mutations as batch HTTP requests of at most 100 calls
- Reporting each batch call independently (no rollback)
"""

import logging
from typing import Dict, Iterator, List, Optional, Sequence

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .client import DirectoryClient
from .config import FOLDER_MIME_TYPE, Settings
from .errors import (
    MoveError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
    RemoteRejectedError,
    RemoteUnavailableError,
)
from .types import (
    ChildItem,
    ItemMetadata,
    MoveOperation,
    OperationKind,
    OperationResult,
)

logger = logging.getLogger(__name__)

QUOTA_REASONS = ("storageQuotaExceeded", "teamDriveFileLimitExceeded")
RATE_LIMIT_REASONS = ("rateLimitExceeded", "userRateLimitExceeded")


def quote_query_value(value: str) -> str:
    """Quote a string literal for a Drive search expression."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_search_query(parent_id: str, folder_only: bool = False) -> str:
    """
    Build the Drive search expression listing the children of a folder.

    Examples:
        >>> build_search_query("abc")
        "'abc' in parents and trashed=false"
        >>> build_search_query("abc", folder_only=True)
        "'abc' in parents and mimeType='application/vnd.google-apps.folder' and trashed=false"
    """
    terms = [f"{quote_query_value(parent_id)} in parents"]
    if folder_only:
        terms.append(f"mimeType={quote_query_value(FOLDER_MIME_TYPE)}")
    terms.append("trashed=false")
    return " and ".join(terms)


def translate_http_error(error: HttpError, context: str) -> MoveError:
    """
    Map a Drive HttpError to a folder mover exception.

    Args:
        error: The error raised by googleapiclient
        context: Short description of the failed request, used in the message

    Returns:
        The exception to raise (not raised here)
    """
    status = int(getattr(error.resp, "status", 0) or 0)
    content = error.content or b""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    reason = getattr(error, "reason", "") or ""
    message = f"{context}: HTTP {status} {reason}".rstrip()

    if status == 404:
        return NotFoundError(message)
    if status == 429 or any(r in content for r in RATE_LIMIT_REASONS):
        return RemoteUnavailableError(message)
    if status == 403 and any(r in content for r in QUOTA_REASONS):
        return QuotaExceededError(message)
    if status in (401, 403):
        return PermissionDeniedError(message)
    if status >= 500:
        return RemoteUnavailableError(message)
    return RemoteRejectedError(message)


class GoogleDriveClient(DirectoryClient):
    """
    Directory client backed by the Drive v3 REST API.

    Every request sets supportsAllDrives so shared drive items are visible.
    """

    def __init__(self, service, settings: Optional[Settings] = None):
        """
        Initialize the client with a built Drive service.

        Args:
            service: A googleapiclient Resource for drive v3
            settings: Page size, batch size and retry settings
        """
        self._service = service
        self.settings = settings or Settings()

    @classmethod
    def from_credentials(
        cls,
        credentials,
        settings: Optional[Settings] = None
    ) -> "GoogleDriveClient":
        """Build the Drive service for explicit credentials."""
        service = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return cls(service, settings)

    def _execute(self, request, context: str):
        try:
            return request.execute(num_retries=self.settings.num_retries)
        except HttpError as e:
            raise translate_http_error(e, context) from e
        except OSError as e:
            # socket.timeout, connection resets and TLS failures
            raise RemoteUnavailableError(f"{context}: {e}") from e

    def get_metadata(self, item_id: str) -> ItemMetadata:
        request = self._service.files().get(
            fileId=item_id,
            fields="id, name, driveId, parents",
            supportsAllDrives=True,
        )
        data = self._execute(request, f"get {item_id}")
        return ItemMetadata(
            id=data["id"],
            name=data.get("name", ""),
            drive_id=data.get("driveId"),
            parents=list(data.get("parents", [])),
        )

    def list_children(
        self,
        parent_id: str,
        folder_only: bool = False
    ) -> Iterator[ChildItem]:
        query = build_search_query(parent_id, folder_only)
        page_token = None
        pages = 0

        while True:
            request = self._service.files().list(
                q=query,
                fields="nextPageToken, files(id, name, parents, mimeType)",
                pageSize=self.settings.page_size,
                pageToken=page_token,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            )
            response = self._execute(request, f"list children of {parent_id}")
            pages += 1

            for item in response.get("files", []):
                yield ChildItem(
                    id=item["id"],
                    name=item.get("name", ""),
                    parents=list(item.get("parents", [])),
                    is_folder=item.get("mimeType") == FOLDER_MIME_TYPE,
                )

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        logger.debug(f"Listed {parent_id} in {pages} page(s)")

    def create_folder(self, name: str, parent_id: str) -> str:
        request = self._service.files().create(
            body={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
            fields="id",
            supportsAllDrives=True,
        )
        data = self._execute(request, f"create folder '{name}' in {parent_id}")
        return data["id"]

    def reparent(
        self,
        item_id: str,
        new_parent_id: str,
        previous_parent_ids: Sequence[str] = ()
    ) -> None:
        kwargs = {}
        if previous_parent_ids:
            kwargs["removeParents"] = ",".join(previous_parent_ids)
        request = self._service.files().update(
            fileId=item_id,
            addParents=new_parent_id,
            fields="id, parents",
            supportsAllDrives=True,
            **kwargs,
        )
        self._execute(request, f"move {item_id} to {new_parent_id}")

    def _request_for(self, operation: MoveOperation):
        files = self._service.files()
        if operation.kind == OperationKind.DELETE:
            return files.delete(fileId=operation.target_id, supportsAllDrives=True)

        kwargs = {}
        if operation.previous_parent_id:
            kwargs["removeParents"] = operation.previous_parent_id
        return files.update(
            fileId=operation.target_id,
            addParents=operation.parent_id,
            fields="id, parents",
            supportsAllDrives=True,
            **kwargs,
        )

    def submit_batch(
        self,
        operations: Sequence[MoveOperation]
    ) -> List[OperationResult]:
        """
        Submit operations in batch requests of settings.batch_size calls.

        A batch that fails as a whole (transport error, rejected envelope)
        marks its own calls as failed; later batches are still submitted.
        """
        results: Dict[int, OperationResult] = {}
        size = self.settings.batch_size

        def callback(request_id, response, exception):
            index = int(request_id)
            operation = operations[index]
            if exception is None:
                results[index] = OperationResult(operation, True, "ok")
                return
            if isinstance(exception, HttpError):
                error = translate_http_error(
                    exception, f"{operation.kind.value} {operation.target_id}"
                )
                message = str(error)
            else:
                message = f"{operation.kind.value} {operation.target_id}: {exception}"
            logger.warning(message)
            results[index] = OperationResult(operation, False, message)

        for start in range(0, len(operations), size):
            chunk = range(start, min(start + size, len(operations)))
            batch = self._service.new_batch_http_request(callback=callback)
            for index in chunk:
                batch.add(self._request_for(operations[index]), request_id=str(index))

            logger.info(
                f"Submitting batch of {len(chunk)} operation(s) "
                f"({chunk.start + 1}-{chunk.stop} of {len(operations)})"
            )
            try:
                batch.execute()
            except (HttpError, OSError) as e:
                logger.error(f"Batch request failed: {e}")
                for index in chunk:
                    results.setdefault(
                        index,
                        OperationResult(operations[index], False, f"batch request failed: {e}")
                    )

        return [
            results.get(i, OperationResult(op, False, "no response received"))
            for i, op in enumerate(operations)
        ]
