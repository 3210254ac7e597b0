"""
Directory client interface.

The move engine only talks to the storage service through this interface.
Concrete transports (see drive.py) own pagination, wire encoding and
credentials; implementations are expected to:
- Follow continuation tokens transparently in list_children()
- Return an empty iterator (not an error) for an empty folder
- Raise NotFoundError, PermissionDeniedError, QuotaExceededError or
  RemoteUnavailableError from errors.py for remote failures
- Report each batch sub-operation independently, never rolling back
"""

from abc import ABC, abstractmethod
from typing import Iterator, List, Sequence

from .types import ChildItem, ItemMetadata, MoveOperation, OperationResult


class DirectoryClient(ABC):
    """Capability interface over a hierarchical storage service."""

    @abstractmethod
    def get_metadata(self, item_id: str) -> ItemMetadata:
        """Fetch a single item. Raises NotFoundError if inaccessible."""

    @abstractmethod
    def list_children(
        self,
        parent_id: str,
        folder_only: bool = False
    ) -> Iterator[ChildItem]:
        """Yield the non-trashed direct children of parent_id."""

    @abstractmethod
    def create_folder(self, name: str, parent_id: str) -> str:
        """Create a folder under parent_id and return its new id."""

    @abstractmethod
    def reparent(
        self,
        item_id: str,
        new_parent_id: str,
        previous_parent_ids: Sequence[str] = ()
    ) -> None:
        """Move an item to a new parent in a single mutation."""

    @abstractmethod
    def submit_batch(
        self,
        operations: Sequence[MoveOperation]
    ) -> List[OperationResult]:
        """Submit mutations together; return one result per operation, in order."""
