"""
Exceptions raised while moving a folder.

Errors that make the discovered tree untrustworthy abort the whole move.
Errors limited to one branch of the tree are recorded in the outcome instead
of being raised (see planner and plan modules).
"""


class MoveError(Exception):
    """Base class for all folder mover errors."""


class InvalidInputError(MoveError, ValueError):
    """A required identifier is missing or malformed."""


class RemoteUnavailableError(MoveError):
    """The directory service could not be reached or timed out."""


class RemoteRejectedError(MoveError):
    """The directory service rejected a request."""


class NotFoundError(RemoteRejectedError):
    """The item does not exist or is not accessible."""


class PermissionDeniedError(RemoteRejectedError):
    """The caller is not allowed to perform the request."""


class QuotaExceededError(RemoteRejectedError):
    """The storage quota of the target space is exhausted."""


class InconsistencyError(MoveError):
    """The remote tree does not satisfy parent/child invariants."""
