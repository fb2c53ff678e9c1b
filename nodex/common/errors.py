"""Error taxonomy for the clearance workflow.

Every error carries a stable ``error_code`` so the HTTP layer can map it to a
status without string matching on messages.
"""

from __future__ import annotations


class NodexError(Exception):
    """Base class for every error raised by the workflow core."""

    error_code = "NODEX_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class ValidationError(NodexError):
    """Malformed input: missing rejection comment, bad id format, etc."""

    error_code = "VALIDATION_ERROR"


class InvalidRoleError(NodexError):
    """The acting role does not own any verification stage."""

    error_code = "INVALID_ROLE"


class PrecondOrderingError(NodexError):
    """A stage was attempted before its upstream stages were satisfied."""

    error_code = "NOT_YET_ELIGIBLE"


class ApplicationClosedError(PrecondOrderingError):
    """The application is rejected or completed and accepts no further action."""

    error_code = "APPLICATION_CLOSED"


class DuplicateApplicationError(NodexError):
    error_code = "DUPLICATE_APPLICATION"


class InvalidSubjectError(NodexError):
    error_code = "INVALID_SUBJECT"


class InvalidFacultyError(NodexError):
    error_code = "INVALID_FACULTY"


class NotProfileCompletedError(NodexError):
    error_code = "PROFILE_INCOMPLETE"


class ApplicationNotFoundError(NodexError):
    error_code = "APPLICATION_NOT_FOUND"


class ConcurrentModificationError(NodexError):
    """Another writer changed the application between read and write."""

    error_code = "CONCURRENT_MODIFICATION"


class StorageTimeoutError(NodexError):
    error_code = "STORAGE_TIMEOUT"


class ForbiddenError(NodexError):
    error_code = "FORBIDDEN"


class StoreError(NodexError):
    """Unclassified failure reported by the entity store."""

    error_code = "STORE_ERROR"


class DuplicateRecordError(StoreError):
    """Unique constraint violation reported by the entity store."""

    error_code = "DUPLICATE_RECORD"
