# ABOUTME: Exception types raised by the novelshelf database layer.
# ABOUTME: Wraps sqlite3 failures so callers never need to import sqlite3 themselves.


class LibraryError(Exception):
    """Base class for all database-layer errors."""


class StoreUnavailable(LibraryError):
    """Raised when the library database cannot be opened or is locked past its timeout."""


class ConstraintViolation(LibraryError):
    """Raised when a write breaks a uniqueness or foreign-key constraint.

    The message is the engine's own, e.g.
    ``UNIQUE constraint failed: chapters.novel_id, chapters.seq``.
    """


class MigrationFailure(LibraryError):
    """Raised when a schema revision fails and has been rolled back.

    Attributes:
        revision: Zero-based index of the revision that failed.
        cause: The underlying exception.
    """

    def __init__(self, revision: int, cause: BaseException) -> None:
        super().__init__(f"Schema revision {revision} failed: {cause}")
        self.revision = revision
        self.cause = cause
