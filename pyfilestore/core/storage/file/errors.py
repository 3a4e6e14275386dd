"""Exceptions raised by the file storage pipeline."""

from __future__ import annotations


class FileManagerError(Exception):
    """Base class for file manager errors."""
    pass


class FileValidationError(FileManagerError):
    """Raised when an upload is rejected by validation."""
    pass


class StorageError(FileManagerError):
    """Raised when the storage medium fails to complete an operation."""
    pass


class StorageNotFoundError(StorageError, FileNotFoundError):
    """Raised when a read or stat targets a path that does not exist."""
    pass


class PathTraversalError(StorageError):
    """Raised when a path resolves outside the storage root."""

    def __init__(self, path: str):
        super().__init__(f"Path escapes the storage root: {path}")
        self.path = path
