"""File storage module for validated, provider-backed file handling."""

from __future__ import annotations

from .errors import (
    FileManagerError,
    FileValidationError,
    PathTraversalError,
    StorageError,
    StorageNotFoundError,
)
from .models import (
    DeleteRequest,
    FileMetadata,
    MoveRequest,
    OperationResult,
    UploadRequest,
    ValidationOutcome,
    get_content_type,
)
from .validator import FileValidator
from .naming import FileNameGenerator
from .backend import StorageProvider
from .local_backend import LocalFileSystemProvider
from .manager import FileManager
from .factory import (
    create_file_manager,
    create_storage_provider,
    register_storage_provider,
)

__all__ = [
    "FileManagerError",
    "FileValidationError",
    "PathTraversalError",
    "StorageError",
    "StorageNotFoundError",
    "DeleteRequest",
    "FileMetadata",
    "MoveRequest",
    "OperationResult",
    "UploadRequest",
    "ValidationOutcome",
    "get_content_type",
    "FileValidator",
    "FileNameGenerator",
    "StorageProvider",
    "LocalFileSystemProvider",
    "FileManager",
    "create_file_manager",
    "create_storage_provider",
    "register_storage_provider",
]
