"""Request, result and metadata types for file storage operations."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, BinaryIO, Sequence


# Extension -> MIME type. Anything not listed is application/octet-stream.
CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".html": "text/html",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def get_extension(file_name: str) -> str:
    """
    Return the extension of a file name including its dot, case preserved.

    A trailing dot (``"report."``) counts as no extension.
    """
    ext = os.path.splitext(file_name)[1]
    return "" if ext == "." else ext


def get_content_type(file_name: str) -> str:
    """Infer the MIME type of a file from its extension."""
    return CONTENT_TYPES.get(get_extension(file_name).lower(), DEFAULT_CONTENT_TYPE)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UploadRequest:
    """
    A single upload submitted by a caller.

    ``allowed_extensions`` overrides the configured allow-list only when it is
    non-empty; ``max_file_size`` overrides the configured limit when set.
    """

    content: BinaryIO
    file_name: str
    destination_path: str = ""
    overwrite_if_exists: bool = False
    max_file_size: int | None = None
    allowed_extensions: Sequence[str] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class MoveRequest:
    """Move a stored file to another path under the same storage root."""

    source_path: str
    destination_path: str
    overwrite_if_exists: bool = False


@dataclass
class DeleteRequest:
    """Delete a stored file. Deletes are always permanent."""

    file_path: str
    permanent: bool = True


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of an upload, save or move.

    Use :meth:`succeeded` and :meth:`failed` rather than the constructor: a
    failed result carries only its error message.
    """

    success: bool
    file_path: str = ""
    file_name: str = ""
    file_size: int = 0
    content_type: str = ""
    error_message: str | None = None
    completed_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def succeeded(
        cls,
        file_path: str,
        file_name: str,
        file_size: int,
        content_type: str,
    ) -> OperationResult:
        """
        Build a successful result.

        Raises:
            ValueError: If a required field is empty or the size is negative
        """
        if not file_path or not file_name or not content_type:
            raise ValueError(
                "Successful results need a file path, file name and content type")
        if file_size < 0:
            raise ValueError(f"File size cannot be negative: {file_size}")
        return cls(
            success=True,
            file_path=file_path,
            file_name=file_name,
            file_size=file_size,
            content_type=content_type,
        )

    @classmethod
    def failed(cls, error_message: str) -> OperationResult:
        """Build a failed result."""
        return cls(success=False, error_message=error_message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "file_path": self.file_path,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "content_type": self.content_type,
            "error_message": self.error_message,
            "completed_at": self.completed_at.isoformat(),
        }


@dataclass
class FileMetadata:
    """State of a stored file at the moment it was queried."""

    file_path: str
    file_name: str
    file_size: int
    content_type: str
    created_at: datetime
    modified_at: datetime
    last_accessed_at: datetime | None = None
    custom_metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "file_path": self.file_path,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "content_type": self.content_type,
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
            "last_accessed_at": (
                self.last_accessed_at.isoformat()
                if self.last_accessed_at else None),
            "custom_metadata": dict(self.custom_metadata),
        }


@dataclass(frozen=True)
class ValidationOutcome:
    """Verdict of a single validation call."""

    is_valid: bool
    error_message: str | None = None

    @classmethod
    def valid(cls) -> ValidationOutcome:
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, error_message: str) -> ValidationOutcome:
        return cls(is_valid=False, error_message=error_message)

    def __bool__(self) -> bool:
        return self.is_valid
