"""Abstract storage provider for file storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO

from .models import FileMetadata, OperationResult, UploadRequest


class StorageProvider(ABC):
    """
    Abstract storage provider for file uploads.

    Every path is relative to a root chosen by the implementation. Providers
    must compose caller paths under that root and refuse paths that escape it.

    Implementations:
    - LocalFileSystemProvider: Store files on local filesystem
    """

    @abstractmethod
    async def save(self, request: UploadRequest) -> OperationResult:
        """
        Save file content to ``request.destination_path``.

        Args:
            request: Upload whose destination path already includes the
                final file name

        Returns:
            Successful result with size and content type, or a failed result
            if the target exists and overwrite is disabled

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def move(
            self,
            source_path: str,
            destination_path: str) -> OperationResult:
        """
        Move a file, replacing any file already at the destination.

        Args:
            source_path: Current path of the file
            destination_path: New path of the file

        Returns:
            Successful result describing the file at its new path, or a
            failed result if the source does not exist

        Raises:
            StorageError: If the move fails
        """
        pass

    @abstractmethod
    async def delete(self, file_path: str) -> bool:
        """
        Delete file from storage.

        Args:
            file_path: Path of the file

        Returns:
            True if file was deleted, False if not found

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    async def get(self, file_path: str) -> BinaryIO:
        """
        Open a stored file for reading.

        The caller owns the returned stream and must close it.

        Args:
            file_path: Path of the file

        Returns:
            Readable binary stream positioned at the start

        Raises:
            StorageNotFoundError: If file does not exist
        """
        pass

    @abstractmethod
    async def exists(self, file_path: str) -> bool:
        """
        Check if file exists in storage.

        Args:
            file_path: Path of the file

        Returns:
            True if file exists
        """
        pass

    @abstractmethod
    async def get_metadata(self, file_path: str) -> FileMetadata:
        """
        Get file metadata without retrieving file data.

        Args:
            file_path: Path of the file

        Returns:
            FileMetadata object

        Raises:
            StorageNotFoundError: If file does not exist
        """
        pass

    @abstractmethod
    async def list(self, directory_path: str) -> list[FileMetadata]:
        """
        List files directly inside a directory.

        Args:
            directory_path: Directory path ("" for the storage root)

        Returns:
            List of FileMetadata objects sorted by file name
        """
        pass
