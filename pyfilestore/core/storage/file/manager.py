"""File manager for high-level file operations."""

from __future__ import annotations

import dataclasses
import logging
import posixpath
from typing import BinaryIO

from pyfilestore.config.settings import FileManagerSettings
from pyfilestore.logging.setup import get_logger

from .backend import StorageProvider
from .errors import FileManagerError
from .models import (
    DeleteRequest,
    FileMetadata,
    MoveRequest,
    OperationResult,
    UploadRequest,
)
from .naming import FileNameGenerator
from .validator import FileValidator


UNEXPECTED_UPLOAD_ERROR = "An unexpected error occurred during file upload."
UNEXPECTED_MOVE_ERROR = "An unexpected error occurred while moving the file."


class FileManager:
    """
    High-level file manager composing validation, naming and storage.

    Upload, move and delete never raise: failures come back as failed
    OperationResults (or False for delete) and unexpected faults are logged
    and replaced by a generic message. Download and metadata lookups raise
    StorageNotFoundError for missing files.
    """

    def __init__(
        self,
        storage_provider: StorageProvider,
        validator: FileValidator,
        name_generator: FileNameGenerator,
        settings: FileManagerSettings,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize file manager.

        Args:
            storage_provider: Storage provider (local filesystem, ...)
            validator: File validator
            name_generator: Secure file name generator
            settings: Upload policy
            logger: Sink for operation diagnostics (defaults to module logger)
        """
        self.storage = storage_provider
        self.validator = validator
        self.name_generator = name_generator
        self.settings = settings
        self.logger = logger or get_logger(__name__)

    async def upload(self, request: UploadRequest) -> OperationResult:
        """
        Validate, name and store an upload.

        Args:
            request: Upload whose destination_path is the target directory

        Returns:
            OperationResult of the save, or a failed result
        """
        try:
            # 1. Validate file
            outcome = self.validator.validate(request)
            if not outcome.is_valid:
                return OperationResult.failed(
                    outcome.error_message or "File validation failed")

            # 2. Choose the stored file name
            if self.settings.use_secure_naming:
                file_name = self.name_generator.generate_secure_name(
                    request.file_name)
            else:
                file_name = request.file_name

            # 3. Compose final path under the destination directory
            final_path = posixpath.join(
                request.destination_path, file_name).replace("\\", "/")

            # 4. Save to storage provider
            result = await self.storage.save(dataclasses.replace(
                request,
                file_name=file_name,
                destination_path=final_path,
            ))
        except FileManagerError as e:
            self.logger.error(
                f"File upload failed for {request.file_name!r}: {e}")
            return OperationResult.failed(str(e))
        except Exception:
            self.logger.exception(
                f"File upload failed for {request.file_name!r}")
            return OperationResult.failed(UNEXPECTED_UPLOAD_ERROR)

        if result.success:
            self.logger.info(
                f"Uploaded {request.file_name!r} to {result.file_path} "
                f"({result.file_size} bytes)")
        else:
            self.logger.warning(
                f"Upload of {request.file_name!r} failed: {result.error_message}")
        return result

    async def move(self, request: MoveRequest) -> OperationResult:
        """
        Move a stored file.

        The source is checked first so a missing file yields a uniform failed
        result whatever the provider. ``request.overwrite_if_exists`` is not
        consulted: providers always replace an existing destination.
        """
        try:
            if not await self.storage.exists(request.source_path):
                return OperationResult.failed("Source file does not exist.")

            result = await self.storage.move(
                request.source_path, request.destination_path)
        except FileManagerError as e:
            self.logger.error(
                f"Error moving file from {request.source_path} "
                f"to {request.destination_path}: {e}")
            return OperationResult.failed(str(e))
        except Exception:
            self.logger.exception(
                f"Error moving file from {request.source_path} "
                f"to {request.destination_path}")
            return OperationResult.failed(UNEXPECTED_MOVE_ERROR)

        if result.success:
            self.logger.info(
                f"File moved from {request.source_path} to {request.destination_path}")
        return result

    async def delete(self, request: DeleteRequest) -> bool:
        """
        Delete a stored file.

        Returns:
            True if the file was removed, False if it was missing or the
            deletion failed
        """
        try:
            deleted = await self.storage.delete(request.file_path)
        except Exception:
            self.logger.exception(f"Error deleting file: {request.file_path}")
            return False

        if deleted:
            self.logger.info(f"File deleted successfully: {request.file_path}")
        else:
            self.logger.info(f"File deletion failed: {request.file_path}")
        return deleted

    async def download(self, file_path: str) -> BinaryIO:
        """Open a stored file; the caller must close the stream."""
        return await self.storage.get(file_path)

    async def exists(self, file_path: str) -> bool:
        return await self.storage.exists(file_path)

    async def get_metadata(self, file_path: str) -> FileMetadata:
        return await self.storage.get_metadata(file_path)

    async def list(self, directory_path: str) -> list[FileMetadata]:
        """List files directly inside a directory."""
        return await self.storage.list(directory_path)
