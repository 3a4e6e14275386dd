"""Local filesystem storage provider."""

from __future__ import annotations

import asyncio
import os
import secrets
from datetime import datetime, timezone
from pathlib import Path
from stat import S_ISREG
from typing import BinaryIO

import aiofiles
import aiofiles.os

from pyfilestore.config.settings import LocalFileSystemSettings
from pyfilestore.logging.setup import get_logger

from .backend import StorageProvider
from .errors import PathTraversalError, StorageError, StorageNotFoundError
from .models import FileMetadata, OperationResult, UploadRequest, get_content_type


logger = get_logger(__name__)


class LocalFileSystemProvider(StorageProvider):
    """
    Local filesystem storage provider.

    Layout:
    - Root directory: content_root, or content_root/wwwroot with use_web_root
    - Storage root: <root directory>/<root_path>
    - Temporary files: content_root/<temp_path>, outside the storage root

    Every caller path is resolved under the storage root; paths that escape
    it (``..`` segments, absolute paths, symlinks pointing outside) raise
    PathTraversalError.

    Writes go to a temporary file that is renamed over the target once the
    content is complete, so a failed or cancelled save never leaves a partial
    file at the destination. Concurrent saves to the same path are not
    serialised: the last rename wins.

    File contents go through aiofiles; stream reads, stat calls and path
    resolution run in worker threads so the event loop keeps running while
    the disk is busy.
    """

    CHUNK_SIZE = 64 * 1024
    TEMP_PREFIX = ".upload-"

    def __init__(
        self,
        settings: LocalFileSystemSettings,
        create_directories: bool = True,
    ):
        """
        Initialize local storage provider.

        Args:
            settings: Root and temp directory configuration
            create_directories: Create missing directories on save

        Raises:
            ValueError: If the temp directory lies inside the storage root
        """
        self.settings = settings
        self.create_directories = create_directories

        content_root = Path(settings.content_root)
        base_dir = content_root / "wwwroot" if settings.use_web_root else content_root
        self.root_dir = (base_dir / settings.root_path).resolve()
        self.temp_dir = (content_root / settings.temp_path).resolve()

        if self.temp_dir.is_relative_to(self.root_dir):
            raise ValueError(
                f"Temporary directory {self.temp_dir} must not be inside "
                f"the storage root {self.root_dir}")

        # Create directories
        self.root_dir.mkdir(parents=True, exist_ok=True)

    async def _resolve_path(self, file_path: str) -> Path:
        """
        Resolve a caller path to an absolute path under the storage root.

        Raises:
            PathTraversalError: If the path leaves the storage root
        """
        relative = Path(file_path.replace("\\", "/"))
        if relative.is_absolute():
            raise PathTraversalError(file_path)

        full_path = await asyncio.to_thread((self.root_dir / relative).resolve)
        if not full_path.is_relative_to(self.root_dir):
            raise PathTraversalError(file_path)

        logger.debug(f"Resolved {file_path!r} to {full_path}")
        return full_path

    def _relative(self, full_path: Path) -> str:
        return full_path.relative_to(self.root_dir).as_posix()

    def _temp_dir_for(self, directory: Path) -> Path:
        """
        Pick the directory for an in-flight write.

        The configured temp directory is used when it lives on the same device
        as the target, so the final rename stays atomic.
        """
        try:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
            if os.stat(self.temp_dir).st_dev == os.stat(directory).st_dev:
                return self.temp_dir
        except OSError as e:
            logger.debug(f"Temp directory {self.temp_dir} unusable: {e}")
        return directory

    async def _copy_stream(self, source: BinaryIO, target) -> None:
        if source.seekable():
            await asyncio.to_thread(source.seek, 0)
        while True:
            chunk = await asyncio.to_thread(source.read, self.CHUNK_SIZE)
            if not chunk:
                break
            await target.write(chunk)

    @staticmethod
    async def _discard(path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass

    async def save(self, request: UploadRequest) -> OperationResult:
        """
        Save file to local filesystem.

        Args:
            request: Upload with the final destination path

        Returns:
            OperationResult for the stored file

        Raises:
            PathTraversalError: If the destination escapes the storage root
            StorageError: If the write fails
        """
        full_path = await self._resolve_path(request.destination_path)
        if full_path == self.root_dir:
            return OperationResult.failed("Destination path must name a file.")

        directory = full_path.parent
        if not await aiofiles.os.path.isdir(directory):
            if not self.create_directories:
                return OperationResult.failed(
                    "Destination directory does not exist.")
            try:
                await aiofiles.os.makedirs(directory, exist_ok=True)
            except OSError as e:
                raise StorageError(
                    f"Failed to create directory: {str(e)}") from e

        if await aiofiles.os.path.exists(full_path) and not request.overwrite_if_exists:
            return OperationResult.failed(
                "File already exists and overwrite is disabled.")

        temp_dir = await asyncio.to_thread(self._temp_dir_for, directory)
        temp_path = temp_dir / f"{self.TEMP_PREFIX}{secrets.token_hex(8)}.tmp"
        finalized = False

        try:
            async with aiofiles.open(temp_path, "xb") as f:
                await self._copy_stream(request.content, f)

            # Set file permissions (no execute)
            await asyncio.to_thread(os.chmod, temp_path, 0o644)
            await aiofiles.os.replace(temp_path, full_path)
            finalized = True
            size_bytes = (await aiofiles.os.stat(full_path)).st_size
        except OSError as e:
            raise StorageError(f"Failed to save file: {str(e)}") from e
        finally:
            if not finalized:
                await self._discard(temp_path)

        file_name = request.file_name or full_path.name
        return OperationResult.succeeded(
            self._relative(full_path),
            file_name,
            size_bytes,
            get_content_type(file_name),
        )

    async def move(
            self,
            source_path: str,
            destination_path: str) -> OperationResult:
        """
        Move file inside the storage root.

        The destination is always overwritten if it exists.

        Raises:
            PathTraversalError: If either path escapes the storage root
            StorageError: If the move fails
        """
        source_full = await self._resolve_path(source_path)
        destination_full = await self._resolve_path(destination_path)

        if not await aiofiles.os.path.isfile(source_full):
            return OperationResult.failed("Source file does not exist.")

        try:
            await aiofiles.os.makedirs(destination_full.parent, exist_ok=True)
            await aiofiles.os.replace(source_full, destination_full)
            size_bytes = (await aiofiles.os.stat(destination_full)).st_size
        except OSError as e:
            raise StorageError(f"Failed to move file: {str(e)}") from e

        return OperationResult.succeeded(
            self._relative(destination_full),
            destination_full.name,
            size_bytes,
            get_content_type(destination_full.name),
        )

    async def delete(self, file_path: str) -> bool:
        """
        Delete file from local filesystem.

        Returns:
            True if file was deleted, False if not found

        Raises:
            StorageError: If deletion fails
        """
        full_path = await self._resolve_path(file_path)
        if not await aiofiles.os.path.isfile(full_path):
            return False

        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete file: {str(e)}") from e
        return True

    async def get(self, file_path: str) -> BinaryIO:
        """
        Open file for reading.

        Raises:
            StorageNotFoundError: If file does not exist
        """
        full_path = await self._resolve_path(file_path)
        if not await aiofiles.os.path.isfile(full_path):
            raise StorageNotFoundError(f"File not found: {file_path}")

        try:
            return await asyncio.to_thread(open, full_path, "rb")
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"File not found: {file_path}") from e
        except OSError as e:
            raise StorageError(f"Failed to open file: {str(e)}") from e

    async def exists(self, file_path: str) -> bool:
        return await aiofiles.os.path.isfile(await self._resolve_path(file_path))

    async def get_metadata(self, file_path: str) -> FileMetadata:
        """
        Read file metadata from the filesystem.

        Raises:
            StorageNotFoundError: If file does not exist
        """
        full_path = await self._resolve_path(file_path)
        try:
            return await asyncio.to_thread(self._build_metadata, full_path)
        except (FileNotFoundError, IsADirectoryError) as e:
            raise StorageNotFoundError(f"File not found: {file_path}") from e

    async def list(self, directory_path: str) -> list[FileMetadata]:
        """
        List files directly inside a directory, sorted by name.

        A directory that does not exist lists as empty.

        Raises:
            StorageError: If the path is not a directory
        """
        directory = await self._resolve_path(directory_path)
        if not await aiofiles.os.path.exists(directory):
            return []
        if not await aiofiles.os.path.isdir(directory):
            raise StorageError(f"Not a directory: {directory_path}")
        return await asyncio.to_thread(self._scan, directory)

    def _scan(self, directory: Path) -> list[FileMetadata]:
        files = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if not entry.is_file() or entry.name.startswith(self.TEMP_PREFIX):
                continue
            try:
                files.append(self._build_metadata(entry))
            except FileNotFoundError:
                # Removed while listing
                continue
        return files

    def _build_metadata(self, full_path: Path) -> FileMetadata:
        file_stat = full_path.stat()
        if not S_ISREG(file_stat.st_mode):
            raise IsADirectoryError(str(full_path))
        created = getattr(file_stat, "st_birthtime", file_stat.st_ctime)
        return FileMetadata(
            file_path=self._relative(full_path),
            file_name=full_path.name,
            file_size=file_stat.st_size,
            content_type=get_content_type(full_path.name),
            created_at=_from_timestamp(created),
            modified_at=_from_timestamp(file_stat.st_mtime),
            last_accessed_at=_from_timestamp(file_stat.st_atime),
        )


def _from_timestamp(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)
