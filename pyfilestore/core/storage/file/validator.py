"""File validation for uploads."""

from __future__ import annotations

import os
from typing import BinaryIO

from pyfilestore.config.settings import FileManagerSettings, normalize_extension
from pyfilestore.logging.setup import get_logger

from .errors import FileValidationError
from .models import UploadRequest, ValidationOutcome, get_extension


logger = get_logger(__name__)


class FileValidator:
    """
    Validates uploads before anything is written.

    Checks, in order, stopping at the first failure:
    1. File size against the effective limit
    2. File extension against the effective allow-list
    3. Magic number (file header) against the declared extension

    The validator fails closed: every rejection is returned as an invalid
    ValidationOutcome, never raised.
    """

    # Leading bytes expected for each extension
    MAGIC_SIGNATURES = {
        ".png": [b"\x89\x50"],
        ".jpg": [b"\xFF\xD8"],
        ".jpeg": [b"\xFF\xD8"],
        ".pdf": [b"\x25\x50"],
        ".gif": [b"\x47\x49"],
    }

    # Bytes read from the start of the stream for sniffing
    HEADER_SIZE = 8

    def __init__(self, settings: FileManagerSettings):
        """
        Initialize file validator.

        Args:
            settings: Upload policy (limits, allow-list, sniffing mode)
        """
        self.settings = settings

    def validate(self, request: UploadRequest) -> ValidationOutcome:
        """
        Validate an upload request.

        Args:
            request: Upload to check. Its stream position is reset to the
                start afterwards and the stream is left open.

        Returns:
            ValidationOutcome describing the verdict
        """
        # 1. Check file size
        max_size = self.get_max_size(request)
        size_bytes = self._get_stream_size(request.content)
        if size_bytes is None:
            return self._reject(
                request, "File size could not be determined.")

        if size_bytes > max_size:
            return self._reject(
                request,
                f"File size exceeds maximum allowed size of {max_size} bytes.")

        # 2. Check file extension against allowed list
        ext = get_extension(request.file_name).lower()
        if not self._is_extension_allowed(request, ext):
            return self._reject(
                request, f"File extension '{ext}' is not allowed.")

        # 3. Check magic numbers (file header)
        if not self._is_safe_content_type(request.content, ext):
            return self._reject(request, "File content type is not allowed.")

        return ValidationOutcome.valid()

    def ensure_valid(self, request: UploadRequest) -> None:
        """
        Validate an upload request, raising on rejection.

        Raises:
            FileValidationError: If the request fails validation
        """
        outcome = self.validate(request)
        if not outcome.is_valid:
            raise FileValidationError(
                outcome.error_message or "File validation failed")

    def get_max_size(self, request: UploadRequest) -> int:
        """Effective size limit in bytes for a request."""
        if request.max_file_size is not None:
            return request.max_file_size
        return self.settings.default_max_file_size

    def get_allowed_extensions(self, request: UploadRequest) -> list[str]:
        """
        Effective allow-list for a request.

        An empty list means every extension is accepted.
        """
        if request.allowed_extensions:
            return [normalize_extension(ext)
                    for ext in request.allowed_extensions]
        return list(self.settings.default_allowed_extensions)

    def _is_extension_allowed(self, request: UploadRequest, ext: str) -> bool:
        allowed = self.get_allowed_extensions(request)
        if not allowed:
            logger.debug(
                f"No extension restriction for {request.file_name!r}")
            return True
        return ext in allowed

    @staticmethod
    def _get_stream_size(file_data: BinaryIO) -> int | None:
        """
        Get the total length of a stream without reading it.

        Returns:
            Size in bytes, or None when the stream cannot seek
        """
        try:
            if not file_data.seekable():
                return None
            position = file_data.tell()
            file_data.seek(0, os.SEEK_END)
            size_bytes = file_data.tell()
            file_data.seek(position)
            return size_bytes
        except (OSError, ValueError):
            return None

    def _is_safe_content_type(self, file_data: BinaryIO, ext: str) -> bool:
        """
        Compare the file header with the signature of its extension.

        Extensions without a known signature always pass. A known extension
        whose header does not match passes too unless strict sniffing is
        enabled.
        """
        try:
            file_data.seek(0)
            header = file_data.read(self.HEADER_SIZE)
            file_data.seek(0)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read file header: {e}")
            return False

        signatures = self.MAGIC_SIGNATURES.get(ext)
        if not signatures:
            return True

        if any(header.startswith(sig) for sig in signatures):
            return True

        if self.settings.strict_content_sniffing:
            return False

        logger.debug(
            f"Header does not match '{ext}' signature, accepted by permissive policy")
        return True

    @staticmethod
    def _reject(request: UploadRequest, message: str) -> ValidationOutcome:
        logger.warning(f"Upload rejected for {request.file_name!r}: {message}")
        return ValidationOutcome.invalid(message)
