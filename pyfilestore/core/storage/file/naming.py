"""Secure file name generation."""

from __future__ import annotations

import secrets
import string

from pyfilestore.config.settings import FileManagerSettings

from .models import get_extension


class FileNameGenerator:
    """
    Replaces caller file names with random identifiers.

    Names are ``<random><extension>`` where the random part is drawn uniformly
    from ``[A-Za-z0-9]``. No uniqueness check is made against existing files:
    collisions are only avoided probabilistically, with ``62 ** length``
    possible names (about 190 bits of entropy at the default length of 32).
    """

    ALPHABET = string.ascii_letters + string.digits

    def __init__(self, settings: FileManagerSettings):
        self.length = settings.file_name_length

    def generate_secure_name(self, original_file_name: str) -> str:
        """
        Generate a random file name keeping the original extension.

        Args:
            original_file_name: Name supplied by the caller

        Returns:
            Random name with the original extension appended as given
        """
        return f"{self._random_string(self.length)}{get_extension(original_file_name)}"

    def combinations(self) -> int:
        """Number of distinct random parts at the configured length."""
        return len(self.ALPHABET) ** self.length

    def _random_string(self, length: int) -> str:
        return "".join(secrets.choice(self.ALPHABET) for _ in range(length))
