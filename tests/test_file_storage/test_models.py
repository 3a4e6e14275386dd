"""Tests for file storage data types."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from pyfilestore.core.storage.file.models import (
    FileMetadata,
    OperationResult,
    ValidationOutcome,
    get_content_type,
    get_extension,
)


@pytest.mark.parametrize("file_name,content_type", [
    ("photo.jpg", "image/jpeg"),
    ("photo.jpeg", "image/jpeg"),
    ("PHOTO.JPG", "image/jpeg"),
    ("image.png", "image/png"),
    ("anim.gif", "image/gif"),
    ("doc.pdf", "application/pdf"),
    ("letter.doc", "application/msword"),
    ("letter.docx",
     "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    ("notes.txt", "text/plain"),
    ("index.html", "text/html"),
    ("archive.zip", "application/octet-stream"),
    ("no_extension", "application/octet-stream"),
])
def test_content_type_table(file_name, content_type):
    """Test extension to MIME type mapping."""
    assert get_content_type(file_name) == content_type


def test_get_extension():
    """Test extension extraction."""
    assert get_extension("photo.PNG") == ".PNG"
    assert get_extension("dir/archive.tar.gz") == ".gz"
    assert get_extension("README") == ""
    assert get_extension("report.") == ""


def test_successful_result():
    """Test building a successful result."""
    result = OperationResult.succeeded("a/b.png", "b.png", 10, "image/png")

    assert result.success
    assert result.file_path == "a/b.png"
    assert result.file_name == "b.png"
    assert result.file_size == 10
    assert result.content_type == "image/png"
    assert result.error_message is None
    assert result.completed_at.tzinfo == timezone.utc


def test_failed_result_only_carries_message():
    """Failed results leave the success fields empty."""
    result = OperationResult.failed("boom")

    assert not result.success
    assert result.error_message == "boom"
    assert result.file_path == ""
    assert result.file_name == ""
    assert result.file_size == 0
    assert result.content_type == ""


@pytest.mark.parametrize("args", [
    ("", "b.png", 1, "image/png"),
    ("a/b.png", "", 1, "image/png"),
    ("a/b.png", "b.png", 1, ""),
    ("a/b.png", "b.png", -1, "image/png"),
])
def test_successful_result_requires_complete_fields(args):
    """A success can never be partially populated."""
    with pytest.raises(ValueError):
        OperationResult.succeeded(*args)


def test_result_is_immutable():
    """Results cannot be modified once built."""
    result = OperationResult.failed("boom")
    with pytest.raises(AttributeError):
        result.success = True


def test_result_to_dict():
    """Test result serialization."""
    data = OperationResult.succeeded("x.pdf", "x.pdf", 3, "application/pdf").to_dict()

    assert data["success"] is True
    assert data["file_size"] == 3
    assert data["error_message"] is None
    assert datetime.fromisoformat(data["completed_at"]).tzinfo is not None


def test_metadata_to_dict():
    """Test metadata serialization."""
    now = datetime.now(timezone.utc)
    metadata = FileMetadata(
        file_path="docs/x.txt",
        file_name="x.txt",
        file_size=5,
        content_type="text/plain",
        created_at=now,
        modified_at=now,
    )

    data = metadata.to_dict()

    assert data["file_path"] == "docs/x.txt"
    assert data["created_at"] == now.isoformat()
    assert data["last_accessed_at"] is None
    assert data["custom_metadata"] == {}


def test_validation_outcome():
    """Test validation verdicts."""
    assert ValidationOutcome.valid().is_valid
    assert ValidationOutcome.valid().error_message is None
    assert bool(ValidationOutcome.valid())

    outcome = ValidationOutcome.invalid("too big")
    assert not outcome.is_valid
    assert not outcome
    assert outcome.error_message == "too big"
