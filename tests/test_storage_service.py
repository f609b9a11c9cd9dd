"""
Tests for receipt and event image uploads
"""

import os
import pytest

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.services.storage_service import StorageService

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32

@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point uploads at a temporary directory"""
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path

def test_save_receipt(upload_dir):
    url = StorageService.save_receipt("user-1", "receipt.PNG", PNG_BYTES)

    assert url.startswith("/orders/receipts/user-1-")
    assert url.endswith(".png")

    stored_name = url.rsplit("/", 1)[1]
    assert (upload_dir / "receipts" / stored_name).read_bytes() == PNG_BYTES

def test_read_receipt_back(upload_dir):
    url = StorageService.save_receipt("user-1", "receipt.jpg", PNG_BYTES)
    stored_name = url.rsplit("/", 1)[1]

    content, content_type = StorageService.read_receipt(stored_name)

    assert content == PNG_BYTES
    assert content_type == "image/jpeg"

def test_save_event_image(upload_dir):
    url = StorageService.save_event_image("org-1", "cover.webp", PNG_BYTES)

    assert url.startswith("/uploads/events_profile/org-1-")
    assert os.listdir(upload_dir / "events_profile")

@pytest.mark.parametrize("filename", ["receipt.pdf", "receipt", "script.exe"])
def test_non_images_are_refused(upload_dir, filename):
    with pytest.raises(ValidationError):
        StorageService.save_receipt("user-1", filename, PNG_BYTES)

def test_empty_file_is_refused(upload_dir):
    with pytest.raises(ValidationError):
        StorageService.save_receipt("user-1", "receipt.png", b"")

def test_oversized_file_is_refused(upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)

    with pytest.raises(ValidationError):
        StorageService.save_receipt("user-1", "receipt.png", PNG_BYTES)

@pytest.mark.parametrize("filename", ["../secrets.png", "a/b.png", "..\\b.png"])
def test_path_traversal_is_refused(upload_dir, filename):
    with pytest.raises(ValidationError):
        StorageService.read_receipt(filename)

def test_missing_receipt(upload_dir):
    with pytest.raises(NotFoundError):
        StorageService.read_receipt("nobody-1.png")

@pytest.mark.parametrize("filename,owner", [
    ("user-1-1700000000000.png", "user-1"),
    ("abc-1700000000000.jpg", "abc"),
    ("abc-def-1700000000000.jpg", "abc-def"),
    ("not-a-receipt.png", ""),
    ("1700000000000.png", ""),
])
def test_uploader_of(filename, owner):
    assert StorageService.uploader_of(filename) == owner
