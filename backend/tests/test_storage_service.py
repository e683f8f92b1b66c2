"""
ScanPlant Backend — Blob Storage Service Tests
================================================

What:  Validation (size, extension, content) and the store / resolve /
       delete contract of StorageService, against a real tmp directory.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.exceptions import FileStorageError, ValidationError
from app.services.storage_service import StorageService


class TestValidation:

    def test_empty_content_rejected(self, storage):
        with pytest.raises(ValidationError, match="must not be empty"):
            storage.validate_size(b"")

    def test_oversized_content_rejected(self, storage):
        with patch("app.services.storage_service.settings") as mock_settings:
            mock_settings.max_file_size = 1024
            with pytest.raises(ValidationError, match="too large"):
                storage.validate_size(b"x" * 1025)

    @pytest.mark.parametrize("name", ["leaf.jpg", "leaf.JPEG", "leaf.png", "leaf.webp"])
    def test_allowed_extensions(self, storage, name):
        storage.validate_extension(name)

    @pytest.mark.parametrize("name", ["leaf.gif", "leaf.pdf", "leaf.exe", "noextension"])
    def test_rejected_extensions(self, storage, name):
        with pytest.raises(ValidationError, match="not supported"):
            storage.validate_extension(name)

    def test_missing_name_is_allowed(self, storage):
        storage.validate_extension(None)

    def test_detects_jpeg_and_png(self, storage, jpeg_bytes, png_bytes):
        assert storage.detect_format(jpeg_bytes) == ".jpg"
        assert storage.detect_format(png_bytes) == ".png"

    def test_non_image_rejected(self, storage):
        with pytest.raises(ValidationError, match="not a readable image"):
            storage.detect_format(b"%PDF-1.4 definitely not a photo")

    def test_unsupported_image_format_rejected(self, storage, image_factory):
        with pytest.raises(ValidationError, match="not supported"):
            storage.detect_format(image_factory("GIF"))


class TestStoreAndDelete:

    @pytest.mark.asyncio
    async def test_store_writes_file_and_returns_reference(self, storage, jpeg_bytes):
        reference = await storage.store(jpeg_bytes, "fern.jpg")

        assert reference.startswith("http://test/files/")
        name = storage.name_from_reference(reference)
        assert name.endswith(".jpg")
        assert storage.path_for(name).read_bytes() == jpeg_bytes

    @pytest.mark.asyncio
    async def test_extension_follows_content(self, storage, png_bytes):
        """A PNG uploaded as .jpg is stored with the extension of its real format."""
        reference = await storage.store(png_bytes, "mislabelled.jpg")
        assert reference.endswith(".png")

    @pytest.mark.asyncio
    async def test_each_store_gets_a_new_name(self, storage, jpeg_bytes):
        first = await storage.store(jpeg_bytes, "a.jpg")
        second = await storage.store(jpeg_bytes, "a.jpg")
        assert first != second

    @pytest.mark.asyncio
    async def test_invalid_upload_writes_nothing(self, storage):
        with pytest.raises(ValidationError):
            await storage.store(b"not an image", "fake.jpg")
        assert list(storage.storage_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_resolve(self, storage, jpeg_bytes):
        reference = await storage.store(jpeg_bytes)
        name = storage.name_from_reference(reference)

        assert await storage.resolve(name) == reference
        assert await storage.resolve("missing.jpg") is None

    @pytest.mark.asyncio
    async def test_delete(self, storage, jpeg_bytes):
        name = storage.name_from_reference(await storage.store(jpeg_bytes))

        assert await storage.delete(name) is True
        assert not storage.path_for(name).exists()
        assert await storage.delete(name) is False

    @pytest.mark.asyncio
    async def test_write_failure_raises_file_storage_error(self, storage, jpeg_bytes):
        with patch("aiofiles.open", new_callable=MagicMock) as mock_open:
            mock_open.return_value.__aenter__ = AsyncMock(side_effect=OSError("disk full"))
            mock_open.return_value.__aexit__ = AsyncMock(return_value=False)
            with pytest.raises(FileStorageError):
                await storage.store(jpeg_bytes, "fern.jpg")


class TestNames:

    def test_name_from_reference(self):
        assert StorageService.name_from_reference("https://cdn.example/files/abc.jpg") == "abc.jpg"
        assert StorageService.name_from_reference("/files/abc.png") == "abc.png"

    def test_path_traversal_rejected(self, storage):
        with pytest.raises(ValidationError):
            storage.path_for("../../etc/passwd")
