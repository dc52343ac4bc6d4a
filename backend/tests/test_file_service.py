"""
ProductHub Backend — File Service Unit Tests
===============================================

What:  Tests for FileService validation (presence, MIME type, size, content), storage
       and cleanup.
How:   Each test builds a FileService on a temporary directory; nothing
       touches the configured STORAGE_ROOT.

Test Strategy:
    ✅ Declared MIME types image/jpeg, image/jpg, image/png accepted
    ✅ Anything else rejected with "Format Image tidak sesuai"
    ✅ Missing or empty upload rejected with "Image tidak boleh kosong"
    ✅ Size limit boundary; uploads read no further than one byte past it
    ✅ Bytes must sniff as JPEG or PNG whatever the declared type
    ✅ Generated names carry no user input besides the extension
    ✅ Cleanup is best effort and stays inside the storage root
"""

import io
import re
from unittest.mock import patch

import pytest
from fastapi import UploadFile

from producthub.config import settings
from producthub.exceptions import FileStorageError, ValidationError
from producthub.services.file_service import FileService

GENERATED_NAME = re.compile(r"^\d{13}-\d{1,10}\.(jpg|jpeg|png)$")


class TestFileValidation:
    """Validation logic in FileService."""

    @pytest.fixture(autouse=True)
    def _service(self, tmp_path):
        self.service = FileService(storage_root=str(tmp_path))

    # ── MIME Type ─────────────────────────────────────────────────────────

    @pytest.mark.parametrize("content_type", ["image/jpeg", "image/jpg", "image/png", "IMAGE/PNG"])
    def test_allowed_mime_types(self, content_type):
        assert self.service.validate_mime_type(content_type) == content_type.lower()

    def test_mime_parameters_are_ignored(self):
        assert self.service.validate_mime_type("image/png; charset=binary") == "image/png"

    @pytest.mark.parametrize(
        "content_type",
        ["image/gif", "application/pdf", "text/plain", "application/octet-stream", "", None],
    )
    def test_rejected_mime_types(self, content_type):
        with pytest.raises(ValidationError, match="Format Image tidak sesuai"):
            self.service.validate_mime_type(content_type)

    # ── Size ──────────────────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(1000)

    def test_size_at_limit(self):
        self.service.validate_size(settings.max_file_size)

    def test_size_over_limit(self):
        with pytest.raises(ValidationError, match="Ukuran image maksimal 5MB"):
            self.service.validate_size(settings.max_file_size + 1)

    def test_empty_file(self):
        with pytest.raises(ValidationError, match="Image tidak boleh kosong"):
            self.service.validate_size(0)

    # ── Content Sniffing ──────────────────────────────────────────────────

    def test_real_jpeg_detected(self, sample_image_bytes):
        assert self.service.validate_content(sample_image_bytes) == "image/jpeg"

    def test_real_png_detected(self, sample_png_bytes):
        assert self.service.validate_content(sample_png_bytes) == "image/png"

    @pytest.mark.parametrize(
        "content",
        [b"<?php system('id'); ?>", b"%PDF-1.4\n", b"GIF89a\x01\x00\x01\x00", b"plain text"],
    )
    def test_non_image_content_rejected(self, content):
        with pytest.raises(ValidationError, match="Format Image tidak sesuai"):
            self.service.validate_content(content)

    def test_libmagic_failure_becomes_storage_error(self, sample_image_bytes):
        with patch("producthub.services.file_service.magic.from_buffer", side_effect=RuntimeError("no magic db")):
            with pytest.raises(FileStorageError):
                self.service.validate_content(sample_image_bytes)

    # ── Reading Uploads ───────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_read_upload_small_file_whole(self, sample_image_bytes):
        upload = UploadFile(file=io.BytesIO(sample_image_bytes), filename="a.jpg")
        assert await self.service.read_upload(upload) == sample_image_bytes

    @pytest.mark.asyncio
    async def test_read_upload_stops_past_limit(self, monkeypatch):
        monkeypatch.setattr(settings, "max_file_size", 1024)
        upload = UploadFile(file=io.BytesIO(b"\xff" * 10_000), filename="big.jpg")

        content = await self.service.read_upload(upload)

        assert len(content) == 1025
        with pytest.raises(ValidationError, match="Ukuran image maksimal"):
            self.service.validate_size(len(content))

    @pytest.mark.asyncio
    async def test_read_upload_missing(self):
        assert await self.service.read_upload(None) is None

    # ── Naming ────────────────────────────────────────────────────────────

    def test_extension_from_filename(self):
        assert self.service.pick_extension("Photo.JPEG", "image/jpeg") == ".jpeg"
        assert self.service.pick_extension("photo.png", "image/png") == ".png"

    def test_extension_falls_back_to_mime(self):
        assert self.service.pick_extension("photo.exe", "image/png") == ".png"
        assert self.service.pick_extension(None, "image/jpeg") == ".jpg"

    def test_generated_name_pattern(self):
        assert GENERATED_NAME.match(self.service.generate_filename(".png"))


class TestFileStorage:
    """validate_and_store() and cleanup_file() against a real directory."""

    @pytest.fixture(autouse=True)
    def _service(self, tmp_path):
        self.root = tmp_path.resolve()
        self.service = FileService(storage_root=str(self.root))

    @pytest.mark.asyncio
    async def test_validate_and_store_writes_bytes(self, sample_image_bytes):
        name = await self.service.validate_and_store("../../etc/passwd.jpg", "image/jpeg", sample_image_bytes)

        assert GENERATED_NAME.match(name)
        assert (self.root / name).read_bytes() == sample_image_bytes
        assert [p.name for p in self.root.iterdir()] == [name]

    @pytest.mark.asyncio
    async def test_missing_upload(self):
        with pytest.raises(ValidationError, match="Image tidak boleh kosong"):
            await self.service.validate_and_store(None, None, None)

    @pytest.mark.asyncio
    async def test_bad_type_stores_nothing(self, sample_image_bytes):
        with pytest.raises(ValidationError):
            await self.service.validate_and_store("a.gif", "image/gif", sample_image_bytes)
        assert list(self.root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_mislabelled_content_stores_nothing(self):
        with pytest.raises(ValidationError, match="Format Image tidak sesuai"):
            await self.service.validate_and_store("evil.png", "image/png", b"<?php system('id'); ?>")
        assert list(self.root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_write_failure_becomes_storage_error(self, sample_image_bytes):
        with patch("producthub.services.file_service.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError):
                await self.service.store_file(sample_image_bytes, ".jpg")

    @pytest.mark.asyncio
    async def test_cleanup_removes_file(self):
        target = self.root / "1718000000000-1.jpg"
        target.write_bytes(b"x")

        await self.service.cleanup_file(target.name)

        assert not target.exists()

    @pytest.mark.asyncio
    async def test_cleanup_nonexistent_and_empty(self):
        await self.service.cleanup_file("nonexistent.jpg")
        await self.service.cleanup_file(None)
        await self.service.cleanup_file("")

    @pytest.mark.asyncio
    async def test_cleanup_refuses_outside_root(self, tmp_path_factory):
        outside = tmp_path_factory.mktemp("outside") / "keep.jpg"
        outside.write_bytes(b"x")

        await self.service.cleanup_file(f"../{outside.parent.name}/{outside.name}")
        await self.service.cleanup_file(str(outside))

        assert outside.exists()
