"""
VoiceNote Backend — Audio Intake Unit Tests
============================================

What:  Tests for FileService validation (content type, size), transient
       storage naming and guaranteed cleanup.
How:   Each test builds its own FileService on a temporary directory.
"""

import re
from pathlib import Path

import pytest

from app.exceptions import InvalidInputError, VoiceNoteError
from app.services.file_service import FileService, is_allowed_content_type

MAX = 10 * 1024 * 1024


class TestContentTypeValidation:

    @pytest.mark.parametrize("mime", [
        "audio/mpeg", "audio/mp3", "audio/wav", "audio/m4a",
        "audio/x-m4a", "audio/mp4", "audio/webm", "audio/ogg",
    ])
    def test_allow_list(self, mime):
        assert is_allowed_content_type(mime)

    def test_any_audio_prefix_accepted(self):
        assert is_allowed_content_type("audio/flac")
        assert is_allowed_content_type("audio/aac")

    @pytest.mark.parametrize("mime", [
        "application/pdf", "video/mp4", "text/plain", "image/png", "", None,
    ])
    def test_non_audio_rejected(self, mime):
        assert not is_allowed_content_type(mime)

    def test_parameters_are_stripped(self, temp_storage):
        service = FileService(upload_dir=temp_storage)
        assert service.validate_content_type("Audio/WebM; codecs=opus") == "audio/webm"

    def test_rejection_is_invalid_input(self, temp_storage):
        service = FileService(upload_dir=temp_storage)
        with pytest.raises(InvalidInputError) as exc_info:
            service.validate_content_type("application/octet-stream")
        assert exc_info.value.status_code == 400
        assert exc_info.value.error == "Invalid audio file"
        assert "Only audio files are allowed" in exc_info.value.message


class TestSizeValidation:

    def setup_method(self):
        self.service = FileService(upload_dir="unused", max_upload_size=MAX)

    def test_within_limit(self):
        self.service.validate_size(b"x" * 2048)

    def test_exactly_at_limit(self):
        self.service.validate_size(b"x" * MAX)

    def test_over_limit(self):
        with pytest.raises(InvalidInputError, match="too large"):
            self.service.validate_size(b"x" * (MAX + 1))

    def test_empty_file(self):
        with pytest.raises(InvalidInputError, match="empty"):
            self.service.validate_size(b"")


class TestValidate:

    def test_builds_upload(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        upload = service.validate("memo.wav", sample_wav_bytes, "audio/wav")
        assert upload.filename == "memo.wav"
        assert upload.content_type == "audio/wav"
        assert upload.size == 2048
        assert upload.path is None

    def test_type_checked_before_size(self, temp_storage):
        service = FileService(upload_dir=temp_storage, max_upload_size=MAX)
        with pytest.raises(InvalidInputError, match="Only audio files"):
            service.validate("big.pdf", b"x" * (MAX + 1), "application/pdf")

    def test_nothing_written_on_rejection(self, temp_storage):
        service = FileService(upload_dir=temp_storage)
        with pytest.raises(InvalidInputError):
            service.validate("notes.txt", b"hello", "text/plain")
        assert list(Path(temp_storage).iterdir()) == []


class TestStorage:

    @pytest.mark.asyncio
    async def test_store_file_name_has_timestamp_prefix(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        upload = service.validate("memo.wav", sample_wav_bytes, "audio/wav")

        path = await service.store_file(upload)

        assert path.parent == Path(temp_storage).resolve()
        assert re.fullmatch(r"\d+-memo\.wav", path.name)
        assert path.read_bytes() == sample_wav_bytes
        assert upload.path == path

    @pytest.mark.asyncio
    async def test_store_file_discards_directories(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        upload = service.validate("../../etc/evil.wav", sample_wav_bytes, "audio/wav")

        path = await service.store_file(upload)

        assert path.parent == Path(temp_storage).resolve()
        assert path.name.endswith("-evil.wav")

    @pytest.mark.asyncio
    async def test_long_filename_is_shortened(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        upload = service.validate("a" * 300 + ".wav", sample_wav_bytes, "audio/wav")

        path = await service.store_file(upload)

        assert path.exists()
        assert path.name.endswith(".wav")
        assert len(path.name.encode("utf-8")) <= 255

    @pytest.mark.asyncio
    async def test_long_multibyte_filename_is_shortened(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        upload = service.validate("é" * 200 + ".m4a", sample_wav_bytes, "audio/m4a")

        path = await service.store_file(upload)

        assert path.exists()
        assert path.name.endswith(".m4a")
        assert len(path.name.encode("utf-8")) <= 255

    @pytest.mark.asyncio
    async def test_concurrent_names_differ(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        first = await service.store_file(service.validate("a.wav", sample_wav_bytes, "audio/wav"))
        second = await service.store_file(service.validate("a.wav", sample_wav_bytes, "audio/wav"))
        assert first != second

    @pytest.mark.asyncio
    async def test_store_failure_raises_server_error(self, tmp_path, sample_wav_bytes):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"not a directory")
        service = FileService(upload_dir=str(blocker / "uploads"))
        upload = service.validate("a.wav", sample_wav_bytes, "audio/wav")

        with pytest.raises(VoiceNoteError) as exc_info:
            await service.store_file(upload)
        assert exc_info.value.status_code == 500


class TestCleanup:

    @pytest.mark.asyncio
    async def test_stored_upload_removes_file_on_success(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        upload = service.validate("memo.wav", sample_wav_bytes, "audio/wav")

        async with service.stored_upload(upload) as stored:
            assert stored.path.exists()
            path = stored.path

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_stored_upload_removes_file_on_error(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        upload = service.validate("memo.wav", sample_wav_bytes, "audio/wav")

        with pytest.raises(RuntimeError, match="remote failure"):
            async with service.stored_upload(upload) as stored:
                path = stored.path
                raise RuntimeError("remote failure")

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_cleanup_error_does_not_mask_primary_error(self, temp_storage, sample_wav_bytes):
        service = FileService(upload_dir=temp_storage)
        upload = service.validate("memo.wav", sample_wav_bytes, "audio/wav")

        with pytest.raises(RuntimeError, match="primary"):
            async with service.stored_upload(upload) as stored:
                # Replace the file with a non-empty directory so os.remove fails
                stored.path.unlink()
                stored.path.mkdir()
                (stored.path / "child").write_bytes(b"x")
                raise RuntimeError("primary")

    @pytest.mark.asyncio
    async def test_cleanup_file_nonexistent(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))
        await service.cleanup_file(tmp_path / "missing.wav")
