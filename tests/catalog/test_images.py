import pytest
from PIL import Image

from storefinder.services.catalog import (
    ContentArea,
    PhotoUpload,
    ingest_photo,
    InvalidMediaType,
    DecodeError,
    StorageWriteError,
)

from conftest import make_image


def _stored_files(content: ContentArea) -> list:
    if not content.root.exists():
        return []
    return [p for p in content.root.iterdir() if p.is_file()]


class TestIngestPhoto:

    def test_resizes_to_800_wide_keeping_aspect(self, content):
        photo = PhotoUpload(data=make_image(2000, 1000), content_type="image/jpeg")

        filename = ingest_photo(photo, content)

        with Image.open(content.path_for(filename)) as img:
            assert img.size == (800, 400)
            assert img.format == "JPEG"

    def test_extension_from_declared_type(self, content):
        photo = PhotoUpload(data=make_image(400, 300, fmt="PNG"), content_type="image/png")

        filename = ingest_photo(photo, content)

        assert filename.endswith(".png")
        with Image.open(content.path_for(filename)) as img:
            assert img.size == (800, 600)
            assert img.format == "PNG"

    def test_generates_fresh_filenames(self, content):
        photo = PhotoUpload(data=make_image(100, 100), content_type="image/jpeg")

        first = ingest_photo(photo, content)
        second = ingest_photo(photo, content)

        assert first != second
        assert len(_stored_files(content)) == 2

    def test_rejects_non_image_types(self, content):
        photo = PhotoUpload(data=b"%PDF-1.4", content_type="application/pdf")

        with pytest.raises(InvalidMediaType):
            ingest_photo(photo, content)
        assert _stored_files(content) == []

    def test_rejects_missing_content_type(self, content):
        photo = PhotoUpload(data=make_image(10, 10), content_type="")

        with pytest.raises(InvalidMediaType):
            ingest_photo(photo, content)

    def test_corrupt_image_raises_decode_error(self, content):
        photo = PhotoUpload(data=b"definitely not an image", content_type="image/jpeg")

        with pytest.raises(DecodeError):
            ingest_photo(photo, content)
        assert _stored_files(content) == []

    def test_truncated_image_raises_decode_error(self, content):
        data = make_image(600, 400)
        photo = PhotoUpload(data=data[: len(data) // 2], content_type="image/jpeg")

        with pytest.raises(DecodeError):
            ingest_photo(photo, content)

    def test_unwritable_content_area(self, tmp_path):
        blocker = tmp_path / "uploads"
        blocker.write_text("a file where the directory should be")
        photo = PhotoUpload(data=make_image(100, 50), content_type="image/jpeg")

        with pytest.raises(StorageWriteError):
            ingest_photo(photo, ContentArea(blocker))


class TestContentArea:

    def test_write_then_discard(self, content):
        path = content.write("a.jpeg", b"data")
        assert path.read_bytes() == b"data"

        content.discard("a.jpeg")
        assert not path.exists()

    def test_discard_missing_file_is_noop(self, content):
        content.discard("never-written.jpeg")

    def test_no_temporary_files_left_behind(self, content):
        content.write("b.png", b"x" * 1024)
        assert [p.name for p in _stored_files(content)] == ["b.png"]
