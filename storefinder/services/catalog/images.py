"""
Photo ingest: validate, decode, resize to a fixed width and persist to the content area.
"""

import io
import os
import tempfile
import uuid
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from storefinder.core.config import settings

from .errors import InvalidMediaType, DecodeError, StorageWriteError
from .types import PhotoUpload


class ContentArea:
    """Directory where ingested photos live, addressed by generated filename."""

    def __init__(self, root):
        self.root = Path(root)

    @classmethod
    def from_settings(cls) -> "ContentArea":
        return cls(settings.UPLOADS_DIR)

    def path_for(self, filename: str) -> Path:
        return self.root / filename

    def write(self, filename: str, data: bytes) -> Path:
        """Durably write data under filename; the file is complete and synced on return."""
        target = self.path_for(filename)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.root, prefix=".upload-")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(data)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_path, target)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageWriteError(f"Could not save photo {filename}: {e}") from e
        return target

    def discard(self, filename: str) -> None:
        self.path_for(filename).unlink(missing_ok=True)


def _extension(content_type: str) -> str:
    # image/jpeg -> jpeg, image/svg+xml -> svg
    subtype = content_type.split("/", 1)[1].split(";", 1)[0].strip().lower()
    return subtype.split("+", 1)[0] or "img"


def resize_to_width(data: bytes, width: int) -> bytes:
    """Scale an encoded image to `width`, keeping its aspect ratio and original format."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            fmt = img.format
            height = max(1, round(img.height * width / img.width))
            resized = img.resize((width, height), Image.LANCZOS)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode photo: {e}") from e

    output = io.BytesIO()
    try:
        resized.save(output, format=fmt)
    except (OSError, ValueError, KeyError) as e:
        raise DecodeError(f"Could not re-encode photo as {fmt}: {e}") from e
    return output.getvalue()


def ingest_photo(photo: PhotoUpload, content: ContentArea) -> str:
    """
    Validate and store an uploaded photo, returning the generated filename.

    Raises InvalidMediaType for non-image uploads, DecodeError for corrupt images and
    StorageWriteError if the content area cannot be written.
    """
    if not (photo.content_type or "").startswith("image/"):
        raise InvalidMediaType("That file type isn't allowed")

    filename = f"{uuid.uuid4().hex}.{_extension(photo.content_type)}"
    resized = resize_to_width(photo.data, settings.PHOTO_WIDTH)
    content.write(filename, resized)
    return filename
