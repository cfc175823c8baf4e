"""Image intake for proof-of-custody and attendance photos."""
from __future__ import annotations

import hashlib
import io
from dataclasses import dataclass
from typing import Optional

from PIL import Image
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.constants import MAX_IMAGE_BYTES
from ..core.exceptions import ValidationError

# Pillow format name -> (extension, mime type)
ALLOWED_IMAGE_FORMATS = {
    "JPEG": ("jpg", "image/jpeg"),
    "PNG": ("png", "image/png"),
    "WEBP": ("webp", "image/webp"),
}


@dataclass(frozen=True)
class ImageUpload:
    content: bytes
    extension: str
    mime_type: str
    original_name: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


def compute_hash(content: bytes) -> str:
    """SHA-256 hex digest, used to prove the stored photo was not altered."""
    return hashlib.sha256(content).hexdigest()


def validate_image_bytes(content: bytes, *, filename: Optional[str] = None, max_bytes: int = MAX_IMAGE_BYTES) -> ImageUpload:
    if not content:
        raise ValidationError("Image file is required")
    if len(content) > max_bytes:
        raise ValidationError(f"Image exceeds the {max_bytes // (1024 * 1024)} MB limit")

    try:
        with Image.open(io.BytesIO(content)) as img:
            image_format = img.format
            img.verify()
    except Exception as exc:
        raise ValidationError("Image could not be read") from exc

    if image_format not in ALLOWED_IMAGE_FORMATS:
        raise ValidationError("Only JPEG, PNG, and WebP images are allowed")

    extension, mime_type = ALLOWED_IMAGE_FORMATS[image_format]
    return ImageUpload(
        content=content,
        extension=extension,
        mime_type=mime_type,
        original_name=secure_filename(filename) if filename else None,
    )


def read_image_upload(file: Optional[FileStorage], *, max_bytes: int = MAX_IMAGE_BYTES) -> ImageUpload:
    """Read a multipart upload into memory (needed for hashing) and validate it."""
    if file is None or not file.filename:
        raise ValidationError("Image file is required")
    # Read one byte past the limit so oversized uploads are rejected without buffering them whole.
    content = file.stream.read(max_bytes + 1)
    return validate_image_bytes(content, filename=file.filename, max_bytes=max_bytes)
