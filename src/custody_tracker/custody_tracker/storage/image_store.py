from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from werkzeug.utils import secure_filename

from ..core.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class ImageStore(Protocol):
    """External file storage. Returns the URL under which the image is served."""

    def save(self, *, key: str, content: bytes, mime_type: str) -> str:
        raise NotImplementedError


class LocalImageStore(ImageStore):
    """Writes images below ``root`` and serves them from ``public_prefix``."""

    def __init__(self, root: str | Path, *, public_prefix: str = "/uploads"):
        self._root = Path(root)
        self._public_prefix = public_prefix.rstrip("/")

    def save(self, *, key: str, content: bytes, mime_type: str) -> str:
        parts = [secure_filename(p) for p in key.split("/") if p]
        if not parts or not all(parts):
            raise ValueError(f"Invalid storage key: {key!r}")

        path = self._root.joinpath(*parts)
        try:
            os.makedirs(path.parent, exist_ok=True)
            with open(path, "xb") as fh:
                fh.write(content)
        except OSError as exc:
            logger.error("Image write failed for %s: %s", path, exc)
            raise StorageUnavailableError("Failed to store image, please try again") from exc

        return f"{self._public_prefix}/{'/'.join(parts)}"
