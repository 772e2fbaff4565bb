"""
automation_hub.images.pipeline

Validation and storage of uploaded automation images.

Responsibilities:
- Enforce the configured size limit and extension allow-list.
- Sniff the leading bytes and reject non-images and renamed files whose content
  does not match their extension.
- Store accepted uploads under a fresh random name and delete replaced blobs.

Methods here do blocking file I/O; async callers run them in a worker thread.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from typing import BinaryIO

from PIL import Image

from automation_hub.errors import (
    ImageTooLargeError,
    ImageTypeMismatchError,
    InvalidImageExtensionError,
    NotAnImageError,
    ValidationError,
)
from automation_hub.images.blob_store import BlobStore
from automation_hub.images.sniff import SNIFF_LEN, detect_content_type, extensions_for
from automation_hub.observability.logging import get_logger
from automation_hub.settings import ImageConfig

log = get_logger(__name__)


@dataclass(slots=True)
class ImageUpload:
    """
    Raw upload as received by the transport layer. `file` must be seekable.
    """

    filename: str
    size: int
    file: BinaryIO


class ImagePipeline:
    def __init__(self, *, config: ImageConfig, blobs: BlobStore) -> None:
        self._config = config
        self._blobs = blobs

    @property
    def blobs(self) -> BlobStore:
        return self._blobs

    def store(self, upload: ImageUpload) -> str:
        """
        Validate `upload` and copy it into the blob store.

        Returns the generated blob name. Raises a `ValidationError` subclass for
        rejected uploads and `BlobStorageError` when the copy fails.
        """

        log.info("image_received", filename=upload.filename, size=upload.size)

        if upload.size > self._config.max_size:
            raise ImageTooLargeError(upload.size, self._config.max_size)

        ext = _extension(upload.filename)
        if ext not in self._config.extensions:
            raise InvalidImageExtensionError(ext, self._config.extensions)

        upload.file.seek(0)
        head = upload.file.read(SNIFF_LEN)
        if not head:
            raise ValidationError("image file is empty")

        content_type = detect_content_type(head)
        if not content_type.startswith("image/"):
            raise NotAnImageError(content_type)
        # ext is already allow-listed, so matching it also matches an allowed extension.
        if ext not in extensions_for(content_type):
            raise ImageTypeMismatchError(ext, content_type)

        upload.file.seek(0)
        self._check_decodes(upload)

        name = f"{uuid.uuid4()}{ext}"
        upload.file.seek(0)
        self._blobs.write(name, upload.file)
        log.info("image_stored", image=name, content_type=content_type)
        return name

    def delete(self, name: str) -> None:
        self._blobs.delete(name)
        if name:
            log.info("image_deleted", image=name)

    def _check_decodes(self, upload: ImageUpload) -> None:
        # A structurally broken image is still accepted; only the header checks are enforced.
        try:
            with Image.open(upload.file) as img:
                img.verify()
        except Exception as e:  # Pillow raises a mix of OSError, SyntaxError and struct.error
            log.warning("image_decode_failed", filename=upload.filename, error=str(e))


def _extension(filename: str) -> str:
    # Everything from the last dot of the base name, so ".png" alone counts as ".png".
    base = os.path.basename(filename.replace("\\", "/"))
    dot = base.rfind(".")
    return base[dot:].lower() if dot >= 0 else ""


# --- Module Notes -----------------------------------------------------------
# Generated names (uuid4 + lowercased extension) are the only names ever written, so
# attacker-controlled filenames cannot traverse out of the blob root.
