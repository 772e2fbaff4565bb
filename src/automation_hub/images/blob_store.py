"""
automation_hub.images.blob_store

Filesystem-backed blob storage for image assets.

Responsibilities:
- Write blobs under generated names beneath a configured root.
- Idempotent deletes (a missing blob counts as deleted).
- Resolve names for retrieval without letting them escape the root.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import BinaryIO

from automation_hub.errors import BlobStorageError


class BlobStore:
    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path | None:
        """
        Return the on-disk path for `name`, or None when the name is not a plain
        filename directly under the root.
        """

        if not name or name in (".", "..") or "/" in name or "\\" in name:
            return None
        root = self._root.resolve()
        path = (root / name).resolve()
        if path.parent != root:
            return None
        return path

    def exists(self, name: str) -> bool:
        path = self.path_for(name)
        return path is not None and path.is_file()

    def write(self, name: str, src: BinaryIO) -> None:
        path = self.path_for(name)
        if path is None:
            raise BlobStorageError(f"invalid blob name {name!r}")
        try:
            self.ensure_root()
            dst = path.open("xb")
        except OSError as e:
            raise BlobStorageError(f"failed to create blob {name}: {e}") from e
        try:
            with dst:
                shutil.copyfileobj(src, dst)
        except OSError as e:
            # Never leave a truncated blob behind.
            path.unlink(missing_ok=True)
            raise BlobStorageError(f"failed to write blob {name}: {e}") from e

    def delete(self, name: str) -> None:
        if not name:
            return
        path = self.path_for(name)
        if path is None:
            raise BlobStorageError(f"invalid blob name {name!r}")
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise BlobStorageError(f"failed to delete blob {name}: {e}") from e


# --- Module Notes -----------------------------------------------------------
# Write paths only ever receive server-generated names; path_for guards the read path,
# where the name comes straight from the URL.
