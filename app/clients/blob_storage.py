"""Filesystem blob storage for token files and data snapshots."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Optional


class LocalBlobStorage:
    """Store text blobs under a root directory addressed by relative paths."""

    def __init__(self, root: str) -> None:
        self._root = Path(root)

    def path(self, relative_path: str) -> Path:
        """Resolve a blob path, refusing anything that escapes the root."""
        parts = PurePosixPath(relative_path).parts
        if not parts or PurePosixPath(relative_path).is_absolute() or ".." in parts:
            raise ValueError(f"Invalid blob path: {relative_path!r}")
        return self._root.joinpath(*parts)

    def exists(self, relative_path: str) -> bool:
        return self.path(relative_path).is_file()

    def get(self, relative_path: str) -> Optional[str]:
        target = self.path(relative_path)
        if not target.is_file():
            return None
        return target.read_text(encoding="utf-8")

    def put(self, relative_path: str, contents: str) -> Path:
        target = self.path(relative_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        # Write then rename so readers never see a half-written snapshot.
        staging = target.with_name(f".{target.name}.tmp")
        staging.write_text(contents, encoding="utf-8")
        staging.replace(target)
        return target

    def delete(self, relative_path: str) -> bool:
        target = self.path(relative_path)
        if not target.is_file():
            return False
        target.unlink()
        return True


__all__ = ["LocalBlobStorage"]
