"""File-backed key/value storage with a byte quota."""

import errno
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from snapplate.domain.errors import StorageError, StorageQuotaExceededError
from snapplate.services.storage import KeyValueStorage

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_SUFFIX = ".json"


@dataclass
class FileStorage(KeyValueStorage):
    """Stores each key as a JSON file in a directory."""

    root: Path
    quota_bytes: int

    @classmethod
    def create(cls, root: str | Path, quota_bytes: int) -> "FileStorage":
        """Create storage rooted at a directory, creating it if needed."""
        path = Path(root)
        path.mkdir(parents=True, exist_ok=True)
        return cls(root=path, quota_bytes=quota_bytes)

    def get(self, key: str) -> str | None:
        """Read a document."""
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read {key}") from exc

    def set(self, key: str, value: str) -> None:
        """Write a document atomically, enforcing the quota."""
        path = self._path(key)
        new_size = _entry_size(key, value)
        projected = self.used_bytes() - self._entry_size_on_disk(key) + new_size
        if projected > self.quota_bytes:
            raise StorageQuotaExceededError(
                f"Writing {key} needs {projected} bytes, quota is {self.quota_bytes}"
            )
        tmp_path: Path | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.root, suffix=".tmp")
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            tmp_path.replace(path)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            if exc.errno in {errno.ENOSPC, errno.EDQUOT}:
                raise StorageQuotaExceededError(str(exc)) from exc
            raise StorageError(f"Failed to write {key}") from exc

    def remove(self, key: str) -> None:
        """Delete a document."""
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to remove {key}") from exc

    def used_bytes(self) -> int:
        """Sum key and document sizes over all stored keys."""
        total = 0
        for path in self.root.glob(f"*{_SUFFIX}"):
            total += len(path.stem.encode("utf-8")) + path.stat().st_size
        return total

    def _entry_size_on_disk(self, key: str) -> int:
        path = self._path(key)
        if not path.exists():
            return 0
        return len(key.encode("utf-8")) + path.stat().st_size

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}{_SUFFIX}"


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))
