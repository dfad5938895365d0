"""Storage primitives used by the converter.

Paths handed to a `Storage` are vault-relative, forward-slash separated
strings as produced by `normalize_path`.
"""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path
from typing import Protocol, Union

_SEPARATORS = re.compile(r"[\\/]+")


def normalize_path(path: str) -> str:
    """Collapse separators and strip leading/trailing slashes.

    >>> normalize_path("notes//maps\\\\a.assets/")
    'notes/maps/a.assets'
    """
    path = _SEPARATORS.sub("/", path).strip("/")
    path = unicodedata.normalize("NFC", path)
    return path or "/"


class Storage(Protocol):
    """Minimal file access the converter needs. All methods may raise OSError."""

    def read_text(self, path: str) -> str: ...

    def read_binary(self, path: str) -> bytes: ...

    def path_exists(self, path: str) -> bool: ...

    def create_dir(self, path: str) -> None: ...

    def write_binary(self, path: str, data: bytes) -> None: ...

    def delete_file(self, path: str) -> None: ...


class LocalStorage:
    """`Storage` backed by a directory on the local filesystem."""

    def __init__(self, root: Union[str, Path] = "."):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        rel = normalize_path(path)
        if rel == "/":
            return self.root
        return self.root / rel

    def read_text(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")

    def read_binary(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def path_exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def create_dir(self, path: str) -> None:
        self._resolve(path).mkdir(parents=True, exist_ok=True)

    def write_binary(self, path: str, data: bytes) -> None:
        self._resolve(path).write_bytes(data)

    def delete_file(self, path: str) -> None:
        self._resolve(path).unlink()

    def __repr__(self) -> str:
        return f"LocalStorage({str(self.root)!r})"
