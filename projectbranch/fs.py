"""Local filesystem adapter."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from .models import DirectoryEntry


class LocalFileSystemPort:
    """Implements the filesystem port with :mod:`pathlib`.

    ``read_directory``, ``read_text`` and ``write_text`` raise ``OSError``;
    the boolean probes never raise and report ``False`` on any access error.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def read_directory(self, path: str) -> List[DirectoryEntry]:
        entries: List[DirectoryEntry] = []
        with os.scandir(path) as iterator:
            for entry in iterator:
                entries.append(
                    DirectoryEntry(
                        name=entry.name,
                        path=os.path.join(path, entry.name),
                        is_directory=_safe_probe(entry.is_dir),
                        is_file=_safe_probe(entry.is_file),
                    )
                )
        entries.sort(key=lambda item: item.name)
        return entries

    def exists(self, path: str) -> bool:
        return _safe_probe(Path(path).exists)

    def is_directory(self, path: str) -> bool:
        return _safe_probe(Path(path).is_dir)

    def is_file(self, path: str) -> bool:
        return _safe_probe(Path(path).is_file)

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding=self._encoding)

    def write_text(self, path: str, contents: str) -> None:
        Path(path).write_text(contents, encoding=self._encoding)

    def ensure_directory(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)


def _safe_probe(probe) -> bool:  # type: ignore[no-untyped-def]
    try:
        return bool(probe())
    except OSError:
        return False


__all__ = ["LocalFileSystemPort"]
