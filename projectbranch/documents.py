"""Read, write and append documents inside a project's documentation folder."""

from __future__ import annotations

import os
from typing import Optional

from .logging import get_logger
from .ports import FileSystemPort

_LOGGER = get_logger("documents")


class DocumentNotFoundError(FileNotFoundError):
    """Raised when a caller asks for a document that does not exist."""


class DocumentService:
    """Thin document helper over the filesystem port."""

    def __init__(self, fs_port: FileSystemPort, default_file_name: str = "README.md") -> None:
        self.fs_port = fs_port
        self.default_file_name = default_file_name

    def resolve_file_path(self, docs_path: str, file_name: Optional[str] = None) -> str:
        return os.path.join(docs_path, file_name or self.default_file_name)

    def read(self, docs_path: str, file_name: Optional[str] = None) -> str:
        target_path = self.resolve_file_path(docs_path, file_name)
        if not self.fs_port.is_file(target_path):
            raise DocumentNotFoundError(f"Document does not exist: {target_path}")
        return self.fs_port.read_text(target_path)

    def write(self, docs_path: str, contents: str, file_name: Optional[str] = None) -> str:
        self.fs_port.ensure_directory(docs_path)
        target_path = self.resolve_file_path(docs_path, file_name)
        self.fs_port.write_text(target_path, contents)
        _LOGGER.debug("Wrote %d characters to %s", len(contents), target_path)
        return target_path

    def append(self, docs_path: str, text: str, file_name: Optional[str] = None) -> str:
        """Append ``text`` to the document, creating it when missing; returns the full text."""
        target_path = self.resolve_file_path(docs_path, file_name)
        existing = self.fs_port.read_text(target_path) if self.fs_port.is_file(target_path) else ""
        updated = f"{existing}{text}"
        self.write(docs_path, updated, file_name)
        return updated


__all__ = ["DocumentNotFoundError", "DocumentService"]
