"""Document storage for markdown vaults."""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Protocol for reading and writing project notes."""

    def list_documents(self) -> list[str]:
        """List vault-relative paths of every markdown note."""
        ...

    async def read(self, path: str) -> str:
        """Read the full text of a note."""
        ...

    async def write(self, path: str, text: str) -> None:
        """Replace the full text of a note."""
        ...


class VaultDocumentStore:
    """Document store over a directory of markdown files."""

    def __init__(self, vault_path: str | Path) -> None:
        """Initialize store rooted at the vault directory."""
        self.root = Path(vault_path)
        # Encoding each note was last read with, reused on write
        self._encodings: dict[str, str] = {}

    def list_documents(self) -> list[str]:
        """List notes under the vault, skipping hidden folders like .obsidian."""
        if not self.root.exists():
            logger.warning(f"[VaultDocumentStore] Vault not found: {self.root}")
            return []

        paths = []
        for file_path in self.root.rglob("*.md"):
            relative = file_path.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            paths.append(relative.as_posix())
        return sorted(paths)

    def _resolve(self, path: str) -> Path:
        file_path = (self.root / path).resolve()
        if not file_path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Path escapes vault: {path}")
        return file_path

    def _read_sync(self, path: str) -> str:
        file_path = self._resolve(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Document not found: {path}")

        # Try UTF-8 first, fallback to latin-1 for non-UTF-8 files
        try:
            content = file_path.read_text(encoding="utf-8")
            self._encodings[path] = "utf-8"
        except UnicodeDecodeError:
            content = file_path.read_text(encoding="latin-1")
            self._encodings[path] = "latin-1"
        return content

    def _write_sync(self, path: str, text: str) -> None:
        file_path = self._resolve(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Document not found: {path}")

        # Write back with same encoding
        encoding = self._encodings.get(path, "utf-8")
        file_path.write_text(text, encoding=encoding)

    async def read(self, path: str) -> str:
        """Read a note without blocking the event loop."""
        return await asyncio.to_thread(self._read_sync, path)

    async def write(self, path: str, text: str) -> None:
        """Write a note without blocking the event loop."""
        await asyncio.to_thread(self._write_sync, path, text)
        logger.debug(f"[VaultDocumentStore] Wrote {path}")


class InMemoryDocumentStore:
    """Document store backed by a dict, for tests and embedding."""

    def __init__(self, documents: dict[str, str] | None = None) -> None:
        """Initialize store with optional path -> text mapping."""
        self.documents: dict[str, str] = dict(documents or {})

    def list_documents(self) -> list[str]:
        """List stored paths."""
        return sorted(self.documents)

    async def read(self, path: str) -> str:
        """Return stored text."""
        if path not in self.documents:
            raise FileNotFoundError(f"Document not found: {path}")
        return self.documents[path]

    async def write(self, path: str, text: str) -> None:
        """Replace stored text."""
        if path not in self.documents:
            raise FileNotFoundError(f"Document not found: {path}")
        self.documents[path] = text
