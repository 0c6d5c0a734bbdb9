"""Document store abstraction and its filesystem implementation.

Paths are library-relative POSIX strings such as ``Projects/todo.md`` or
``boards/plan.canvas``.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable

from oncompletion.core.errors import DocumentCreateError, DocumentNotFoundError, PathValidationError


logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """Async document-store contract consumed by the completion engine."""

    async def read(self, path: str) -> str:
        """Return the document's content.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        ...

    async def write(self, path: str, content: str) -> None:
        """Replace an existing document's content.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        ...

    async def exists(self, path: str) -> bool:
        """Return True if a document or folder exists at ``path``."""
        ...

    async def create(self, path: str, initial_content: str = "") -> None:
        """Create a new document.

        Raises:
            DocumentCreateError: If the document cannot be created
        """
        ...

    async def create_folder(self, path: str) -> None:
        """Create a folder (and its parents).

        Raises:
            DocumentCreateError: If the folder cannot be created
        """
        ...


def parent_folder(path: str) -> str:
    """Return the parent folder of a library path, or an empty string at the root."""
    index = path.rfind("/")
    return path[:index] if index > 0 else ""


def validate_path(library_root: Path, raw_path: str) -> Path:
    """Validate a library-relative path and return the absolute filesystem path."""
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise PathValidationError(f"Invalid document path: {raw_path!r}")

    candidate = PurePosixPath(raw_path.replace("\\", "/"))

    if candidate.is_absolute():
        raise PathValidationError(f"Absolute paths are not allowed: {raw_path}")

    if ".." in candidate.parts:
        raise PathValidationError(f"Path traversal is not allowed: {raw_path}")

    return library_root.joinpath(*candidate.parts)


def _read_text(target_path: Path) -> str:
    with target_path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def _atomic_write(target_path: Path, content: str) -> None:
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", newline="", dir=target_path.parent, delete=False
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_path, target_path)
    finally:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                logger.debug("Could not remove temp file %s", temp_path)


class FileSystemDocumentStore:
    """Document store rooted at a directory on the local filesystem."""

    def __init__(self, root: Path | str):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        return validate_path(self._root, path)

    async def read(self, path: str) -> str:
        target = self._resolve(path)
        if not target.is_file():
            raise DocumentNotFoundError(path)
        return await asyncio.to_thread(_read_text, target)

    async def write(self, path: str, content: str) -> None:
        target = self._resolve(path)
        if not target.is_file():
            raise DocumentNotFoundError(path)
        await asyncio.to_thread(_atomic_write, target, content)
        logger.debug("Wrote %s (%d chars)", path, len(content))

    async def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    async def create(self, path: str, initial_content: str = "") -> None:
        target = self._resolve(path)
        if target.exists():
            raise DocumentCreateError(path, "already exists")
        if not target.parent.is_dir():
            raise DocumentCreateError(path, "parent folder does not exist")
        try:
            await asyncio.to_thread(_atomic_write, target, initial_content)
        except OSError as e:
            raise DocumentCreateError(path, str(e)) from e
        logger.info("Created document %s", path)

    async def create_folder(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise DocumentCreateError(path, str(e)) from e
