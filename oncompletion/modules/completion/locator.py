"""Locate a task's text in its source document and mutate it in place.

Markdown documents are addressed by the task's stored line index. Board text
nodes are re-parsed on every operation, so board tasks are found by content:
first an exact match on the task's original line, then a match on the core
text with all trailing metadata and the checkbox state ignored. When two lines
in one node share the same core text the first one wins.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from oncompletion.core.document_store import DocumentStore
from oncompletion.core.errors import BoardNotFoundError, DocumentNotFoundError, TaskLocationError
from oncompletion.domain.board import BoardDocument, BoardNode
from oncompletion.domain.task import SourceType, Task
from oncompletion.modules.completion import markup


logger = logging.getLogger(__name__)

TASK_NOT_IN_FILE = "Task not found in file"
TASK_NOT_IN_NODE = "Task not found in Canvas text node"


class LocatedTask(Protocol):
    """Handle to one task line inside a loaded document."""

    path: str

    def read(self) -> str:
        """Return the task's current line text."""
        ...

    async def remove(self) -> None:
        """Remove the line and persist the document."""
        ...

    async def replace(self, new_text: str) -> None:
        """Replace the line and persist the document."""
        ...

    async def insert_after(self, new_text: str) -> None:
        """Insert a line directly after the task and persist the document."""
        ...


@dataclass
class MarkdownLocatedTask:
    store: DocumentStore
    path: str
    lines: list[str]
    index: int

    def read(self) -> str:
        return self.lines[self.index]

    async def _save(self, lines: list[str]) -> None:
        await self.store.write(self.path, markup.join_lines(lines))
        self.lines = lines

    async def remove(self) -> None:
        await self._save(self.lines[: self.index] + self.lines[self.index + 1 :])

    async def replace(self, new_text: str) -> None:
        await self._save([*self.lines[: self.index], new_text, *self.lines[self.index + 1 :]])

    async def insert_after(self, new_text: str) -> None:
        await self._save([*self.lines[: self.index + 1], new_text, *self.lines[self.index + 1 :]])


@dataclass
class BoardLocatedTask:
    store: DocumentStore
    path: str
    board: BoardDocument
    node: BoardNode
    lines: list[str]
    index: int

    def read(self) -> str:
        return self.lines[self.index]

    async def _save(self, lines: list[str]) -> None:
        self.node.text = markup.join_lines(lines)
        await self.store.write(self.path, self.board.dumps())
        self.lines = lines

    async def remove(self) -> None:
        await self._save(self.lines[: self.index] + self.lines[self.index + 1 :])

    async def replace(self, new_text: str) -> None:
        await self._save([*self.lines[: self.index], new_text, *self.lines[self.index + 1 :]])

    async def insert_after(self, new_text: str) -> None:
        await self._save([*self.lines[: self.index + 1], new_text, *self.lines[self.index + 1 :]])


def line_matches_task(line: str, task: Task) -> bool:
    """Return True if a board line holds ``task``, tolerating metadata drift."""
    if not markup.is_task_line(line):
        return False

    original = task.as_markdown_line()
    if line == original or line.strip() == original.strip():
        return True

    task_core = markup.extract_core_content(task.content)
    return bool(task_core) and markup.extract_core_content(line) == task_core


def find_task_line(lines: list[str], task: Task) -> int | None:
    """Return the index of the line holding ``task`` in a board text node."""
    original = task.as_markdown_line()
    for index, line in enumerate(lines):
        if line == original:
            return index
    return next((index for index, line in enumerate(lines) if line_matches_task(line, task)), None)


class MarkdownTaskLocator:
    """Trusts the task's stored zero-based line index."""

    async def locate(self, task: Task, store: DocumentStore) -> MarkdownLocatedTask:
        """Locate a markdown task.

        Raises:
            DocumentNotFoundError: If the source document does not exist
            TaskLocationError: If the stored line index is outside the document
        """
        if not await store.exists(task.file_path):
            raise DocumentNotFoundError(task.file_path)

        lines = markup.split_lines(await store.read(task.file_path))
        if task.line is None or task.line >= len(lines):
            raise TaskLocationError(TASK_NOT_IN_FILE)
        return MarkdownLocatedTask(store=store, path=task.file_path, lines=lines, index=task.line)


class BoardTaskLocator:
    """Matches board tasks by content inside their text node."""

    async def load_node(self, task: Task, store: DocumentStore) -> tuple[BoardDocument, BoardNode]:
        """Load the task's board and return it with the task's text node.

        Raises:
            BoardNotFoundError: If the board document does not exist
            BoardFormatError: If the board is not valid board JSON
            TaskLocationError: If the task's node is not on the board
        """
        if not await store.exists(task.file_path):
            raise BoardNotFoundError(task.file_path)

        board = BoardDocument.loads(await store.read(task.file_path))
        node_id = task.metadata.canvas_node_id
        node = board.get_node(node_id) if node_id else None
        if node is None or not node.is_text:
            raise TaskLocationError(f"Canvas node not found: {node_id}")
        return board, node

    async def locate(self, task: Task, store: DocumentStore) -> BoardLocatedTask:
        """Locate a board task by content.

        Raises:
            TaskLocationError: If no line in the node matches the task
        """
        board, node = await self.load_node(task, store)
        lines = markup.split_lines(node.text or "")
        index = find_task_line(lines, task)
        if index is None:
            logger.debug("No line in node %s matches task %s", node.id, task.id)
            raise TaskLocationError(TASK_NOT_IN_NODE)
        return BoardLocatedTask(store=store, path=task.file_path, board=board, node=node, lines=lines, index=index)


_LOCATORS: dict[SourceType, MarkdownTaskLocator | BoardTaskLocator] = {
    SourceType.MARKDOWN: MarkdownTaskLocator(),
    SourceType.CANVAS: BoardTaskLocator(),
}


async def locate(task: Task, store: DocumentStore) -> LocatedTask:
    """Locate ``task`` using the backend for its source type."""
    return await _LOCATORS[task.source_type].locate(task, store)
