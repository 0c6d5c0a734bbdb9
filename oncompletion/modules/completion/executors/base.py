"""Executor record type and helpers shared by the action executors."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from oncompletion.core.config import constants
from oncompletion.core.document_store import DocumentStore, parent_folder
from oncompletion.domain.action import ActionConfig, ActionType, ExecutionResult
from oncompletion.modules.completion.context import ExecutionContext


logger = logging.getLogger(__name__)

EMPTY_BOARD = '{\n  "nodes": [],\n  "edges": []\n}'


@dataclass(frozen=True)
class ActionExecutor:
    """The three functions that implement one action type."""

    action_type: ActionType
    validate_config: Callable[[ActionConfig], bool]
    execute: Callable[[ExecutionContext, ActionConfig], Awaitable[ExecutionResult]]
    describe: Callable[[ActionConfig], str]


def is_board_path(path: str) -> bool:
    return path.lower().endswith(constants.BOARD_EXTENSION)


def section_suffix(section: str | None) -> str:
    return f" (section: {section})" if section else ""


async def ensure_document(store: DocumentStore, path: str, initial_content: str = "") -> bool:
    """Create ``path`` (and its parent folder) unless it already exists.

    Returns:
        True if the document was created

    Raises:
        DocumentCreateError: If the folder or document cannot be created
    """
    if await store.exists(path):
        return False

    folder = parent_folder(path)
    if folder and not await store.exists(folder):
        await store.create_folder(folder)

    if not initial_content and is_board_path(path):
        initial_content = EMPTY_BOARD
    await store.create(path, initial_content)
    logger.info("Created %s", path)
    return True
