"""Board task mutations used by the delete, move and duplicate actions."""

import logging

from pydantic import BaseModel, Field

from oncompletion.core.config import Settings, settings as default_settings
from oncompletion.core.document_store import DocumentStore
from oncompletion.core.errors import CompletionError
from oncompletion.core.logging import span
from oncompletion.domain.task import Task
from oncompletion.modules.completion import board_sections, markup
from oncompletion.modules.completion.locator import BoardTaskLocator


logger = logging.getLogger(__name__)


class BoardUpdateResult(BaseModel):
    """Result of a board mutation."""

    success: bool = Field(..., description="Whether the board was updated")
    error: str | None = Field(None, description="Error message if failed")
    updated_content: str | None = Field(None, description="Serialized board written by the update")


class BoardTaskUpdater:
    """Deletes, moves and duplicates tasks held in board text nodes.

    Every method reports failure through ``BoardUpdateResult`` instead of raising.
    """

    def __init__(self, store: DocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or default_settings
        self._locator = BoardTaskLocator()

    async def delete_task(self, task: Task) -> BoardUpdateResult:
        with span("board_updater.delete_task"):
            try:
                located = await self._locator.locate(task, self._store)
                await located.remove()
            except CompletionError as e:
                return BoardUpdateResult(success=False, error=str(e))
            except Exception as e:
                logger.error("Error deleting task %s from %s: %s", task.id, task.file_path, e)
                return BoardUpdateResult(success=False, error=f"Error deleting Canvas task: {e}")

            logger.info("Deleted task %s from node %s", task.id, located.node.id)
            return BoardUpdateResult(success=True, updated_content=located.board.dumps())

    async def move_task(
        self,
        task: Task,
        target_file: str,
        target_node_id: str | None = None,
        target_section: str | None = None,
    ) -> BoardUpdateResult:
        """Move a board task into a text node of ``target_file`` (which may be the same board).

        The target board is written before the task is removed from the source.
        """
        with span("board_updater.move_task"):
            try:
                located = await self._locator.locate(task, self._store)
                line = located.read()

                if target_file == task.file_path:
                    located.lines.pop(located.index)
                    located.node.text = markup.join_lines(located.lines)
                    node = board_sections.resolve_text_node(
                        located.board, node_id=target_node_id, section_name=target_section, layout=self._settings
                    )
                    board_sections.insert_task_into_section(node, line, target_section)
                    content = await board_sections.save_board(self._store, target_file, located.board)
                    return BoardUpdateResult(success=True, updated_content=content)

                target = await board_sections.find_or_create_text_node(
                    self._store,
                    target_file,
                    node_id=target_node_id,
                    section_name=target_section,
                    layout=self._settings,
                )
                board_sections.insert_task_into_section(target.node, line, target_section)
                content = await board_sections.save_board(self._store, target_file, target.board)
            except CompletionError as e:
                return BoardUpdateResult(success=False, error=str(e))
            except Exception as e:
                logger.error("Error moving task %s to %s: %s", task.id, target_file, e)
                return BoardUpdateResult(success=False, error=f"Error moving Canvas task: {e}")

            try:
                await located.remove()
            except Exception as e:
                logger.error(
                    "Moved task %s to %s but could not remove it from %s: %s", task.id, target_file, task.file_path, e
                )
                return BoardUpdateResult(
                    success=False,
                    error=f"Task moved successfully to {target_file}, but failed to remove from source Canvas: {e}",
                )
            return BoardUpdateResult(success=True, updated_content=content)

    async def duplicate_task(
        self,
        task: Task,
        target_file: str | None = None,
        target_node_id: str | None = None,
        target_section: str | None = None,
        preserve_metadata: bool = False,
    ) -> BoardUpdateResult:
        """Copy a board task as a fresh, incomplete task.

        Without a target node or section the copy lands directly below the
        original line.
        """
        destination = target_file or task.file_path
        with span("board_updater.duplicate_task"):
            try:
                located = await self._locator.locate(task, self._store)
                copy = markup.duplicate_line(located.read(), preserve_metadata)

                if destination == task.file_path:
                    if not target_node_id and not target_section:
                        await located.insert_after(copy)
                        return BoardUpdateResult(success=True, updated_content=located.board.dumps())
                    node = board_sections.resolve_text_node(
                        located.board, node_id=target_node_id, section_name=target_section, layout=self._settings
                    )
                    board_sections.insert_task_into_section(node, copy, target_section)
                    content = await board_sections.save_board(self._store, destination, located.board)
                    return BoardUpdateResult(success=True, updated_content=content)

                target = await board_sections.find_or_create_text_node(
                    self._store,
                    destination,
                    node_id=target_node_id,
                    section_name=target_section,
                    layout=self._settings,
                )
                board_sections.insert_task_into_section(target.node, copy, target_section)
                content = await board_sections.save_board(self._store, destination, target.board)
                return BoardUpdateResult(success=True, updated_content=content)
            except CompletionError as e:
                return BoardUpdateResult(success=False, error=str(e))
            except Exception as e:
                logger.error("Error duplicating task %s to %s: %s", task.id, destination, e)
                return BoardUpdateResult(success=False, error=f"Error duplicating Canvas task: {e}")
