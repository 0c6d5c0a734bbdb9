"""Execution context handed to every action executor."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from oncompletion.core.config import Settings
from oncompletion.core.document_store import DocumentStore
from oncompletion.domain.task import Task


if TYPE_CHECKING:
    from oncompletion.modules.completion.board_updater import BoardTaskUpdater


@runtime_checkable
class TaskStore(Protocol):
    """Task index the Complete action reads from and writes to."""

    def get_task_by_id(self, task_id: str) -> Task | None: ...

    async def update_task(self, task: Task) -> None: ...


@dataclass(frozen=True)
class ExecutionContext:
    """References an executor needs for one call. Built per call and never stored."""

    task: Task
    store: DocumentStore
    settings: Settings
    board_updater: "BoardTaskUpdater"
    task_store: TaskStore | None = None
