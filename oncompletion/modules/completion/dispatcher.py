"""Action dispatcher: the entry point of the completion engine.

The dispatcher parses a task's onCompletion value, routes the config to the
executor registered for its type and turns every failure into an
``ExecutionResult``. Automatic runs (task-completed events) only log their
outcome; explicit callers receive the result.
"""

import logging
from collections.abc import Callable, Mapping

from oncompletion.core.config import Settings, constants
from oncompletion.core.document_store import DocumentStore
from oncompletion.core.errors import classify_result_error
from oncompletion.core.events import EventBus
from oncompletion.core.logging import log_with_task_context, span
from oncompletion.domain.action import ActionConfig, ActionType, ExecutionResult, ParseResult
from oncompletion.domain.task import Task
from oncompletion.modules.completion.board_updater import BoardTaskUpdater
from oncompletion.modules.completion.context import ExecutionContext, TaskStore
from oncompletion.modules.completion.executors import ActionExecutor
from oncompletion.modules.completion.parser import parse_on_completion


class ActionDispatcher:
    """Routes completion actions to their executors."""

    def __init__(
        self,
        executors: Mapping[ActionType, ActionExecutor],
        store: DocumentStore,
        settings: Settings,
        task_store: TaskStore | None = None,
        board_updater: BoardTaskUpdater | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._executors = executors
        self._store = store
        self._settings = settings
        self._task_store = task_store
        self._board_updater = board_updater or BoardTaskUpdater(store, settings)
        self._logger = logger or logging.getLogger(__name__)
        self._unsubscribe: Callable[[], None] | None = None

    def parse(self, raw: str | None) -> ParseResult:
        return parse_on_completion(raw)

    def describe(self, config: ActionConfig) -> str:
        executor = self._executors.get(config.type)
        return executor.describe(config) if executor else "Unknown action"

    async def execute(self, task: Task, config: ActionConfig) -> ExecutionResult:
        """Run the executor for ``config.type``. Never raises."""
        executor = self._executors.get(config.type)
        if executor is None:
            return ExecutionResult.fail(f"No executor found for action type: {config.type}")

        context = ExecutionContext(
            task=task,
            store=self._store,
            settings=self._settings,
            board_updater=self._board_updater,
            task_store=self._task_store,
        )
        with span(f"dispatcher.execute.{config.type}"):
            try:
                return await executor.execute(context, config)
            except Exception as e:
                self._logger.exception("Executor %s raised for task %s", config.type, task.id)
                return ExecutionResult.fail(f"Execution failed: {e}")

    async def handle_task_completed(self, task: Task) -> None:
        """React to a completed task. Failures are logged, never raised."""
        raw = task.metadata.on_completion
        if not raw:
            return

        try:
            parsed = self.parse(raw)
            if not parsed.is_valid or parsed.config is None:
                log_with_task_context(
                    self._logger,
                    "warning",
                    "Invalid onCompletion configuration",
                    task_id=task.id,
                    error=parsed.error,
                    raw_value=raw,
                )
                return

            result = await self.execute(task, parsed.config)
        except Exception:
            self._logger.exception("Unexpected error handling completion of task %s", task.id)
            return

        if result.success:
            log_with_task_context(
                self._logger,
                "info",
                "onCompletion action executed",
                task_id=task.id,
                action_type=str(parsed.config.type),
                detail=result.message,
            )
            return

        classified = classify_result_error(result.error)
        log_with_task_context(
            self._logger,
            "error",
            f"onCompletion action failed: {result.error}",
            task_id=task.id,
            action_type=str(parsed.config.type),
            category=classified.category.value,
            file_path=task.file_path,
        )

    async def _on_task_completed(self, task: Task, **_: object) -> None:
        await self.handle_task_completed(task)

    def attach(self, bus: EventBus) -> None:
        """Subscribe to task-completed events on ``bus``."""
        self.detach()
        self._unsubscribe = bus.subscribe(constants.TASK_COMPLETED_EVENT, self._on_task_completed)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
