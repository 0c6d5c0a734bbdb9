"""Delete action: remove the completed task from its document."""

import logging

from oncompletion.core.errors import CompletionError
from oncompletion.core.logging import span
from oncompletion.domain.action import ActionConfig, ActionType, DeleteActionConfig, ExecutionResult
from oncompletion.modules.completion.context import ExecutionContext
from oncompletion.modules.completion.executors.base import ActionExecutor
from oncompletion.modules.completion.locator import locate


logger = logging.getLogger(__name__)


def validate_config(config: ActionConfig) -> bool:
    return isinstance(config, DeleteActionConfig)


async def execute(context: ExecutionContext, config: ActionConfig) -> ExecutionResult:
    if not validate_config(config):
        return ExecutionResult.fail("Invalid delete configuration")

    task = context.task
    with span("delete_action.execute"):
        if task.is_board_task:
            result = await context.board_updater.delete_task(task)
            if not result.success:
                return ExecutionResult.fail(result.error or "Failed to delete Canvas task")
            return ExecutionResult.ok(f"Task deleted from Canvas file {task.file_path}")

        try:
            located = await locate(task, context.store)
            await located.remove()
        except CompletionError as e:
            return ExecutionResult.fail(str(e))

        logger.info("Deleted task %s from %s", task.id, task.file_path)
        return ExecutionResult.ok("Task deleted successfully")


def describe(config: ActionConfig) -> str:
    return "Delete the completed task from the file"


EXECUTOR = ActionExecutor(
    action_type=ActionType.DELETE,
    validate_config=validate_config,
    execute=execute,
    describe=describe,
)
