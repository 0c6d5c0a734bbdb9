"""Complete action: mark related tasks as completed.

The batch is best effort. A missing or failing id is recorded and the loop
continues; the action succeeds when at least one task was completed.
"""

import logging
import time

from oncompletion.core.config import constants
from oncompletion.core.logging import log_with_task_context, span
from oncompletion.domain.action import ActionConfig, ActionType, CompleteActionConfig, ExecutionResult
from oncompletion.modules.completion.context import ExecutionContext
from oncompletion.modules.completion.executors.base import ActionExecutor


logger = logging.getLogger(__name__)


def validate_config(config: ActionConfig) -> bool:
    return isinstance(config, CompleteActionConfig) and len(config.task_ids) > 0


async def execute(context: ExecutionContext, config: ActionConfig) -> ExecutionResult:
    if not validate_config(config):
        return ExecutionResult.fail("Invalid complete configuration")

    task_store = context.task_store
    if task_store is None:
        return ExecutionResult.fail("Task manager not available")

    completed: list[str] = []
    failed: list[str] = []

    with span("complete_action.execute"):
        for task_id in config.task_ids:
            try:
                target = task_store.get_task_by_id(task_id)
                if target is None:
                    failed.append(f"Task not found: {task_id}")
                    continue
                if target.completed:
                    continue

                metadata = target.metadata.model_copy(update={"completed_date": int(time.time() * 1000)})
                await task_store.update_task(
                    target.with_updates(completed=True, status=constants.COMPLETED_STATUS, metadata=metadata)
                )
                completed.append(task_id)
            except Exception as e:
                log_with_task_context(
                    logger, "warning", "Failed to complete related task", task_id=task_id, error=str(e)
                )
                failed.append(f"{task_id}: {e}")

    parts = []
    if completed:
        parts.append(f"Completed tasks: {', '.join(completed)}")
    if failed:
        parts.append(f"Failed: {', '.join(failed)}")
    message = "; ".join(parts)

    if completed:
        return ExecutionResult.ok(message)
    return ExecutionResult.fail(message or "No tasks were completed")


def describe(config: ActionConfig) -> str:
    count = len(config.task_ids) if isinstance(config, CompleteActionConfig) else 0
    return f"Complete {count} related task{'' if count == 1 else 's'}"


EXECUTOR = ActionExecutor(
    action_type=ActionType.COMPLETE,
    validate_config=validate_config,
    execute=execute,
    describe=describe,
)
