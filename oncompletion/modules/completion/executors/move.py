"""Move action: relocate the completed task to another document or section.

The target is looked up (or created) before the source is touched, so a
target that cannot be created leaves the source unchanged. When the target is
written but removing the task from its source fails, the result names both
halves instead of hiding the duplicate.
"""

import logging

from oncompletion.core.errors import CompletionError, TaskLocationError
from oncompletion.core.logging import span
from oncompletion.domain.action import ActionConfig, ActionType, ExecutionResult, MoveActionConfig
from oncompletion.modules.completion import board_sections, markup
from oncompletion.modules.completion.context import ExecutionContext
from oncompletion.modules.completion.executors.base import (
    ActionExecutor,
    ensure_document,
    is_board_path,
    section_suffix,
)
from oncompletion.modules.completion.locator import MarkdownTaskLocator


logger = logging.getLogger(__name__)


def validate_config(config: ActionConfig) -> bool:
    return isinstance(config, MoveActionConfig) and bool(config.target_file.strip())


async def _board_to_board(context: ExecutionContext, config: MoveActionConfig) -> ExecutionResult:
    result = await context.board_updater.move_task(
        context.task, config.target_file, target_section=config.target_section
    )
    if not result.success:
        return ExecutionResult.fail(result.error or "Failed to move Canvas task")
    return ExecutionResult.ok(f"Task moved to Canvas file {config.target_file}{section_suffix(config.target_section)}")


async def _board_to_markdown(context: ExecutionContext, config: MoveActionConfig) -> ExecutionResult:
    task, store = context.task, context.store
    target, section = config.target_file, config.target_section

    try:
        await ensure_document(store, target)
    except CompletionError:
        return ExecutionResult.fail(f"Failed to create target file: {target}")

    lines = markup.split_lines(await store.read(target))
    markup.insert_after_heading(lines, task.as_markdown_line(), section)
    await store.write(target, markup.join_lines(lines))

    removal = await context.board_updater.delete_task(task)
    if not removal.success:
        logger.warning("Task %s written to %s but still on board %s", task.id, target, task.file_path)
        return ExecutionResult.fail(
            f"Task moved successfully to {target}{section_suffix(section)}, "
            f"but failed to remove from Canvas: {removal.error}"
        )
    return ExecutionResult.ok(f"Task moved from Canvas to {target}{section_suffix(section)}")


async def _markdown_source(context: ExecutionContext, config: MoveActionConfig) -> ExecutionResult:
    task, store = context.task, context.store
    target, section = config.target_file, config.target_section

    if not await store.exists(task.file_path):
        return ExecutionResult.fail(f"Source file not found: {task.file_path}")

    try:
        await ensure_document(store, target)
    except CompletionError:
        return ExecutionResult.fail(f"Failed to create target file: {target}")

    try:
        located = await MarkdownTaskLocator().locate(task, store)
    except TaskLocationError:
        return ExecutionResult.fail("Task line not found in source file")
    line = located.read()

    if target == task.file_path:
        lines = located.lines[: located.index] + located.lines[located.index + 1 :]
        markup.insert_after_heading(lines, line, section)
        await store.write(target, markup.join_lines(lines))
        return ExecutionResult.ok(f"Task moved to {target}{section_suffix(section)}")

    if is_board_path(target):
        try:
            destination = await board_sections.find_or_create_text_node(
                store, target, section_name=section, layout=context.settings
            )
        except CompletionError as e:
            return ExecutionResult.fail(str(e))
        board_sections.insert_task_into_section(destination.node, line, section)
        await board_sections.save_board(store, target, destination.board)
    else:
        lines = markup.split_lines(await store.read(target))
        markup.insert_after_heading(lines, line, section)
        await store.write(target, markup.join_lines(lines))

    try:
        await located.remove()
    except CompletionError as e:
        return ExecutionResult.fail(
            f"Task moved successfully to {target}{section_suffix(section)}, but failed to remove from source file: {e}"
        )
    return ExecutionResult.ok(f"Task moved to {target}{section_suffix(section)}")


async def execute(context: ExecutionContext, config: ActionConfig) -> ExecutionResult:
    if not validate_config(config):
        return ExecutionResult.fail("Invalid move configuration")

    with span("move_action.execute"):
        if not context.task.is_board_task:
            return await _markdown_source(context, config)
        if is_board_path(config.target_file):
            return await _board_to_board(context, config)
        return await _board_to_markdown(context, config)


def describe(config: ActionConfig) -> str:
    if not isinstance(config, MoveActionConfig):
        return "Move task"
    return f"Move task to {config.target_file}{section_suffix(config.target_section)}"


EXECUTOR = ActionExecutor(
    action_type=ActionType.MOVE,
    validate_config=validate_config,
    execute=execute,
    describe=describe,
)
