"""Duplicate action: copy the completed task as a fresh, incomplete task."""

import logging

from oncompletion.core.errors import CompletionError, TaskLocationError
from oncompletion.core.logging import span
from oncompletion.domain.action import ActionConfig, ActionType, DuplicateActionConfig, ExecutionResult
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
    return isinstance(config, DuplicateActionConfig)


async def _write_copy(context: ExecutionContext, target: str, section: str | None, copy: str) -> None:
    """Insert ``copy`` into an existing target document of either kind."""
    store = context.store
    if is_board_path(target):
        destination = await board_sections.find_or_create_text_node(
            store, target, section_name=section, layout=context.settings
        )
        board_sections.insert_task_into_section(destination.node, copy, section)
        await board_sections.save_board(store, target, destination.board)
        return

    lines = markup.split_lines(await store.read(target))
    markup.insert_after_heading(lines, copy, section)
    await store.write(target, markup.join_lines(lines))


async def _duplicate_board_task(context: ExecutionContext, config: DuplicateActionConfig) -> ExecutionResult:
    task = context.task
    target, section = config.target_file, config.target_section
    preserve = bool(config.preserve_metadata)

    if not target or target == task.file_path or is_board_path(target):
        result = await context.board_updater.duplicate_task(
            task, target_file=target, target_section=section, preserve_metadata=preserve
        )
        if not result.success:
            return ExecutionResult.fail(result.error or "Failed to duplicate Canvas task")
        if not target or target == task.file_path:
            return ExecutionResult.ok(f"Task duplicated in same file{section_suffix(section)}")
        return ExecutionResult.ok(f"Task duplicated to {target}{section_suffix(section)}")

    try:
        await ensure_document(context.store, target)
    except CompletionError:
        return ExecutionResult.fail(f"Failed to create target file: {target}")

    copy = markup.duplicate_line(task.as_markdown_line(), preserve)
    await _write_copy(context, target, section, copy)
    return ExecutionResult.ok(f"Task duplicated from Canvas to {target}{section_suffix(section)}")


async def _duplicate_markdown_task(context: ExecutionContext, config: DuplicateActionConfig) -> ExecutionResult:
    task, store = context.task, context.store
    target, section = config.target_file, config.target_section
    same_file = not target or target == task.file_path

    if not await store.exists(task.file_path):
        return ExecutionResult.fail(f"Source file not found: {task.file_path}")

    if not same_file:
        try:
            await ensure_document(store, target)
        except CompletionError:
            return ExecutionResult.fail(f"Failed to create target file: {target}")

    try:
        located = await MarkdownTaskLocator().locate(task, store)
    except TaskLocationError:
        return ExecutionResult.fail("Task line not found in source file")
    copy = markup.duplicate_line(located.read(), bool(config.preserve_metadata))

    if same_file:
        await located.insert_after(copy)
        return ExecutionResult.ok("Task duplicated in same file")

    try:
        await _write_copy(context, target, section, copy)
    except CompletionError as e:
        return ExecutionResult.fail(str(e))
    return ExecutionResult.ok(f"Task duplicated to {target}{section_suffix(section)}")


async def execute(context: ExecutionContext, config: ActionConfig) -> ExecutionResult:
    if not validate_config(config):
        return ExecutionResult.fail("Invalid duplicate configuration")

    with span("duplicate_action.execute"):
        if context.task.is_board_task:
            return await _duplicate_board_task(context, config)
        return await _duplicate_markdown_task(context, config)


def describe(config: ActionConfig) -> str:
    target = getattr(config, "target_file", None)
    if not target:
        return "Duplicate task in same file"
    return f"Duplicate task to {target}{section_suffix(getattr(config, 'target_section', None))}"


EXECUTOR = ActionExecutor(
    action_type=ActionType.DUPLICATE,
    validate_config=validate_config,
    execute=execute,
    describe=describe,
)
