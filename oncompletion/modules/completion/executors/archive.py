"""Archive action: move the completed task into an archive document.

Archived lines lose their completion action, are forced to the completed
checkbox and get a ``- Completed <date> (from <source>)`` suffix. The archive
is written before the source so a failed archive never loses the task.
"""

import logging

from oncompletion.core.config import settings
from oncompletion.core.errors import CompletionError, TaskLocationError
from oncompletion.core.logging import span
from oncompletion.domain.action import ActionConfig, ActionType, ArchiveActionConfig, ExecutionResult
from oncompletion.modules.completion import markup
from oncompletion.modules.completion.context import ExecutionContext
from oncompletion.modules.completion.executors.base import ActionExecutor, ensure_document
from oncompletion.modules.completion.locator import MarkdownTaskLocator


logger = logging.getLogger(__name__)


def validate_config(config: ActionConfig) -> bool:
    return isinstance(config, ArchiveActionConfig)


def _archive_target(context: ExecutionContext, config: ArchiveActionConfig) -> tuple[str, str]:
    return (
        config.archive_file or context.settings.default_archive_file,
        config.archive_section or context.settings.default_archive_section,
    )


async def _prepare_archive(context: ExecutionContext, archive_file: str, section: str) -> ExecutionResult | None:
    """Get or create the archive document; return a failed result if that is impossible."""
    try:
        await ensure_document(context.store, archive_file, f"# Archive\n\n## {section}\n\n")
    except CompletionError as e:
        logger.warning("Could not create archive %s: %s", archive_file, e)
        return ExecutionResult.fail(f"Failed to create archive file: {archive_file}")
    return None


async def _append_to_archive(context: ExecutionContext, archive_file: str, section: str, line: str) -> None:
    lines = markup.split_lines(await context.store.read(archive_file))
    markup.insert_at_section_end(lines, line, section)
    await context.store.write(archive_file, markup.join_lines(lines))


async def _archive_board_task(context: ExecutionContext, archive_file: str, section: str) -> ExecutionResult:
    task = context.task
    if failure := await _prepare_archive(context, archive_file, section):
        return failure

    line = markup.archived_line(task.as_markdown_line(), task.file_path)
    await _append_to_archive(context, archive_file, section, line)

    removal = await context.board_updater.delete_task(task)
    if not removal.success:
        logger.warning("Task %s archived to %s but still on board %s", task.id, archive_file, task.file_path)
        return ExecutionResult.fail(
            f"Task archived successfully to {archive_file}, but failed to remove from Canvas: {removal.error}"
        )
    return ExecutionResult.ok(f"Task archived from Canvas to {archive_file}")


async def _archive_markdown_task(context: ExecutionContext, archive_file: str, section: str) -> ExecutionResult:
    task, store = context.task, context.store

    if not await store.exists(task.file_path):
        return ExecutionResult.fail(f"Source file not found: {task.file_path}")

    if failure := await _prepare_archive(context, archive_file, section):
        return failure

    try:
        located = await MarkdownTaskLocator().locate(task, store)
    except TaskLocationError:
        return ExecutionResult.fail("Task line not found in source file")
    line = markup.archived_line(located.read(), task.file_path)

    if archive_file == task.file_path:
        lines = located.lines[: located.index] + located.lines[located.index + 1 :]
        markup.insert_at_section_end(lines, line, section)
        await store.write(archive_file, markup.join_lines(lines))
    else:
        await _append_to_archive(context, archive_file, section, line)
        try:
            await located.remove()
        except CompletionError as e:
            return ExecutionResult.fail(
                f"Task archived successfully to {archive_file}, but failed to remove from source file: {e}"
            )

    return ExecutionResult.ok(f"Task archived to {archive_file} (section: {section})")


async def execute(context: ExecutionContext, config: ActionConfig) -> ExecutionResult:
    if not validate_config(config):
        return ExecutionResult.fail("Invalid archive configuration")

    archive_file, section = _archive_target(context, config)
    with span("archive_action.execute"):
        if context.task.is_board_task:
            return await _archive_board_task(context, archive_file, section)
        return await _archive_markdown_task(context, archive_file, section)


def describe(config: ActionConfig) -> str:
    archive_file = getattr(config, "archive_file", None) or settings.default_archive_file
    section = getattr(config, "archive_section", None) or settings.default_archive_section
    return f"Archive task to {archive_file} (section: {section})"


EXECUTOR = ActionExecutor(
    action_type=ActionType.ARCHIVE,
    validate_config=validate_config,
    execute=execute,
    describe=describe,
)
