"""Completion-action engine: parser, locators, board helpers, executors and dispatcher."""

from oncompletion.modules.completion.board_updater import BoardTaskUpdater, BoardUpdateResult
from oncompletion.modules.completion.context import ExecutionContext, TaskStore
from oncompletion.modules.completion.dispatcher import ActionDispatcher
from oncompletion.modules.completion.executors import ActionExecutor, build_executor_table
from oncompletion.modules.completion.locator import LocatedTask, locate
from oncompletion.modules.completion.parser import parse_on_completion, validate_config


__all__ = [
    "ActionDispatcher",
    "ActionExecutor",
    "BoardTaskUpdater",
    "BoardUpdateResult",
    "ExecutionContext",
    "LocatedTask",
    "TaskStore",
    "build_executor_table",
    "locate",
    "parse_on_completion",
    "validate_config",
]
