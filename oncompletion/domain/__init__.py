"""Domain models and DTOs."""

from oncompletion.domain.action import (
    ActionConfig,
    ActionType,
    ArchiveActionConfig,
    CompleteActionConfig,
    DeleteActionConfig,
    DuplicateActionConfig,
    ExecutionResult,
    KeepActionConfig,
    MoveActionConfig,
    ParseResult,
)
from oncompletion.domain.board import BoardDocument, BoardNode
from oncompletion.domain.task import SourceType, Task, TaskMetadata


__all__ = [
    "ActionConfig",
    "ActionType",
    "ArchiveActionConfig",
    "BoardDocument",
    "BoardNode",
    "CompleteActionConfig",
    "DeleteActionConfig",
    "DuplicateActionConfig",
    "ExecutionResult",
    "KeepActionConfig",
    "MoveActionConfig",
    "ParseResult",
    "SourceType",
    "Task",
    "TaskMetadata",
]
