"""Action executors, one module per action type."""

from collections.abc import Mapping
from types import MappingProxyType

from oncompletion.domain.action import ActionType
from oncompletion.modules.completion.executors import archive, complete, delete, duplicate, keep, move
from oncompletion.modules.completion.executors.base import ActionExecutor


def build_executor_table() -> Mapping[ActionType, ActionExecutor]:
    """Build the read-only action type -> executor table."""
    executors = (delete, keep, complete, move, archive, duplicate)
    return MappingProxyType({module.EXECUTOR.action_type: module.EXECUTOR for module in executors})


__all__ = ["ActionExecutor", "build_executor_table"]
