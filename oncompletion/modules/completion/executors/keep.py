"""Keep action: an explicit no-op."""

from oncompletion.domain.action import ActionConfig, ActionType, ExecutionResult, KeepActionConfig
from oncompletion.modules.completion.context import ExecutionContext
from oncompletion.modules.completion.executors.base import ActionExecutor


def validate_config(config: ActionConfig) -> bool:
    return isinstance(config, KeepActionConfig)


async def execute(context: ExecutionContext, config: ActionConfig) -> ExecutionResult:
    if not validate_config(config):
        return ExecutionResult.fail("Invalid keep configuration")
    return ExecutionResult.ok("Task kept in place")


def describe(config: ActionConfig) -> str:
    return "Keep the completed task in place"


EXECUTOR = ActionExecutor(
    action_type=ActionType.KEEP,
    validate_config=validate_config,
    execute=execute,
    describe=describe,
)
