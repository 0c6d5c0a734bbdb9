"""HTTP router for explicitly invoked completion actions."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from oncompletion.core.logging import span
from oncompletion.domain.action import ExecutionResult, ParseResult
from oncompletion.domain.task import Task
from oncompletion.modules.completion.dispatcher import ActionDispatcher


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/actions", tags=["actions"])


class OnCompletionValue(BaseModel):
    """Raw onCompletion value sent by a client."""

    value: str = Field(..., description="Short-form or JSON onCompletion value")


class DescribeResponse(BaseModel):
    description: str


class ExecuteRequest(BaseModel):
    """Run a completion action for a task."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task: Task
    on_completion: str | None = Field(None, description="Overrides the task's own onCompletion metadata")


def get_dispatcher(request: Request) -> ActionDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Completion engine not initialized")
    return dispatcher


@router.post("/parse", response_model=ParseResult, response_model_by_alias=True)
async def parse_action(
    body: OnCompletionValue,
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
) -> ParseResult:
    """Parse and validate an onCompletion value without running it."""
    return dispatcher.parse(body.value)


@router.post("/describe")
async def describe_action(
    body: OnCompletionValue,
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
) -> DescribeResponse:
    """Describe an onCompletion value in human terms.

    Raises:
        HTTPException: If the value does not parse
    """
    parsed = dispatcher.parse(body.value)
    if not parsed.is_valid or parsed.config is None:
        raise HTTPException(status_code=400, detail=parsed.error)
    return DescribeResponse(description=dispatcher.describe(parsed.config))


@router.post("/execute")
async def execute_action(
    body: ExecuteRequest,
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
) -> ExecutionResult:
    """Run a task's completion action and return the result.

    Parse failures come back as a failed result rather than an HTTP error.
    ``complete`` actions look related tasks up in the task store set on
    ``app.state.task_store`` before startup; without one they fail with
    "Task manager not available".
    """
    raw = body.on_completion or body.task.metadata.on_completion
    with span("api.execute_action"):
        parsed = dispatcher.parse(raw)
        if not parsed.is_valid or parsed.config is None:
            return ExecutionResult.fail(parsed.error or "Invalid onCompletion configuration")

        result = await dispatcher.execute(body.task, parsed.config)

    if not result.success:
        logger.warning("Action %s failed for task %s: %s", parsed.config.type, body.task.id, result.error)
    return result
