"""Task domain models and enums."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SourceType(StrEnum):
    """Storage representation a task was parsed from."""

    MARKDOWN = "markdown"
    CANVAS = "canvas"


class TaskMetadata(BaseModel):
    """Metadata bag parsed from a task line.

    Unknown keys are kept so that metadata written by other parsers survives a
    copy through the engine.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    source_type: SourceType = Field(default=SourceType.MARKDOWN, description="markdown or canvas")
    canvas_node_id: str | None = Field(default=None, description="Board text node holding the task")
    on_completion: str | None = Field(default=None, description="Raw onCompletion instruction")
    tags: list[str] = Field(default_factory=list)
    priority: int | None = Field(default=None, description="1 (lowest) to 5 (highest)")
    due_date: int | None = Field(default=None, description="Due date (epoch milliseconds)")
    scheduled_date: int | None = Field(default=None, description="Scheduled date (epoch milliseconds)")
    completed_date: int | None = Field(default=None, description="Completion date (epoch milliseconds)")
    project: str | None = None
    context: str | None = None
    parent: str | None = None
    children: list[str] = Field(default_factory=list)


class Task(BaseModel):
    """Task data transfer object as produced by the task parser."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Stable task identifier")
    content: str = Field(..., description="Task text with metadata markers stripped")
    file_path: str = Field(..., description="Library path of the owning document")
    completed: bool = Field(default=False, description="Completion flag")
    status: str = Field(default=" ", max_length=1, description="Single-character checkbox marker")
    line: int | None = Field(default=None, ge=0, description="Zero-based line number (markdown tasks)")
    original_markdown: str | None = Field(default=None, description="Verbatim task line as parsed")
    metadata: TaskMetadata = Field(default_factory=TaskMetadata)

    @property
    def source_type(self) -> SourceType:
        return self.metadata.source_type

    @property
    def is_board_task(self) -> bool:
        return self.metadata.source_type == SourceType.CANVAS

    def as_markdown_line(self) -> str:
        """Return the task's verbatim line, or a minimal checkbox line built from its content."""
        if self.original_markdown:
            return self.original_markdown
        marker = "x" if self.completed else " "
        return f"- [{marker}] {self.content}"

    def with_updates(self, **fields: Any) -> "Task":
        """Return a deep copy of the task with ``fields`` replaced."""
        return self.model_copy(update=fields, deep=True)
