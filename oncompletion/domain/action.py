"""Completion-action configuration models and result DTOs."""

import json
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class ActionType(StrEnum):
    """Follow-up behaviours a task can request when it is completed."""

    DELETE = "delete"
    KEEP = "keep"
    COMPLETE = "complete"
    MOVE = "move"
    ARCHIVE = "archive"
    DUPLICATE = "duplicate"


class _ActionConfigBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_on_completion(self) -> str:
        """Encode the config in its structured (JSON object) form."""
        return json.dumps(self.model_dump(mode="json", by_alias=True, exclude_none=True))

    def to_short_form(self) -> str | None:
        """Encode the config in short form, or return None when it has no short form."""
        return None


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class DeleteActionConfig(_ActionConfigBase):
    """Remove the completed task from its document."""

    type: Literal["delete"] = "delete"

    def to_short_form(self) -> str | None:
        return "delete"


class KeepActionConfig(_ActionConfigBase):
    """Leave the completed task where it is."""

    type: Literal["keep"] = "keep"

    def to_short_form(self) -> str | None:
        return "keep"


class CompleteActionConfig(_ActionConfigBase):
    """Mark related tasks as completed."""

    type: Literal["complete"] = "complete"
    task_ids: list[str] = Field(..., min_length=1)

    @field_validator("task_ids")
    @classmethod
    def _ids_not_blank(cls, value: list[str]) -> list[str]:
        ids = [task_id.strip() for task_id in value if task_id and task_id.strip()]
        if not ids:
            raise ValueError("task_ids must contain at least one id")
        return ids

    def to_short_form(self) -> str | None:
        return f"complete:{','.join(self.task_ids)}"


class MoveActionConfig(_ActionConfigBase):
    """Move the completed task to another document (and optionally section)."""

    type: Literal["move"] = "move"
    target_file: str
    target_section: str | None = None

    @field_validator("target_file")
    @classmethod
    def _target_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("target_file must not be blank")
        return value.strip()

    @field_validator("target_section")
    @classmethod
    def _section_blank_to_none(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    def to_short_form(self) -> str | None:
        if self.target_section:
            return None
        return f"move:{self.target_file}"


class ArchiveActionConfig(_ActionConfigBase):
    """Move the completed task into an archive document."""

    type: Literal["archive"] = "archive"
    archive_file: str | None = None
    archive_section: str | None = None

    @field_validator("archive_file", "archive_section")
    @classmethod
    def _normalize_optional(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    def to_short_form(self) -> str | None:
        if self.archive_section:
            return None
        return f"archive:{self.archive_file}" if self.archive_file else "archive"


class DuplicateActionConfig(_ActionConfigBase):
    """Copy the completed task as a fresh, incomplete task."""

    type: Literal["duplicate"] = "duplicate"
    target_file: str | None = None
    target_section: str | None = None
    preserve_metadata: bool | None = None

    @field_validator("target_file", "target_section")
    @classmethod
    def _normalize_optional(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    def to_short_form(self) -> str | None:
        if self.target_section or self.preserve_metadata is not None:
            return None
        return f"duplicate:{self.target_file}" if self.target_file else "duplicate"


ActionConfig = Annotated[
    DeleteActionConfig
    | KeepActionConfig
    | CompleteActionConfig
    | MoveActionConfig
    | ArchiveActionConfig
    | DuplicateActionConfig,
    Field(discriminator="type"),
]

action_config_adapter: TypeAdapter[ActionConfig] = TypeAdapter(ActionConfig)


class ExecutionResult(BaseModel):
    """Outcome of running a completion action."""

    success: bool
    message: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, message: str | None = None) -> "ExecutionResult":
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, error: str) -> "ExecutionResult":
        return cls(success=False, error=error)


class ParseResult(BaseModel):
    """Outcome of parsing a raw onCompletion value."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    config: ActionConfig | None = None
    raw_value: str = ""
    is_valid: bool
    error: str | None = None
