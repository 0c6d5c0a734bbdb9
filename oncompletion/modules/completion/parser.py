"""Parsing of raw onCompletion values into action configs.

Two syntaxes are accepted:

- Short form: ``delete``, ``keep``, ``archive``, ``archive:<path>``,
  ``move:<path>``, ``complete:<id1>,<id2>``, ``duplicate``, ``duplicate:<path>``.
  The keyword is case-insensitive and surrounding whitespace is ignored.
- Structured form: a JSON object such as
  ``{"type": "move", "targetFile": "done.md", "targetSection": "Done"}``.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from oncompletion.domain.action import ActionConfig, ActionType, ParseResult, action_config_adapter


logger = logging.getLogger(__name__)

EMPTY_VALUE_ERROR = "Empty or invalid value"
INVALID_STRUCTURE_ERROR = "Invalid configuration structure"
UNRECOGNIZED_FORMAT_ERROR = "Unrecognized onCompletion format"


def validate_config(config_like: ActionConfig | Mapping[str, Any]) -> ActionConfig | None:
    """Structurally validate a config (model instance or plain mapping).

    Returns:
        The validated config, or None if the type is unknown or the payload
        does not match that type's required fields
    """
    data = config_like.model_dump(by_alias=True) if isinstance(config_like, BaseModel) else config_like
    if not isinstance(data, Mapping):
        return None
    try:
        return action_config_adapter.validate_python(dict(data))
    except ValidationError as e:
        logger.debug("Config failed structural validation: %s", e.errors(include_url=False))
        return None


def _short_form_payload(keyword: str, argument: str | None) -> dict[str, Any] | None:
    """Build the raw config mapping for a short-form keyword, or None if unknown."""
    match keyword:
        case ActionType.DELETE | ActionType.KEEP:
            return {"type": keyword}
        case ActionType.ARCHIVE:
            return {"type": keyword, "archiveFile": argument} if argument else {"type": keyword}
        case ActionType.DUPLICATE:
            return {"type": keyword, "targetFile": argument} if argument else {"type": keyword}
        case ActionType.MOVE:
            return {"type": keyword, "targetFile": argument or ""}
        case ActionType.COMPLETE:
            ids = [part.strip() for part in (argument or "").split(",")]
            return {"type": keyword, "taskIds": [task_id for task_id in ids if task_id]}
        case _:
            return None


def _invalid(raw_value: str, error: str) -> ParseResult:
    return ParseResult(config=None, raw_value=raw_value, is_valid=False, error=error)


def parse_on_completion(raw: str | None) -> ParseResult:
    """Parse a raw onCompletion value.

    Args:
        raw: The value stored in a task's ``onCompletion`` metadata

    Returns:
        ParseResult with the config on success, or ``is_valid=False`` and an error
    """
    if not isinstance(raw, str) or not raw.strip():
        return _invalid(raw or "", EMPTY_VALUE_ERROR)

    value = raw.strip()

    if value.startswith("{"):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as e:
            return _invalid(value, f"Parse error: {e}")
        config = validate_config(decoded) if isinstance(decoded, dict) else None
        if config is None:
            return _invalid(value, INVALID_STRUCTURE_ERROR)
        return ParseResult(config=config, raw_value=value, is_valid=True)

    keyword, separator, argument = value.partition(":")
    payload = _short_form_payload(keyword.strip().lower(), argument.strip() if separator else None)
    if payload is None:
        return _invalid(value, UNRECOGNIZED_FORMAT_ERROR)

    config = validate_config(payload)
    if config is None:
        return _invalid(value, INVALID_STRUCTURE_ERROR)
    return ParseResult(config=config, raw_value=value, is_valid=True)
