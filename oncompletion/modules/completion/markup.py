"""Task-line text utilities shared by locators and executors.

Task lines look like ``- [x] Buy milk #errands ⏫ 📅 2024-12-20 🏁 archive``.
Everything after the description is trailing metadata: tags, emoji date and
priority markers, the ``🏁`` completion action and dataview-style
``[key:: value]`` fields.
"""

import re
from datetime import UTC, datetime

from oncompletion.core.config import constants


ON_COMPLETION_GLYPH = "🏁"

DATE_GLYPHS = ("📅", "⏳", "⏰", "🛫", "➕", "✅", "❌")
PRIORITY_GLYPHS = {"🔺": 5, "⏫": 4, "🔼": 3, "🔽": 1, "⏬": 0}
_PRIORITY_BY_LEVEL = {level: glyph for glyph, level in PRIORITY_GLYPHS.items()}
_ALL_GLYPHS = (*DATE_GLYPHS, *PRIORITY_GLYPHS, ON_COMPLETION_GLYPH, "🆔", "⛔", "🔁")

TASK_LINE_RE = re.compile(r"^(?P<indent>\s*)(?P<bullet>[-*+]|\d+[.)])\s+\[(?P<status>.)\]\s?(?P<body>.*)$")
_CHECKBOX_RE = re.compile(r"^(\s*(?:[-*+]|\d+[.)])\s+\[).(\])")

_FIELD_KEY_RE = re.compile(r"[\[(]\s*([^\[\]()]+?)\s*::")
_CLOSING_BRACKETS = {"[": "]", "(": ")", "{": "}"}
_DATE_TOKEN_RE = re.compile(rf"\s*[{''.join(DATE_GLYPHS)}]\ufe0f?\s*\d{{4}}-\d{{2}}-\d{{2}}")
_PRIORITY_RE = re.compile(rf"\s*[{''.join(PRIORITY_GLYPHS)}]\ufe0f?")
_ID_TOKEN_RE = re.compile(r"\s*[🆔⛔]\ufe0f?\s*\S+")
_RECURRENCE_RE = re.compile(rf"\s*🔁\ufe0f?[^#{''.join(_ALL_GLYPHS)}\[]*")
_TAG_RE = re.compile(r"(?:^|\s)#[^\s#]+")
_CONTEXT_RE = re.compile(r"(?:^|\s)@[^\s@]+")
_WHITESPACE_RE = re.compile(r"\s+")


def is_task_line(line: str) -> bool:
    """Return True if ``line`` is a checkbox list item."""
    return TASK_LINE_RE.match(line) is not None


def task_body(line: str) -> str:
    """Return the text after the checkbox, or the stripped line if it is not a task line."""
    match = TASK_LINE_RE.match(line)
    return match.group("body") if match else line.strip()


def set_checkbox(line: str, status: str) -> str:
    """Replace the checkbox marker of a task line; other lines are returned unchanged."""
    return _CHECKBOX_RE.sub(lambda m: f"{m.group(1)}{status}{m.group(2)}", line, count=1)


def _completion_token_end(text: str, start: int) -> int:
    """Return the index just past the completion-action payload starting at ``start``."""
    index = start + len(ON_COMPLETION_GLYPH)
    while index < len(text) and text[index].isspace():
        index += 1

    if index < len(text) and text[index] == "{":
        depth = 0
        for position in range(index, len(text)):
            if text[position] == "{":
                depth += 1
            elif text[position] == "}":
                depth -= 1
                if depth == 0:
                    return position + 1
        return len(text)

    # Short form runs until the next tag, emoji marker or dataview field
    end = len(text)
    for position in range(index, len(text)):
        char = text[position]
        if char in _ALL_GLYPHS:
            end = position
            break
        if char in "#[" and position > index and text[position - 1].isspace():
            end = position
            break
    return end


def _bracket_end(text: str, start: int) -> int | None:
    """Return the index just past the bracket group opened at ``start``.

    Nested ``[]``, ``()`` and ``{}`` groups are balanced and brackets inside
    double-quoted strings are ignored. Returns None if the group never closes.
    """
    expected: list[str] = []
    in_string = False
    position = start
    while position < len(text):
        char = text[position]
        if in_string:
            if char == "\\":
                position += 1
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in _CLOSING_BRACKETS:
            expected.append(_CLOSING_BRACKETS[char])
        elif expected and char == expected[-1]:
            expected.pop()
            if not expected:
                return position + 1
        position += 1
    return None


def strip_inline_fields(text: str, key: str | None = None) -> str:
    """Remove dataview ``[key:: value]`` and ``(key:: value)`` fields.

    A field runs to its own closing bracket, so values holding nested brackets
    (a structured completion action, for one) are removed whole. With ``key``
    only fields of that name are removed, compared case-insensitively.
    """
    result = ""
    copied = 0
    position = 0
    while position < len(text):
        if text[position] in "[(" and (match := _FIELD_KEY_RE.match(text, position)):
            if key is None or match.group(1).lower() == key.lower():
                end = _bracket_end(text, position)
                if end is not None:
                    result = (result + text[copied:position]).rstrip()
                    copied = position = end
                    continue
        position += 1
    return result + text[copied:]


def strip_completion_metadata(text: str) -> str:
    """Remove the ``🏁`` completion action and any ``[onCompletion:: ...]`` field."""
    result = strip_inline_fields(text, key="onCompletion")
    while (start := result.find(ON_COMPLETION_GLYPH)) != -1:
        end = _completion_token_end(result, start)
        result = result[:start].rstrip() + (" " if end < len(result) else "") + result[end:].lstrip()
    return result.rstrip()


def strip_date_annotations(text: str, glyphs: tuple[str, ...] = ("✅", "⏳", "⏰")) -> str:
    """Remove ``<glyph> YYYY-MM-DD`` annotations for the given date glyphs."""
    pattern = re.compile(rf"\s*[{''.join(glyphs)}]\ufe0f?\s*\d{{4}}-\d{{2}}-\d{{2}}")
    return pattern.sub("", text).rstrip()


def extract_core_content(text: str) -> str:
    """Reduce a task line or task content to its description without metadata.

    The checkbox prefix is dropped, so lines that differ only in checkbox state
    reduce to the same core text.
    """
    core = task_body(text)
    core = strip_completion_metadata(core)
    core = strip_inline_fields(core)
    core = _DATE_TOKEN_RE.sub("", core)
    core = _ID_TOKEN_RE.sub("", core)
    core = _RECURRENCE_RE.sub("", core)
    core = _PRIORITY_RE.sub("", core)
    core = _TAG_RE.sub("", core)
    core = _CONTEXT_RE.sub("", core)
    return _WHITESPACE_RE.sub(" ", core).strip()


def today() -> str:
    return datetime.now().strftime(constants.DATE_FORMAT)


def format_epoch_date(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=UTC).strftime(constants.DATE_FORMAT)


def priority_glyph(priority: int | None) -> str | None:
    if priority is None:
        return None
    return _PRIORITY_BY_LEVEL.get(priority)


def duplicate_line(line: str, preserve_metadata: bool = False) -> str:
    """Build the copy of a task line written by the duplicate action."""
    copy = set_checkbox(line, constants.OPEN_STATUS)
    if not preserve_metadata:
        copy = strip_date_annotations(copy)
    return f"{copy} (duplicated {today()})"


def archived_line(line: str, source_path: str) -> str:
    """Build the archive entry for a task line: completed, without its completion action."""
    cleaned = set_checkbox(strip_completion_metadata(line), constants.COMPLETED_STATUS)
    return f"{cleaned} - Completed {today()} (from {source_path})"


# Line-list editing. Documents are split on "\n" and re-joined with "\n" so
# untouched lines (including "\r" endings and indentation) survive unchanged.


def split_lines(content: str) -> list[str]:
    return content.split("\n") if content else []


def join_lines(lines: list[str]) -> str:
    return "\n".join(lines)


def find_heading_index(lines: list[str], section: str, start: int = 0) -> int | None:
    """Return the index of the first heading line containing ``section``."""
    for index in range(start, len(lines)):
        if lines[index].strip().startswith("#") and section in lines[index]:
            return index
    return None


def append_line(lines: list[str], line: str) -> None:
    """Append ``line`` at document end, keeping a trailing newline in place."""
    if lines and lines[-1] == "":
        lines.insert(len(lines) - 1, line)
    else:
        lines.append(line)


def append_section(lines: list[str], section: str, line: str) -> None:
    """Append a new ``## section`` block holding ``line``."""
    block = [f"## {section}", line]
    if lines and lines[-1].strip():
        block.insert(0, "")
    lines.extend(block)


def insert_after_heading(lines: list[str], line: str, section: str | None) -> None:
    """Insert ``line`` directly under the heading for ``section``.

    A missing heading gets a new section appended. With no section the line is
    appended at document end.
    """
    if not section:
        append_line(lines, line)
        return
    heading = find_heading_index(lines, section)
    if heading is None:
        append_section(lines, section, line)
    else:
        lines.insert(heading + 1, line)


def insert_at_section_end(lines: list[str], line: str, section: str) -> None:
    """Insert ``line`` as the last entry of ``section``, before the next heading.

    Trailing blank lines of the section stay below the inserted line.
    """
    heading = find_heading_index(lines, section)
    if heading is None:
        append_section(lines, section, line)
        return

    end = len(lines)
    for index in range(heading + 1, len(lines)):
        if lines[index].strip().startswith("#"):
            end = index
            break

    insert_at = end
    while insert_at > heading + 1 and not lines[insert_at - 1].strip():
        insert_at -= 1
    lines.insert(insert_at, line)