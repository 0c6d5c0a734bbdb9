"""Board section management: find or create text nodes and insert task lines."""

import logging
import uuid
from dataclasses import dataclass

from oncompletion.core.config import Settings, settings as default_settings
from oncompletion.core.document_store import DocumentStore
from oncompletion.core.errors import BoardNotFoundError, TextNodeNotFoundError
from oncompletion.domain.board import BoardDocument, BoardNode
from oncompletion.domain.task import Task
from oncompletion.modules.completion import markup


logger = logging.getLogger(__name__)


@dataclass
class TextNodeTarget:
    """A text node together with the board document that owns it."""

    node: BoardNode
    board: BoardDocument


def _new_node_id() -> str:
    return uuid.uuid4().hex[:16]


def _node_has_section(node: BoardNode, section_name: str) -> bool:
    return markup.find_heading_index(markup.split_lines(node.text or ""), section_name) is not None


def _create_text_node(board: BoardDocument, text: str, layout: Settings) -> BoardNode:
    node = BoardNode(
        id=_new_node_id(),
        type="text",
        x=len(board.nodes) * layout.board_node_spacing,
        y=0,
        width=layout.board_node_width,
        height=layout.board_node_height,
        text=text,
    )
    board.nodes.append(node)
    return node


async def load_board(store: DocumentStore, path: str) -> BoardDocument:
    """Load a board document.

    Raises:
        BoardNotFoundError: If the board does not exist
        BoardFormatError: If the board is not valid board JSON
    """
    if not await store.exists(path):
        raise BoardNotFoundError(path)
    return BoardDocument.loads(await store.read(path))


async def find_or_create_text_node(
    store: DocumentStore,
    path: str,
    node_id: str | None = None,
    section_name: str | None = None,
    layout: Settings | None = None,
) -> TextNodeTarget:
    """Find the text node that should receive a task line, creating one if needed.

    An explicit ``node_id`` must exist. Otherwise the first text node with a
    heading containing ``section_name`` is used; when none exists a new node
    holding that heading is placed to the right of the existing nodes, sized and
    spaced by ``layout`` (the global settings when omitted). With neither
    argument the first text node is used, or an empty node is created.

    Raises:
        BoardNotFoundError: If the board does not exist
        BoardFormatError: If the board is not valid board JSON
        TextNodeNotFoundError: If ``node_id`` does not name a text node
    """
    board = await load_board(store, path)
    node = resolve_text_node(board, node_id=node_id, section_name=section_name, layout=layout)
    return TextNodeTarget(node=node, board=board)


def resolve_text_node(
    board: BoardDocument,
    node_id: str | None = None,
    section_name: str | None = None,
    layout: Settings | None = None,
) -> BoardNode:
    """Pick (or create) the receiving text node inside an already loaded board.

    Raises:
        TextNodeNotFoundError: If ``node_id`` does not name a text node
    """
    if node_id:
        node = board.get_node(node_id)
        if node is None or not node.is_text:
            raise TextNodeNotFoundError(f"Text node not found: {node_id}")
        return node

    if section_name:
        for node in board.text_nodes():
            if _node_has_section(node, section_name):
                return node
        logger.info("Creating board node for section %s", section_name)
        return _create_text_node(board, f"## {section_name}\n", layout or default_settings)

    text_nodes = board.text_nodes()
    if text_nodes:
        return text_nodes[0]
    return _create_text_node(board, "", layout or default_settings)


def insert_task_into_section(node: BoardNode, task_line: str, section_name: str | None = None) -> None:
    """Insert ``task_line`` into a text node, under ``section_name`` when given."""
    text = node.text or ""

    if not section_name:
        if not text.strip():
            node.text = task_line
        elif text.endswith("\n"):
            node.text = f"{text}{task_line}"
        else:
            node.text = f"{text}\n{task_line}"
        return

    lines = markup.split_lines(text)
    heading = markup.find_heading_index(lines, section_name)
    if heading is None:
        block = f"## {section_name}\n{task_line}"
        node.text = f"{text.rstrip()}\n\n{block}" if text.strip() else block
        return

    insert_at = heading + 1
    if insert_at < len(lines) and not lines[insert_at].strip() and insert_at + 1 < len(lines):
        insert_at += 1
    lines.insert(insert_at, task_line)
    node.text = markup.join_lines(lines)


async def save_board(store: DocumentStore, path: str, board: BoardDocument) -> str:
    """Write a board document and return the serialized content.

    Raises:
        BoardNotFoundError: If the board does not exist
    """
    if not await store.exists(path):
        raise BoardNotFoundError(path)
    content = board.dumps()
    await store.write(path, content)
    return content


def format_task_for_board(task: Task, preserve_metadata: bool = False) -> str:
    """Render a task as a board line.

    With ``preserve_metadata`` the original line is kept verbatim; tasks without
    one get their due date, priority, project and context appended.
    """
    if preserve_metadata and task.original_markdown:
        return task.original_markdown

    marker = "x" if task.completed else " "
    parts = [f"- [{marker}] {task.content}"]
    if preserve_metadata:
        metadata = task.metadata
        if metadata.due_date is not None:
            parts.append(f"📅 {markup.format_epoch_date(metadata.due_date)}")
        if glyph := markup.priority_glyph(metadata.priority):
            parts.append(glyph)
        if metadata.project:
            parts.append(f"#project/{metadata.project}")
        if metadata.context:
            parts.append(f"@{metadata.context}")
    return " ".join(parts)
