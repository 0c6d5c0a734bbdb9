"""Unit tests for board section management."""

import json

import pytest

from oncompletion.core.config import Settings
from oncompletion.core.errors import BoardFormatError, BoardNotFoundError, TextNodeNotFoundError
from oncompletion.domain.board import BoardDocument, BoardNode
from oncompletion.modules.completion import board_sections
from tests.unit.mocks import InMemoryDocumentStore, board_content, make_board_task, text_node


BOARD = "Boards/plan.canvas"


@pytest.mark.unit
class TestFindOrCreateTextNode:
    """Tests for picking the node that receives a task line."""

    async def test_board_must_exist(self, document_store: InMemoryDocumentStore) -> None:
        with pytest.raises(BoardNotFoundError, match=f"Canvas file not found: {BOARD}"):
            await board_sections.find_or_create_text_node(document_store, BOARD)

    async def test_invalid_json(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = "{not json"

        with pytest.raises(BoardFormatError, match="Invalid Canvas JSON"):
            await board_sections.find_or_create_text_node(document_store, BOARD)

    async def test_explicit_node_id(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = board_content(text_node("a", "A"), text_node("b", "B"))

        target = await board_sections.find_or_create_text_node(document_store, BOARD, node_id="b")

        assert target.node.id == "b"

    async def test_explicit_node_id_missing(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = board_content(text_node("a", "A"))

        with pytest.raises(TextNodeNotFoundError, match="Text node not found: zzz"):
            await board_sections.find_or_create_text_node(document_store, BOARD, node_id="zzz")

    async def test_section_found_by_heading(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = board_content(
            text_node("a", "## Inbox\n- [ ] x"), text_node("b", "## Done\n- [x] y")
        )

        target = await board_sections.find_or_create_text_node(document_store, BOARD, section_name="Done")

        assert target.node.id == "b"

    async def test_missing_section_creates_node_to_the_right(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = board_content(text_node("a", "A"), text_node("b", "B"))

        target = await board_sections.find_or_create_text_node(document_store, BOARD, section_name="Done")

        assert target.node.text == "## Done\n"
        assert (target.node.x, target.node.y) == (600, 0)
        assert (target.node.width, target.node.height) == (250, 60)
        assert len(target.node.id) == 16
        assert target.board.nodes[-1] is target.node

    async def test_new_node_follows_layout_settings(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = board_content(text_node("a", "A"), text_node("b", "B"))
        layout = Settings(_env_file=None, board_node_spacing=1000, board_node_width=400, board_node_height=90)

        target = await board_sections.find_or_create_text_node(
            document_store, BOARD, section_name="Done", layout=layout
        )

        assert (target.node.x, target.node.width, target.node.height) == (2000, 400, 90)

    async def test_first_text_node_without_hints(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = board_content(
            {"id": "g", "type": "group", "x": 0, "y": 0, "width": 10, "height": 10}, text_node("a", "A")
        )

        target = await board_sections.find_or_create_text_node(document_store, BOARD)

        assert target.node.id == "a"

    async def test_empty_board_gets_node_at_origin(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = board_content()

        target = await board_sections.find_or_create_text_node(document_store, BOARD)

        assert target.node.text == ""
        assert (target.node.x, target.node.y) == (0, 0)


@pytest.mark.unit
class TestInsertTaskIntoSection:
    """Tests for inserting a line into a node's text."""

    def test_after_heading_and_blank_line(self) -> None:
        node = BoardNode(id="n", text="## Done\n\n- [x] old")

        board_sections.insert_task_into_section(node, "- [x] new", "Done")

        assert node.text == "## Done\n\n- [x] new\n- [x] old"

    def test_directly_after_heading(self) -> None:
        node = BoardNode(id="n", text="## Done\n- [x] old")

        board_sections.insert_task_into_section(node, "- [x] new", "Done")

        assert node.text == "## Done\n- [x] new\n- [x] old"

    def test_fresh_section_node(self) -> None:
        node = BoardNode(id="n", text="## Done\n")

        board_sections.insert_task_into_section(node, "- [x] new", "Done")

        assert node.text == "## Done\n- [x] new\n"

    def test_missing_heading_appends_section(self) -> None:
        node = BoardNode(id="n", text="- [ ] a\n")

        board_sections.insert_task_into_section(node, "- [x] new", "Done")

        assert node.text == "- [ ] a\n\n## Done\n- [x] new"

    def test_missing_heading_in_empty_node(self) -> None:
        node = BoardNode(id="n", text="")

        board_sections.insert_task_into_section(node, "- [x] new", "Done")

        assert node.text == "## Done\n- [x] new"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("", "- [x] new"),
            ("   ", "- [x] new"),
            ("- [ ] a", "- [ ] a\n- [x] new"),
            ("- [ ] a\n", "- [ ] a\n- [x] new"),
        ],
    )
    def test_without_section(self, text: str, expected: str) -> None:
        node = BoardNode(id="n", text=text)

        board_sections.insert_task_into_section(node, "- [x] new")

        assert node.text == expected


@pytest.mark.unit
class TestSaveAndFormat:
    async def test_save_board_writes_two_space_json(self, document_store: InMemoryDocumentStore) -> None:
        document_store.documents[BOARD] = board_content(text_node("a", "A"))
        board = BoardDocument.loads(document_store.documents[BOARD])
        board.nodes[0].text = "Änderung"

        content = await board_sections.save_board(document_store, BOARD, board)

        assert document_store.documents[BOARD] == content
        assert '\n  "nodes": [' in content
        assert "Änderung" in content
        assert json.loads(content)["nodes"][0]["x"] == 0

    async def test_save_board_requires_existing_board(self, document_store: InMemoryDocumentStore) -> None:
        with pytest.raises(BoardNotFoundError):
            await board_sections.save_board(document_store, BOARD, BoardDocument())

    def test_format_task_plain(self) -> None:
        task = make_board_task("Call Bob", original_markdown="- [x] Call Bob 📅 2024-01-01")

        assert board_sections.format_task_for_board(task) == "- [x] Call Bob"

    def test_format_task_preserving_original(self) -> None:
        task = make_board_task("Call Bob", original_markdown="- [x] Call Bob 📅 2024-01-01")

        assert board_sections.format_task_for_board(task, preserve_metadata=True) == "- [x] Call Bob 📅 2024-01-01"

    def test_format_task_rebuilds_metadata(self) -> None:
        task = make_board_task("Call Bob", due_date=1704067200000, priority=4, project="home", context="phone")

        assert board_sections.format_task_for_board(task, preserve_metadata=True) == (
            "- [x] Call Bob 📅 2024-01-01 ⏫ #project/home @phone"
        )
