"""Unit tests for ActionDispatcher."""

import logging

import pytest

from oncompletion.core.config import Settings, constants
from oncompletion.core.events import EventBus
from oncompletion.domain.action import (
    ActionType,
    DeleteActionConfig,
    ExecutionResult,
    KeepActionConfig,
    MoveActionConfig,
)
from oncompletion.domain.task import Task
from oncompletion.modules.completion import markup
from oncompletion.modules.completion.dispatcher import ActionDispatcher
from oncompletion.modules.completion.executors import ActionExecutor, build_executor_table
from tests.unit.mocks import InMemoryDocumentStore, board_content, make_board_task, make_markdown_task, text_node


LOGGER_NAME = "tests.dispatcher"
BOARD = "Boards/plan.canvas"


async def _explode(context, config) -> ExecutionResult:
    raise RuntimeError("boom")


@pytest.fixture
def logged_dispatcher(document_store: InMemoryDocumentStore, test_settings: Settings) -> ActionDispatcher:
    """Dispatcher writing to a dedicated logger so tests can assert on its records."""
    return ActionDispatcher(
        executors=build_executor_table(),
        store=document_store,
        settings=test_settings,
        logger=logging.getLogger(LOGGER_NAME),
    )


def _records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [record for record in caplog.records if record.name == LOGGER_NAME]


@pytest.mark.unit
class TestExecute:
    """Tests for routing configs to executors."""

    async def test_routes_to_executor(self, dispatcher: ActionDispatcher) -> None:
        result = await dispatcher.execute(make_markdown_task(0, "- [x] a", "a"), KeepActionConfig())

        assert result == ExecutionResult.ok("Task kept in place")

    async def test_missing_executor(self, document_store: InMemoryDocumentStore, test_settings: Settings) -> None:
        dispatcher = ActionDispatcher(executors={}, store=document_store, settings=test_settings)

        result = await dispatcher.execute(make_markdown_task(0, "- [x] a", "a"), KeepActionConfig())

        assert result.success is False
        assert result.error == "No executor found for action type: keep"

    async def test_executor_exception_becomes_result(
        self,
        document_store: InMemoryDocumentStore,
        test_settings: Settings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test an executor that raises never leaks the exception."""
        executor = ActionExecutor(
            action_type=ActionType.KEEP,
            validate_config=lambda config: True,
            execute=_explode,
            describe=lambda config: "explodes",
        )
        dispatcher = ActionDispatcher(
            executors={ActionType.KEEP: executor},
            store=document_store,
            settings=test_settings,
            logger=logging.getLogger(LOGGER_NAME),
        )

        result = await dispatcher.execute(make_markdown_task(0, "- [x] a", "a"), KeepActionConfig())

        assert result.success is False
        assert result.error == "Execution failed: boom"
        assert any(record.exc_info for record in _records(caplog))

    def test_describe(self, dispatcher: ActionDispatcher, document_store: InMemoryDocumentStore) -> None:
        assert dispatcher.describe(DeleteActionConfig()) == "Delete the completed task from the file"

        empty = ActionDispatcher(executors={}, store=document_store, settings=Settings(_env_file=None))
        assert empty.describe(DeleteActionConfig()) == "Unknown action"

    def test_parse(self, dispatcher: ActionDispatcher) -> None:
        assert dispatcher.parse("delete").config == DeleteActionConfig()


@pytest.mark.unit
class TestHandleTaskCompleted:
    """Tests for the event-driven path, which logs instead of returning results."""

    async def test_without_action_does_nothing(
        self,
        logged_dispatcher: ActionDispatcher,
        document_store: InMemoryDocumentStore,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        await logged_dispatcher.handle_task_completed(make_markdown_task(0, "- [x] a", "a"))

        assert document_store.calls == []
        assert _records(caplog) == []

    async def test_invalid_config_logs_warning(
        self, logged_dispatcher: ActionDispatcher, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)

        await logged_dispatcher.handle_task_completed(make_markdown_task(0, "- [x] a", "a", on_completion="explode"))

        [record] = _records(caplog)
        assert record.levelno == logging.WARNING
        assert record.getMessage() == "Invalid onCompletion configuration"
        assert record.task_id == "t1"
        assert record.error == "Unrecognized onCompletion format"
        assert record.raw_value == "explode"

    async def test_success_logs_info(
        self,
        logged_dispatcher: ActionDispatcher,
        document_store: InMemoryDocumentStore,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)
        document_store.documents["Projects/todo.md"] = "- [x] a\n- [ ] b"

        await logged_dispatcher.handle_task_completed(make_markdown_task(0, "- [x] a", "a", on_completion="delete"))

        assert document_store.documents["Projects/todo.md"] == "- [ ] b"
        [record] = _records(caplog)
        assert record.levelno == logging.INFO
        assert record.action_type == "delete"
        assert record.detail == "Task deleted successfully"

    async def test_failure_logs_classified_error(
        self, logged_dispatcher: ActionDispatcher, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)

        await logged_dispatcher.handle_task_completed(make_markdown_task(0, "- [x] a", "a", on_completion="delete"))

        [record] = _records(caplog)
        assert record.levelno == logging.ERROR
        assert record.getMessage() == "onCompletion action failed: File not found: Projects/todo.md"
        assert record.category == "resource_not_found"
        assert record.file_path == "Projects/todo.md"


@pytest.mark.unit
class TestEventSubscription:
    async def test_attach_and_detach(self, dispatcher: ActionDispatcher, document_store: InMemoryDocumentStore) -> None:
        bus = EventBus()
        document_store.documents["Projects/todo.md"] = "- [x] a\n- [ ] b"
        task: Task = make_markdown_task(0, "- [x] a", "a", on_completion="delete")

        dispatcher.attach(bus)
        dispatcher.attach(bus)
        assert bus.subscriber_count(constants.TASK_COMPLETED_EVENT) == 1

        dispatcher.detach()
        await bus.emit(constants.TASK_COMPLETED_EVENT, task=task)

        assert bus.subscriber_count(constants.TASK_COMPLETED_EVENT) == 0
        assert document_store.documents["Projects/todo.md"] == "- [x] a\n- [ ] b"

    async def test_sequential_events_for_one_board_node(
        self, dispatcher: ActionDispatcher, document_store: InMemoryDocumentStore
    ) -> None:
        """Test two completions in the same text node are each applied to the current board."""
        document_store.documents[BOARD] = board_content(
            text_node("node1", "- [x] A 🏁 archive\n- [x] B 🏁 archive")
        )
        first = make_board_task("A", task_id="t1", on_completion="archive")
        second = make_board_task("B", task_id="t2", on_completion="archive")
        bus = EventBus()
        dispatcher.attach(bus)

        await bus.emit(constants.TASK_COMPLETED_EVENT, task=first)
        await bus.emit(constants.TASK_COMPLETED_EVENT, task=second)

        assert document_store.board(BOARD)["nodes"][0]["text"] == ""
        assert document_store.documents["Archive/Completed Tasks.md"] == (
            "# Archive\n\n## Completed Tasks\n"
            f"- [x] A - Completed {markup.today()} (from {BOARD})\n"
            f"- [x] B - Completed {markup.today()} (from {BOARD})\n\n"
        )

    async def test_sequential_events_for_one_markdown_document(
        self, dispatcher: ActionDispatcher, document_store: InMemoryDocumentStore
    ) -> None:
        """Test markdown tasks are addressed by line, so each event carries the line of the current document."""
        document_store.documents["Projects/todo.md"] = "- [x] a 🏁 delete\n- [x] b 🏁 delete\n- [ ] c"
        bus = EventBus()
        dispatcher.attach(bus)

        await bus.emit(
            constants.TASK_COMPLETED_EVENT,
            task=make_markdown_task(0, "- [x] a 🏁 delete", "a", on_completion="delete"),
        )
        # "b" moved up one line when "a" was removed
        await bus.emit(
            constants.TASK_COMPLETED_EVENT,
            task=make_markdown_task(0, "- [x] b 🏁 delete", "b", task_id="t2", on_completion="delete"),
        )

        assert document_store.documents["Projects/todo.md"] == "- [ ] c"


@pytest.mark.unit
class TestBoardLayout:
    """Tests for new board nodes following the dispatcher's settings."""

    @pytest.fixture
    def wide_dispatcher(self, document_store: InMemoryDocumentStore) -> ActionDispatcher:
        layout = Settings(_env_file=None, board_node_spacing=1000, board_node_width=400, board_node_height=90)
        return ActionDispatcher(executors=build_executor_table(), store=document_store, settings=layout)

    async def test_board_to_board_move(
        self, wide_dispatcher: ActionDispatcher, document_store: InMemoryDocumentStore
    ) -> None:
        document_store.documents[BOARD] = board_content(text_node("node1", "- [x] Ship it\n- [ ] Next"))
        document_store.documents["Boards/done.canvas"] = board_content(text_node("d", "Notes"))

        config = MoveActionConfig(target_file="Boards/done.canvas", target_section="Done")
        result = await wide_dispatcher.execute(make_board_task("Ship it"), config)

        assert result.success is True
        node = document_store.board("Boards/done.canvas")["nodes"][1]
        assert node["text"] == "## Done\n- [x] Ship it\n"
        assert (node["x"], node["width"], node["height"]) == (1000, 400, 90)

    async def test_markdown_to_board_move(
        self, wide_dispatcher: ActionDispatcher, document_store: InMemoryDocumentStore
    ) -> None:
        document_store.documents["Projects/todo.md"] = "- [x] Ship it"
        document_store.documents["Boards/done.canvas"] = board_content(text_node("a", "A"), text_node("b", "B"))

        config = MoveActionConfig(target_file="Boards/done.canvas", target_section="Done")
        result = await wide_dispatcher.execute(make_markdown_task(0, "- [x] Ship it", "Ship it"), config)

        assert result.success is True
        assert document_store.board("Boards/done.canvas")["nodes"][2]["x"] == 2000
