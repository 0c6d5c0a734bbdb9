"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Callable

import pytest

from oncompletion.core.config import Settings
from oncompletion.domain.task import Task
from oncompletion.modules.completion.board_updater import BoardTaskUpdater
from oncompletion.modules.completion.context import ExecutionContext
from oncompletion.modules.completion.dispatcher import ActionDispatcher
from oncompletion.modules.completion.executors import build_executor_table
from tests.unit.mocks import InMemoryDocumentStore, InMemoryTaskStore


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    """Provides a fresh, empty InMemoryDocumentStore for each test."""
    return InMemoryDocumentStore()


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the default archive location and board layout, independent of the environment."""
    return Settings(
        _env_file=None,
        default_archive_file="Archive/Completed Tasks.md",
        default_archive_section="Completed Tasks",
        board_node_spacing=300,
        board_node_width=250,
        board_node_height=60,
    )


@pytest.fixture
def board_updater(document_store: InMemoryDocumentStore, test_settings: Settings) -> BoardTaskUpdater:
    return BoardTaskUpdater(document_store, test_settings)


@pytest.fixture
def make_context(
    document_store: InMemoryDocumentStore,
    task_store: InMemoryTaskStore,
    test_settings: Settings,
    board_updater: BoardTaskUpdater,
) -> Callable[..., ExecutionContext]:
    """Factory building an ExecutionContext around the in-memory stores."""

    def _make(task: Task, with_task_store: bool = True) -> ExecutionContext:
        return ExecutionContext(
            task=task,
            store=document_store,
            settings=test_settings,
            board_updater=board_updater,
            task_store=task_store if with_task_store else None,
        )

    return _make


@pytest.fixture
def dispatcher(
    document_store: InMemoryDocumentStore,
    task_store: InMemoryTaskStore,
    test_settings: Settings,
) -> ActionDispatcher:
    return ActionDispatcher(
        executors=build_executor_table(),
        store=document_store,
        settings=test_settings,
        task_store=task_store,
    )
