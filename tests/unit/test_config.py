"""Unit tests for configuration."""

from pathlib import Path

import pytest

from oncompletion.core.config import Settings, constants


@pytest.mark.unit
class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ONCOMPLETION_DEFAULT_ARCHIVE_FILE", raising=False)
        monkeypatch.delenv("ONCOMPLETION_BOARD_NODE_SPACING", raising=False)

        settings = Settings(_env_file=None)

        assert settings.default_archive_file == "Archive/Completed Tasks.md"
        assert settings.default_archive_section == "Completed Tasks"
        assert settings.board_node_spacing == 300
        assert (settings.board_node_width, settings.board_node_height) == (250, 60)

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("ONCOMPLETION_LIBRARY_PATH", str(tmp_path))
        monkeypatch.setenv("ONCOMPLETION_DEFAULT_ARCHIVE_SECTION", "Done")

        settings = Settings(_env_file=None)

        assert settings.library_path == tmp_path
        assert settings.default_archive_section == "Done"


@pytest.mark.unit
def test_constants() -> None:
    assert constants.BOARD_EXTENSION == ".canvas"
    assert constants.TASK_COMPLETED_EVENT == "task-completed"
    assert constants.DATE_FORMAT == "%Y-%m-%d"
