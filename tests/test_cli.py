"""Tests for the command line interface."""

from pathlib import Path

import pytest

from flowboard.__main__ import main, parse_args
from flowboard.repositories import FilesystemDocumentStore
from flowboard.services import BoardStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Keep developer environment settings out of the tests."""
    for name in ("DATA_DIR", "BUSINESS_ID", "WEBHOOK_URL", "VERBOSE", "LOG_FILE"):
        monkeypatch.delenv(f"FLOWBOARD_{name}", raising=False)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


def run(data_dir: Path, *args: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(["--data-dir", str(data_dir), "--business", "biz", *args])
    return exc_info.value.code


def load_store(data_dir: Path) -> BoardStore:
    return BoardStore(FilesystemDocumentStore(data_dir), "biz")


class TestParseArgs:
    """Tests for argument parsing."""

    def test_show_with_filter(self):
        args = parse_args(["show", "b1", "--filter", "priority:high"])
        assert args.command == "show"
        assert args.board_id == "b1"
        assert args.expression == "priority:high"

    def test_verbosity_counts(self):
        assert parse_args(["-vv", "boards"]).verbose == 2

    def test_invalid_status_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["status", "b1", "t1", "archived"])


class TestCommands:
    """Tests for commands against a filesystem store."""

    def test_create_and_list_boards(self, data_dir: Path, capsys):
        assert run(data_dir, "create-board", "Sprint") == 0
        assert "Created board Sprint" in capsys.readouterr().out

        assert run(data_dir, "boards") == 0
        assert "Sprint" in capsys.readouterr().out

        board = load_store(data_dir).list_boards()[0]
        assert [c.title for c in board.columns] == ["To Do", "In Progress", "Done"]

    def test_no_boards(self, data_dir: Path, capsys):
        assert run(data_dir, "boards") == 0
        assert "No boards yet" in capsys.readouterr().out

    def test_add_move_and_show(self, data_dir: Path, capsys):
        run(data_dir, "create-board", "Sprint", "--column", "Todo", "--column", "Done")
        board = load_store(data_dir).list_boards()[0]
        todo, done = board.column_ids

        assert run(data_dir, "add-task", board.id, todo, "Write docs", "--priority", "high") == 0
        task = load_store(data_dir).list_tasks(board.id)[0]

        assert run(data_dir, "move", board.id, task.id, done) == 0
        assert load_store(data_dir).get_task(task.id).column_id == done

        assert run(data_dir, "status", board.id, task.id, "completed") == 0
        assert load_store(data_dir).get_task(task.id).status.value == "completed"

        capsys.readouterr()
        assert run(data_dir, "show", board.id, "--filter", "priority:high") == 0
        out = capsys.readouterr().out
        assert "Write docs" in out
        assert "completed/high" in out

    def test_add_task_unknown_column(self, data_dir: Path, capsys):
        run(data_dir, "create-board", "Sprint")
        board = load_store(data_dir).list_boards()[0]
        capsys.readouterr()

        assert run(data_dir, "add-task", board.id, "nowhere", "Lost") == 1
        assert "Column not found" in capsys.readouterr().out

    def test_show_unknown_board(self, data_dir: Path, capsys):
        assert run(data_dir, "show", "missing") == 1
        assert "Board not found" in capsys.readouterr().out

    def test_analytics(self, data_dir: Path, capsys):
        run(data_dir, "create-board", "Sprint")
        board = load_store(data_dir).list_boards()[0]
        run(data_dir, "add-task", board.id, board.column_ids[0], "A")
        capsys.readouterr()

        assert run(data_dir, "analytics", board.id) == 0
        out = capsys.readouterr().out
        assert "Completion: 0% (0/1)" in out
        assert "medium=1" in out

    def test_due_soon_without_rules(self, data_dir: Path, capsys):
        run(data_dir, "create-board", "Sprint")
        board = load_store(data_dir).list_boards()[0]
        capsys.readouterr()

        assert run(data_dir, "due-soon", board.id) == 0
        assert "No automations applied" in capsys.readouterr().out

    def test_missing_business(self, data_dir: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--data-dir", str(data_dir), "boards"])
        assert exc_info.value.code == 1
        assert "No business selected" in capsys.readouterr().out

    def test_corrupt_store(self, data_dir: Path, capsys):
        data_dir.mkdir()
        (data_dir / FilesystemDocumentStore.STORE_YAML).write_text("[not, a, mapping]\n")
        assert run(data_dir, "boards") == 1
        assert "Unexpected content" in capsys.readouterr().out
