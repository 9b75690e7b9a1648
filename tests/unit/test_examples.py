"""Tests for the example applications under examples/."""

from pathlib import Path

import orjson
import pytest

from examples import counter, shopping_list
from ministate.runtime import EXIT_FAILURE, EXIT_OK


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def no_log_reconfiguration(monkeypatch):
    monkeypatch.setattr("ministate.runtime.runner.configure_logging", lambda **kwargs: None)


def _saved(path: Path):
    return orjson.loads(path.read_bytes())


class TestCounterExample:
    def test_increments_by_default_and_persists(self, tmp_path: Path, capsys):
        for _ in range(3):
            assert counter.main(["--resources-path", str(tmp_path)]) == EXIT_OK

        assert _saved(tmp_path / "Counter.json") == [{"value": 3}]
        assert capsys.readouterr().out.splitlines()[-1] == "Counter: 3"

    def test_decrement_and_reset(self, tmp_path: Path, capsys):
        counter.main(["--resources-path", str(tmp_path), "decrement"])
        assert _saved(tmp_path / "Counter.json") == [{"value": -1}]

        counter.main(["--resources-path", str(tmp_path), "reset"])
        assert _saved(tmp_path / "Counter.json") == [{"value": 0}]

    def test_show_leaves_value_unchanged(self, tmp_path: Path, capsys):
        counter.main(["--resources-path", str(tmp_path)])
        counter.main(["--resources-path", str(tmp_path), "show"])

        assert capsys.readouterr().out.splitlines() == ["Counter: 1", "Counter: 1"]

    def test_unknown_command_fails(self, tmp_path: Path):
        assert counter.main(["--resources-path", str(tmp_path), "double"]) == EXIT_FAILURE


class TestShoppingListExample:
    def test_add_done_remove(self, tmp_path: Path, capsys):
        base = ["--resources-path", str(tmp_path)]

        assert shopping_list.main([*base, "add", "milk", "bread, rye"]) == EXIT_OK
        assert shopping_list.main([*base, "done", "2"]) == EXIT_OK
        assert shopping_list.main([*base, "remove", "1"]) == EXIT_OK

        assert _saved(tmp_path / "ShoppingList.json") == [{"id": 2, "name": "bread, rye", "done": True}]
        assert capsys.readouterr().out.splitlines()[-1] == "2. [x] bread, rye"

    def test_export_and_merge_import(self, tmp_path: Path):
        base = ["--resources-path", str(tmp_path)]
        shopping_list.main([*base, "add", "milk", "eggs"])
        shopping_list.main([*base, "export", "list.csv"])

        (tmp_path / "list.csv").write_text("id,name,done\n2,eggs,true\n3,jam,false\n", encoding="utf-8")
        assert shopping_list.main([*base, "import", "list.csv"]) == EXIT_OK

        assert _saved(tmp_path / "ShoppingList.json") == [
            {"id": 1, "name": "milk", "done": False},
            {"id": 2, "name": "eggs", "done": True},
            {"id": 3, "name": "jam", "done": False},
        ]

    def test_export_writes_csv(self, tmp_path: Path):
        base = ["--resources-path", str(tmp_path)]
        shopping_list.main([*base, "add", "milk"])

        assert shopping_list.main([*base, "export", "list.csv"]) == EXIT_OK
        assert (tmp_path / "list.csv").read_text(encoding="utf-8") == "id,name,done\n1,milk,false\n"

    @pytest.mark.parametrize("args", [["remove", "9"], ["done", "x"], ["fly"], []])
    def test_bad_commands_fail_without_touching_data(self, tmp_path: Path, args):
        base = ["--resources-path", str(tmp_path)]
        shopping_list.main([*base, "add", "milk"])

        assert shopping_list.main([*base, *args]) == EXIT_FAILURE
        assert _saved(tmp_path / "ShoppingList.json") == [{"id": 1, "name": "milk", "done": False}]
