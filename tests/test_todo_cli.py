"""End-to-end tests for the todo CLI (run as a subprocess)."""

import json
import os
import subprocess
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / 'scripts' / 'todo.py'
TODAY = date.today().strftime('%Y/%m/%d')


def _record(description, priority=None, done_date=None, **extra):
    record = {
        "priority": priority,
        "description": description,
        "context": None,
        "project": None,
        "tags": [],
        "start_date": "2025/11/29",
        "done_date": done_date,
    }
    record.update(extra)
    return record


@pytest.fixture
def env(tmp_path):
    env = os.environ.copy()
    env["TODO_CLI_FILE"] = str(tmp_path / "todo.json")
    env.pop("TODO_CLI_FORMAT", None)
    env["NO_COLOR"] = "1"
    return env


@pytest.fixture
def todo_file(tmp_path):
    return tmp_path / "todo.json"


def _run(args, env, cwd, stdin=""):
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        input=stdin,
        text=True,
        capture_output=True,
        env=env,
        cwd=cwd,
        check=False,
    )


def _write(todo_file, records):
    todo_file.write_text(json.dumps(records, indent=2))


def _read(todo_file):
    return json.loads(todo_file.read_text())


def test_add_creates_file_after_confirmation(env, todo_file, tmp_path):
    r = _run(["add", "Buy milk"], env, tmp_path, stdin="Y\n")
    assert r.returncode == 0
    assert "Added todo item" in r.stdout
    [record] = _read(todo_file)
    assert record["description"] == "Buy milk"
    assert record["start_date"] == TODAY
    assert record["done_date"] is None


def test_add_declined_creation_exits_cleanly(env, todo_file, tmp_path):
    r = _run(["add", "Buy milk"], env, tmp_path, stdin="n\n")
    assert r.returncode == 0
    assert "File not created. Exiting." in r.stdout
    assert not todo_file.exists()


def test_add_with_metadata(env, todo_file, tmp_path):
    _write(todo_file, [])
    r = _run(["add", "Buy milk @shopping P:Personal T:urgent Due:2025-12-25"], env, tmp_path)
    assert r.returncode == 0
    [record] = _read(todo_file)
    assert record["description"] == "Buy milk"
    assert record["context"] == "shopping"
    assert record["project"] == "Personal"
    assert record["tags"] == ["urgent"]
    assert record["due_date"] == "2025/12/25"


def test_add_unquoted_words(env, todo_file, tmp_path):
    _write(todo_file, [])
    r = _run(["add", "Call", "mom", "@home"], env, tmp_path)
    assert r.returncode == 0
    [record] = _read(todo_file)
    assert record["description"] == "Call mom"
    assert record["context"] == "home"


def test_add_to_text_store_appends_line(env, tmp_path):
    store = tmp_path / "todo.txt"
    store.write_text("(A) Existing S:2025/11/29\n")
    env["TODO_CLI_FILE"] = str(store)
    r = _run(["add", "New task @home"], env, tmp_path)
    assert r.returncode == 0
    assert store.read_text().splitlines() == [
        "(A) Existing S:2025/11/29",
        f"New task @home S:{TODAY}",
    ]


def test_list_empty(env, todo_file, tmp_path):
    _write(todo_file, [])
    r = _run(["list"], env, tmp_path)
    assert r.returncode == 0
    assert "No todo items found" in r.stdout


def test_list_hides_done_unless_all(env, todo_file, tmp_path):
    _write(todo_file, [
        _record("Open task"),
        _record("Finished task", done_date="2025/11/30"),
    ])
    r = _run(["list"], env, tmp_path)
    assert "Open task" in r.stdout
    assert "Finished task" not in r.stdout

    r = _run(["list", "--all"], env, tmp_path)
    assert "Open task" in r.stdout
    assert "Finished task" in r.stdout
    assert "D:2025/11/30" in r.stdout


def test_list_shows_positions_and_order(env, todo_file, tmp_path):
    _write(todo_file, [
        _record("Low", priority="C"),
        _record("High", priority="A"),
        _record("Mid", priority="B"),
        _record("Dated", due_date="2099/01/01"),
    ])
    r = _run(["list", "--pr"], env, tmp_path)
    assert r.returncode == 0
    lines = r.stdout.strip().splitlines()
    assert lines == [
        "4 S:2025/11/29 Due:2099/01/01 Dated",
        "2 (A) S:2025/11/29 High",
        "3 (B) S:2025/11/29 Mid",
        "1 (C) S:2025/11/29 Low",
    ]


def test_list_age_filter(env, todo_file, tmp_path):
    recent = date.today().strftime('%Y/%m/%d')
    old = (date.today() - timedelta(days=30)).strftime('%Y/%m/%d')
    _write(todo_file, [
        _record("Recent", start_date=recent),
        _record("Old", start_date=old),
    ])
    r = _run(["list", "+1w"], env, tmp_path)
    assert "Old" in r.stdout
    assert "Recent" not in r.stdout


def test_list_invalid_age_filter(env, todo_file, tmp_path):
    _write(todo_file, [_record("Task")])
    r = _run(["list", "+3x"], env, tmp_path)
    assert r.returncode == 0
    assert "Invalid age filter format" in r.stderr
    assert "d = days" in r.stderr
    assert "Task" not in r.stdout


def test_list_hide_waiting(env, todo_file, tmp_path):
    _write(todo_file, [_record("Waiting", context="WF"), _record("Active", context="work")])
    r = _run(["list", "--hide-waiting"], env, tmp_path)
    assert "Active" in r.stdout
    assert "Waiting" not in r.stdout


def test_done_confirmed(env, todo_file, tmp_path):
    _write(todo_file, [_record("Buy milk")])
    r = _run(["done", "1"], env, tmp_path, stdin="y\n")
    assert r.returncode == 0
    assert "Mark this item as done?" in r.stdout
    assert "Todo item 1 marked as done" in r.stdout
    assert _read(todo_file)[0]["done_date"] == TODAY


def test_done_cancelled(env, todo_file, tmp_path):
    _write(todo_file, [_record("Buy milk")])
    r = _run(["done", "1"], env, tmp_path, stdin="\n")
    assert "Cancelled" in r.stdout
    assert _read(todo_file)[0]["done_date"] is None


def test_done_already_done(env, todo_file, tmp_path):
    _write(todo_file, [_record("Buy milk", done_date="2025/11/30")])
    before = todo_file.read_text()
    r = _run(["done", "1"], env, tmp_path)
    assert r.returncode == 0
    assert "already marked as done" in r.stderr
    assert todo_file.read_text() == before


@pytest.mark.parametrize('number', ["0", "5"])
def test_done_invalid_number(env, todo_file, tmp_path, number):
    _write(todo_file, [_record("Buy milk")])
    r = _run(["done", number], env, tmp_path)
    assert r.returncode == 0
    assert f"Todo item {number} does not exist" in r.stderr


def test_pr_set_change_and_clear(env, todo_file, tmp_path):
    _write(todo_file, [_record("Buy milk")])

    r = _run(["pr", "a", "1"], env, tmp_path)
    assert "Set priority for todo item 1" in r.stdout
    assert _read(todo_file)[0]["priority"] == "A"

    _run(["pr", "B", "1"], env, tmp_path)
    assert _read(todo_file)[0]["priority"] == "B"

    r = _run(["pr", "CLEAR", "1"], env, tmp_path)
    assert "Cleared priority for todo item 1" in r.stdout
    assert _read(todo_file)[0]["priority"] is None


def test_pr_invalid_values(env, todo_file, tmp_path):
    _write(todo_file, [_record("Buy milk")])
    r = _run(["pr", "AB", "1"], env, tmp_path)
    assert "Priority must be a single character" in r.stderr
    r = _run(["pr", "1", "1"], env, tmp_path)
    assert "Priority must be a letter" in r.stderr
    r = _run(["pr", "A", "9"], env, tmp_path)
    assert "Todo item 9 does not exist" in r.stderr
    assert _read(todo_file)[0]["priority"] is None


def test_pr_on_done_item_is_allowed(env, todo_file, tmp_path):
    _write(todo_file, [_record("Buy milk", done_date="2025/11/30")])
    r = _run(["pr", "A", "1"], env, tmp_path)
    assert r.returncode == 0
    assert _read(todo_file)[0]["priority"] == "A"


def test_edit_fields(env, todo_file, tmp_path):
    _write(todo_file, [_record("Buy milk", priority="B", context="shop", tags=["x"])])
    answers = "\n".join([
        "Buy oat milk",   # description
        "zz",             # invalid priority -> kept
        "clear",          # context
        "Groceries",      # project
        "a, b ,,c",       # tags
        "2025-12-24",     # due date
    ]) + "\n"
    r = _run(["edit", "1"], env, tmp_path, stdin=answers)
    assert r.returncode == 0
    assert "Warning: Invalid priority 'zz'" in r.stderr
    assert "Todo item 1 updated successfully" in r.stdout
    record = _read(todo_file)[0]
    assert record["description"] == "Buy oat milk"
    assert record["priority"] == "B"
    assert record["context"] is None
    assert record["project"] == "Groceries"
    assert record["tags"] == ["a", "b", "c"]
    assert record["due_date"] == "2025/12/24"


def test_edit_keeps_values_on_enter_and_bad_due(env, todo_file, tmp_path):
    _write(todo_file, [_record("Buy milk", priority="B", due_date="2025/12/01")])
    r = _run(["edit", "1"], env, tmp_path, stdin="\n\n\n\n\nnext week\n")
    assert "Warning: Invalid due date format 'next week'" in r.stderr
    record = _read(todo_file)[0]
    assert record["description"] == "Buy milk"
    assert record["priority"] == "B"
    assert record["due_date"] == "2025/12/01"


def test_projects(env, todo_file, tmp_path):
    _write(todo_file, [
        _record("a", project="Work"),
        _record("b", project="Home"),
        _record("c", project="Work", done_date="2025/11/30"),
        _record("d"),
    ])
    r = _run(["projects"], env, tmp_path)
    assert r.stdout.splitlines() == ["Projects:", "  P:Home", "  P:Work"]


def test_projects_empty(env, todo_file, tmp_path):
    _write(todo_file, [_record("a")])
    r = _run(["projects"], env, tmp_path)
    assert "No projects found" in r.stdout


def test_convert(env, todo_file, tmp_path):
    source = tmp_path / "todo.txt"
    source.write_text(
        "(A) Buy milk @shopping P:Personal T:urgent S:2025/11/29\n"
        "\n"
        "Done thing S:2025/11/28 D:2025/11/30\n"
    )
    out = tmp_path / "out.json"
    r = _run(["convert", str(source), "-o", str(out)], env, tmp_path)
    assert r.returncode == 0
    assert f"Converted 2 todo items from '{source}' to '{out}'" in r.stdout
    records = _read(out)
    assert records[0]["priority"] == "A"
    assert records[0]["tags"] == ["urgent"]
    assert records[1]["done_date"] == "2025/11/30"


def test_convert_defaults_to_store_path(env, todo_file, tmp_path):
    source = tmp_path / "todo.txt"
    source.write_text("Task S:2025/11/29\n")
    r = _run(["convert", str(source)], env, tmp_path)
    assert r.returncode == 0
    assert _read(todo_file)[0]["description"] == "Task"


def test_convert_missing_input(env, tmp_path):
    r = _run(["convert", str(tmp_path / "missing.txt")], env, tmp_path)
    assert r.returncode == 1
    assert "does not exist" in r.stderr


def test_convert_overwrite_cancelled_and_confirmed(env, todo_file, tmp_path):
    source = tmp_path / "todo.txt"
    source.write_text("New S:2025/11/29\n")
    todo_file.write_text("original")

    r = _run(["convert", str(source)], env, tmp_path, stdin="n\n")
    assert "Cancelled" in r.stdout
    assert todo_file.read_text() == "original"

    r = _run(["convert", str(source)], env, tmp_path, stdin="Y\n")
    assert r.returncode == 0
    assert _read(todo_file)[0]["description"] == "New"


def test_unreadable_store_is_io_error(env, tmp_path):
    store = tmp_path / "store-dir.json"
    store.mkdir()
    env["TODO_CLI_FILE"] = str(store)
    r = _run(["list"], env, tmp_path)
    assert r.returncode == 1
    assert r.stderr.startswith("Error:")


@pytest.fixture
def text_file(env, tmp_path):
    store = tmp_path / "todo.txt"
    env["TODO_CLI_FILE"] = str(store)
    return store


def test_text_store_edit_rejects_spaced_metadata(env, text_file, tmp_path):
    text_file.write_text("Call mom @home S:2025/01/01\n")
    answers = "\n".join([
        "",               # description
        "",               # priority
        "at home",        # context
        "Big Project",    # project
        "a, two words",   # tags
        "",               # due date
    ]) + "\n"
    r = _run(["edit", "1"], env, tmp_path, stdin=answers)
    assert r.returncode == 0
    assert "Warning: Invalid context 'at home'" in r.stderr
    assert "Warning: Invalid project 'Big Project'" in r.stderr
    assert "Warning: Invalid tags 'a, two words'" in r.stderr
    assert text_file.read_text() == "Call mom @home S:2025/01/01\n"

    r = _run(["list"], env, tmp_path)
    assert r.stdout.strip() == "1 S:2025/01/01 Call mom @home"


def test_text_store_edit_round_trips_single_word_values(env, text_file, tmp_path):
    text_file.write_text("Call mom S:2025/01/01\n")
    answers = "\n".join(["Call dad", "b", "phone", "Family", "x, y", ""]) + "\n"
    r = _run(["edit", "1"], env, tmp_path, stdin=answers)
    assert r.returncode == 0
    assert r.stderr == ""
    r = _run(["list"], env, tmp_path)
    assert r.stdout.strip() == "1 (B) S:2025/01/01 Call dad @phone P:Family T:x T:y"


def test_text_store_edit_rejects_description_with_markers(env, text_file, tmp_path):
    text_file.write_text("Call mom S:2025/01/01\n")
    r = _run(["edit", "1"], env, tmp_path, stdin="Call @mom\n\n\n\n\n\n")
    assert "Warning: Description 'Call @mom' contains metadata markers" in r.stderr
    assert text_file.read_text() == "Call mom S:2025/01/01\n"


def test_json_store_edit_accepts_spaced_metadata(env, todo_file, tmp_path):
    _write(todo_file, [_record("Call mom")])
    r = _run(["edit", "1"], env, tmp_path, stdin="\n\nat home\nBig Project\n\n\n")
    assert r.stderr == ""
    record = _read(todo_file)[0]
    assert record["context"] == "at home"
    assert record["project"] == "Big Project"


def test_text_store_add_parenthesized_description(env, text_file, tmp_path):
    text_file.write_text("")
    r = _run(["add", "(B) Buy milk"], env, tmp_path)
    assert r.returncode == 0
    r = _run(["list"], env, tmp_path)
    assert r.stdout.strip() == f"1 S:{TODAY} (B) Buy milk"


def test_text_store_add_rejects_date_markers(env, text_file, tmp_path):
    text_file.write_text("")
    r = _run(["add", "Meet at S:noon"], env, tmp_path)
    assert r.returncode == 0
    assert "contains S:/D: markers" in r.stderr
    assert text_file.read_text() == ""


def test_convert_with_text_store_writes_default_json(env, text_file, tmp_path):
    text_file.write_text("(A) Existing S:2025/11/29\n")
    source = tmp_path / "import.txt"
    source.write_text("Imported S:2025/11/29\n")
    r = _run(["convert", str(source)], env, tmp_path)
    assert r.returncode == 0
    assert text_file.read_text() == "(A) Existing S:2025/11/29\n"
    assert _read(tmp_path / "todo.json")[0]["description"] == "Imported"


def test_convert_refuses_text_store_at_default_path(env, todo_file, tmp_path):
    todo_file.write_text("Existing S:2025/11/29\n")
    source = tmp_path / "import.txt"
    source.write_text("Imported S:2025/11/29\n")
    env["TODO_CLI_FILE"] = "todo.json"
    env["TODO_CLI_FORMAT"] = "text"
    r = _run(["convert", str(source)], env, tmp_path)
    assert r.returncode == 1
    assert "is a text store" in r.stderr
    assert todo_file.read_text() == "Existing S:2025/11/29\n"


def test_invalid_utf8_store_is_io_error(env, todo_file, tmp_path):
    todo_file.write_bytes(b"\xff\xfe garbage")
    r = _run(["list"], env, tmp_path)
    assert r.returncode == 1
    assert r.stderr.startswith("Error:")
    assert "Traceback" not in r.stderr


def test_list_empty_age_filter_is_invalid(env, todo_file, tmp_path):
    _write(todo_file, [_record("Task")])
    r = _run(["list", ""], env, tmp_path)
    assert "Invalid age filter format" in r.stderr
    assert "Task" not in r.stdout
