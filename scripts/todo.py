#!/usr/bin/env python3
"""
Todo CLI - a flat-file todo list manager.

Usage:
    todo.py add "Buy milk @shopping P:Personal T:urgent Due:+3d"
    todo.py list [--all] [--pr] [--hide-waiting] [+1d|+2w|+3m|+1y]
    todo.py done N
    todo.py edit N
    todo.py pr A|clear N
    todo.py projects
    todo.py convert todo.txt [-o todo.json]

Global options: --file PATH, --format json|text, -v/--verbose
"""

import argparse
import logging
import sys
from pathlib import Path

_SCRIPT_DIR = Path(__file__).parent.resolve()
if str(_SCRIPT_DIR / "lib") not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR / "lib"))
if str(_SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR))

from todo_list.composer import has_line_metadata
from todo_list.dates import format_today, parse_due_input
from todo_list.filters import (
    AGE_FILTER_HINT,
    FilterError,
    filter_by_age,
    filter_done,
    filter_hide_waiting,
    unique_projects,
)
from todo_list.model import TodoItem
from todo_list.ordering import order_for_display
from todo_list.tokenizer import tokenize
from display import format_item, format_project, format_summary
from store import TodoStore
from utils import (
    DEFAULT_TODO_FILE,
    FORMATS,
    confirm,
    detect_format,
    get_todo_file,
    is_clear_keyword,
    read_input_with_default,
)

logger = logging.getLogger(__name__)


def _open_store(args) -> TodoStore | None:
    """Resolve the store, offering to create it when missing.

    Returns None when the user declines or the configuration is invalid.
    """
    path = get_todo_file(args.file)
    try:
        fmt = detect_format(path, args.format)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    store = TodoStore(path, fmt)
    if store.exists():
        return store

    print(f"The file '{path}' does not exist in {Path.cwd()}")
    if not confirm("Would you like to create it?"):
        print("File not created. Exiting.")
        return None

    store.create()
    print(f"Created '{path}' in {Path.cwd()}")
    return store


def _get_item(items: list[TodoItem], line_number: int) -> TodoItem | None:
    if line_number < 1 or line_number > len(items):
        print(f"Error: Todo item {line_number} does not exist", file=sys.stderr)
        return None
    return items[line_number - 1]


def _parse_priority(value: str) -> str | None:
    """Return the upper-cased priority letter, or None if invalid."""
    if len(value) != 1 or not (value.isascii() and value.isalpha()):
        return None
    return value.upper()


def _is_single_word(value: str) -> bool:
    """Text stores split metadata on whitespace, so values must be one word."""
    return len(value.split()) == 1


def add_todo(args):
    """Add a new todo item."""
    store = _open_store(args)
    if store is None:
        return

    items = store.load()
    meta = tokenize(' '.join(args.description))
    if store.format == 'text' and has_line_metadata(meta.description):
        print(
            f"Error: Description '{meta.description}' contains S:/D: markers "
            "that a text store would read back as dates",
            file=sys.stderr,
        )
        return

    item = TodoItem(
        description=meta.description,
        start_date=format_today(),
        context=meta.context,
        project=meta.project,
        tags=meta.tags,
        due_date=meta.due_date,
        position=len(items) + 1,
    )
    store.append(item, items)
    print("Added todo item")


def list_todos(args):
    """List todo items with optional filters."""
    store = _open_store(args)
    if store is None:
        return

    todos = filter_done(store.load(), args.all)

    if args.age_filter is not None:
        try:
            todos = filter_by_age(todos, args.age_filter)
        except FilterError as e:
            print(f"Error: {e}", file=sys.stderr)
            print(AGE_FILTER_HINT, file=sys.stderr)
            return

    todos = filter_hide_waiting(todos, args.hide_waiting)

    if not todos:
        print("No todo items found")
        return

    for todo in order_for_display(todos, force_priority=args.pr):
        print(format_item(todo))


def mark_done(args):
    """Mark a todo item as done after confirmation."""
    store = _open_store(args)
    if store is None:
        return

    todos = store.load()
    todo = _get_item(todos, args.line_number)
    if todo is None:
        return

    if todo.is_done:
        print(f"Error: Todo item {args.line_number} is already marked as done", file=sys.stderr)
        return

    print("Mark this item as done?")
    print(f"  {format_summary(todo)}")
    if not confirm():
        print("Cancelled")
        return

    todo.done_date = format_today()
    store.save(todos)
    print(f"Todo item {args.line_number} marked as done")


def set_priority(args):
    """Set or clear the priority of a todo item."""
    store = _open_store(args)
    if store is None:
        return

    todos = store.load()
    todo = _get_item(todos, args.line_number)
    if todo is None:
        return

    if args.priority.lower() == 'clear':
        todo.priority = None
        store.save(todos)
        print(f"Cleared priority for todo item {args.line_number}")
        return

    if len(args.priority) != 1:
        print("Error: Priority must be a single character (A-Z)", file=sys.stderr)
        return

    priority = _parse_priority(args.priority)
    if priority is None:
        print("Error: Priority must be a letter (A-Z)", file=sys.stderr)
        return

    todo.priority = priority
    store.save(todos)
    print(f"Set priority for todo item {args.line_number}")


def edit_todo(args):
    """Interactively edit every field of a todo item."""
    store = _open_store(args)
    if store is None:
        return

    todos = store.load()
    todo = _get_item(todos, args.line_number)
    if todo is None:
        return

    print(f"Editing todo item {args.line_number}:")
    print("Press Enter to keep current value, or type new value\n")

    new_description = read_input_with_default("Description", todo.description)
    new_priority = read_input_with_default("Priority (A-Z, or 'clear')", todo.priority or 'none')
    new_context = read_input_with_default("Context (without @)", todo.context or 'none')
    new_project = read_input_with_default("Project (without P:)", todo.project or 'none')
    new_tags = read_input_with_default(
        "Tags (comma-separated, without T:)",
        ', '.join(todo.tags) if todo.tags else 'none',
    )
    new_due = read_input_with_default(
        "Due date (YYYY-MM-DD, +3d, +2w, or 'clear')",
        todo.due_date or 'none',
    )

    text_store = store.format == 'text'

    if new_description is not None:
        if text_store and has_line_metadata(new_description):
            print(
                f"Warning: Description '{new_description}' contains metadata markers, keeping current value",
                file=sys.stderr,
            )
        else:
            todo.description = new_description

    if new_priority is not None:
        if is_clear_keyword(new_priority):
            todo.priority = None
        else:
            priority = _parse_priority(new_priority)
            if priority is None:
                print(f"Warning: Invalid priority '{new_priority}', keeping current value", file=sys.stderr)
            else:
                todo.priority = priority

    if new_context is not None:
        if is_clear_keyword(new_context):
            todo.context = None
        elif text_store and not _is_single_word(new_context):
            print(f"Warning: Invalid context '{new_context}' (no spaces allowed), keeping current value", file=sys.stderr)
        else:
            todo.context = new_context

    if new_project is not None:
        if is_clear_keyword(new_project):
            todo.project = None
        elif text_store and not _is_single_word(new_project):
            print(f"Warning: Invalid project '{new_project}' (no spaces allowed), keeping current value", file=sys.stderr)
        else:
            todo.project = new_project

    if new_tags is not None:
        if is_clear_keyword(new_tags):
            todo.tags = []
        else:
            tags = [tag.strip() for tag in new_tags.split(',') if tag.strip()]
            if text_store and not all(_is_single_word(tag) for tag in tags):
                print(f"Warning: Invalid tags '{new_tags}' (no spaces allowed), keeping current value", file=sys.stderr)
            else:
                todo.tags = tags

    if new_due is not None:
        if is_clear_keyword(new_due):
            todo.due_date = None
        else:
            due_date = parse_due_input(new_due)
            if due_date is None:
                print(f"Warning: Invalid due date format '{new_due}', keeping current value", file=sys.stderr)
                print("Expected format: YYYY-MM-DD or +3d, +2w, +1m, +1y", file=sys.stderr)
            else:
                todo.due_date = due_date

    store.save(todos)
    print(f"\nTodo item {args.line_number} updated successfully")


def list_projects(args):
    """List all distinct projects."""
    store = _open_store(args)
    if store is None:
        return

    projects = unique_projects(store.load())
    if not projects:
        print("No projects found")
        return

    print("Projects:")
    for project in projects:
        print(f"  {format_project(project)}")


def _convert_output(args) -> Path | None:
    """Pick the JSON output path for convert.

    Without -o this is the configured store, unless that store is a text
    store, in which case ./todo.json is used instead.
    """
    if args.output:
        return Path(args.output)

    store_path = get_todo_file(args.file)
    try:
        fmt = detect_format(store_path, args.format)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
    if fmt == 'json':
        return store_path

    fallback = Path(DEFAULT_TODO_FILE)
    if fallback.resolve() == store_path.resolve():
        print(f"Error: '{store_path}' is a text store; pass -o to choose a JSON output file", file=sys.stderr)
        return None
    logger.debug("Store %s is plain text, converting to %s", store_path, fallback)
    return fallback


def convert_file(args):
    """Convert a todo.txt file into the JSON store format."""
    input_path = Path(args.input)

    if not input_path.exists():
        print(f"Error: Input file '{args.input}' does not exist", file=sys.stderr)
        return 1

    output_path = _convert_output(args)
    if output_path is None:
        return 1

    if output_path.exists():
        if not confirm(f"Output file '{output_path}' already exists. Overwrite?"):
            print("Cancelled")
            return

    todos = TodoStore(input_path, 'text').load()
    TodoStore(output_path, 'json').save(todos)
    logger.info("Converted %s -> %s", input_path, output_path)
    print(f"Converted {len(todos)} todo items from '{args.input}' to '{output_path}'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='todo', description='A command line todo list manager')
    parser.add_argument('--file', help='Todo store path (default: $TODO_CLI_FILE or ./todo.json)')
    parser.add_argument('--format', choices=FORMATS, help='Store format (default: from file suffix)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    add_parser = subparsers.add_parser('add', help='Add a new todo item')
    add_parser.add_argument('description', nargs='+', help='Description with optional @ctx P:proj T:tag Due:date')
    add_parser.set_defaults(func=add_todo)

    list_parser = subparsers.add_parser('list', help='List todo items')
    list_parser.add_argument('--all', action='store_true', help='Show all items including done items')
    list_parser.add_argument('--pr', action='store_true', help='Sort by priority')
    list_parser.add_argument('--hide-waiting', action='store_true', help='Hide items marked as waiting (@WF)')
    list_parser.add_argument(
        'age_filter',
        nargs='?',
        help='Only items older than this (e.g. +1d, +2w, +3m, +1y)',
    )
    list_parser.set_defaults(func=list_todos)

    done_parser = subparsers.add_parser('done', help='Mark a todo item as done')
    done_parser.add_argument('line_number', type=int)
    done_parser.set_defaults(func=mark_done)

    edit_parser = subparsers.add_parser('edit', help='Edit a todo item')
    edit_parser.add_argument('line_number', type=int)
    edit_parser.set_defaults(func=edit_todo)

    pr_parser = subparsers.add_parser('pr', help='Set or clear priority for a todo item')
    pr_parser.add_argument('priority', help="Priority letter (A-Z) or 'clear'")
    pr_parser.add_argument('line_number', type=int)
    pr_parser.set_defaults(func=set_priority)

    projects_parser = subparsers.add_parser('projects', help='List all unique projects')
    projects_parser.set_defaults(func=list_projects)

    convert_parser = subparsers.add_parser('convert', help='Convert a todo.txt file to todo.json format')
    convert_parser.add_argument('input', help='Path to the input todo.txt file')
    convert_parser.add_argument('-o', '--output', help='Path to the output JSON file (defaults to the todo store)')
    convert_parser.set_defaults(func=convert_file)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        return args.func(args) or 0
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    raise SystemExit(main())
