#!/usr/bin/env python3
"""
Todo store file operations.

Two on-disk formats:
  json: a list of item records, rewritten whole on every change
  text: one todo.txt style line per item; `add` appends a single line

Positions are never stored; they are reassigned (1..n) on every load.
"""

import json
import logging
import os
import stat
import sys
import tempfile
from pathlib import Path

_SCRIPT_DIR = Path(__file__).parent.resolve()
if str(_SCRIPT_DIR / "lib") not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR / "lib"))

from todo_list.composer import compose_line, compose_lines
from todo_list.model import TodoItem, assign_positions
from todo_list.parser import parse_lines

logger = logging.getLogger(__name__)


def _target_mode(path: Path) -> int:
    """Permission bits the written file should end up with."""
    if path.exists():
        return stat.S_IMODE(path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _atomic_write(path: Path, content: str) -> None:
    """Write content atomically via tempfile + rename, keeping the file mode."""
    mode = _target_mode(path)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            fh.write(content)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)


def parse_json_store(content: str) -> list[TodoItem]:
    """Decode a JSON store; anything malformed yields an empty list."""
    try:
        records = json.loads(content)
        if not isinstance(records, list):
            raise ValueError(f"expected a list of items, got {type(records).__name__}")
        return [TodoItem.from_record(record) for record in records]
    except ValueError as exc:
        # json.JSONDecodeError is a ValueError too.
        logger.debug("Unreadable JSON store content, treating as empty: %s", exc)
        return []


def dump_json_store(items: list[TodoItem]) -> str:
    return json.dumps([item.to_record() for item in items], indent=2, ensure_ascii=False)


class TodoStore:
    """Whole-file load/save for one todo store."""

    def __init__(self, path: Path, fmt: str = 'json'):
        self.path = Path(path)
        self.format = fmt

    def exists(self) -> bool:
        return self.path.exists()

    def create(self) -> None:
        """Create an empty store file (parent directories included)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()
        logger.debug("Created store %s", self.path)

    def _read(self) -> str:
        try:
            return self.path.read_text(encoding='utf-8')
        except UnicodeDecodeError as exc:
            raise OSError(f"{self.path}: file is not valid UTF-8 ({exc.reason})") from exc

    def load(self) -> list[TodoItem]:
        """Read every item. Raises OSError if the file cannot be read."""
        content = self._read()
        if self.format == 'text':
            items = parse_lines(content)
        else:
            items = parse_json_store(content)
        logger.debug("Loaded %d items from %s", len(items), self.path)
        return assign_positions(items)

    def save(self, items: list[TodoItem]) -> None:
        """Overwrite the store with the full collection."""
        if self.format == 'text':
            content = compose_lines(items)
        else:
            content = dump_json_store(items)
        _atomic_write(self.path, content)
        logger.debug("Saved %d items to %s", len(items), self.path)

    def append(self, item: TodoItem, existing: list[TodoItem]) -> None:
        """Persist a newly added item.

        Plain-text stores get a single appended line; JSON stores are
        rewritten with `existing` plus the new item.
        """
        if self.format != 'text':
            self.save(existing + [item])
            return

        content = self._read() if self.path.exists() else ''
        prefix = '' if not content or content.endswith('\n') else '\n'
        with self.path.open('a', encoding='utf-8') as fh:
            fh.write(f"{prefix}{compose_line(item)}\n")
        logger.debug("Appended item to %s", self.path)
