#!/usr/bin/env python3
"""
Shared utilities for the todo CLI: store location, format and prompts.

Configuration via environment variables:
- TODO_CLI_FILE: Path to the todo store (default: ./todo.json)
- TODO_CLI_FORMAT: 'json' or 'text' (default: inferred from the file suffix)
"""

import os
import sys
from pathlib import Path

DEFAULT_TODO_FILE = 'todo.json'
FORMATS = ('json', 'text')
TEXT_SUFFIXES = {'.txt'}


def get_todo_file(explicit: str | None = None) -> Path:
    """Resolve the store path: explicit argument > TODO_CLI_FILE > default."""
    if explicit:
        return Path(explicit).expanduser()
    from_env = (os.getenv('TODO_CLI_FILE') or '').strip()
    if from_env:
        return Path(from_env).expanduser()
    return Path(DEFAULT_TODO_FILE)


def detect_format(path: Path, explicit: str | None = None) -> str:
    """Pick the store format.

    Returns 'json' or 'text'. An explicit value or TODO_CLI_FORMAT wins;
    otherwise '.txt' files are plain text and everything else is JSON.
    """
    requested = explicit or (os.getenv('TODO_CLI_FORMAT') or '').strip().lower()
    if requested:
        if requested not in FORMATS:
            raise ValueError(f"Unknown store format '{requested}' (expected json or text)")
        return requested
    return 'text' if path.suffix.lower() in TEXT_SUFFIXES else 'json'


def read_line(prompt: str) -> str:
    """Print a prompt and read one line from stdin ('' on EOF)."""
    print(prompt, end='', flush=True)
    line = sys.stdin.readline()
    return line.strip()


def confirm(prompt: str = '') -> bool:
    """Ask a yes/no question. Only 'Y' (any case) counts as yes."""
    question = f"{prompt} (Y/N): " if prompt else "(Y/N): "
    return read_line(question).upper() == 'Y'


def read_input_with_default(prompt: str, current_value: str) -> str | None:
    """Prompt showing the current value.

    Returns None when the user just presses Enter (keep current value).
    """
    answer = read_line(f"{prompt} [{current_value}]: ")
    return answer or None


def is_clear_keyword(value: str) -> bool:
    return value.lower() in ('clear', 'none')
