"""Terminal rendering for todo items.

Colors are disabled when stdout is not a TTY unless FORCE_COLOR=1, and
always disabled when NO_COLOR is set.
"""

import os
import sys
from pathlib import Path

_SCRIPT_DIR = Path(__file__).parent.resolve()
if str(_SCRIPT_DIR / "lib") not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR / "lib"))

from todo_list.filters import is_overdue
from todo_list.model import TodoItem

RESET = '0'
BOLD = '1'
RED = '31'
GREEN = '32'
YELLOW = '33'
MAGENTA = '35'
CYAN = '36'
BRIGHT_BLUE = '94'


def color_enabled() -> bool:
    if os.environ.get('NO_COLOR') is not None:
        return False
    force = os.environ.get('FORCE_COLOR', '').lower() in {'1', 'true', 'yes', 'on'}
    return force or sys.stdout.isatty()


def color(text: str, *styles: str) -> str:
    """Wrap text in ANSI styles when color output is enabled."""
    if not styles or not color_enabled():
        return text
    codes = ''.join(f"\033[{style}m" for style in styles)
    return f"{codes}{text}\033[{RESET}m"


def format_item(item: TodoItem) -> str:
    """One display line: position, priority, dates, text and metadata."""
    parts = [color(str(item.position), CYAN)]
    if item.priority:
        parts.append(f"({color(item.priority, MAGENTA)})")
    parts.append(f"S:{item.start_date}")
    if item.due_date:
        due = color(item.due_date, RED, BOLD) if is_overdue(item) else item.due_date
        parts.append(f"Due:{due}")
    if item.description:
        parts.append(item.description)
    if item.context:
        parts.append(f"@{color(item.context, GREEN)}")
    if item.project:
        parts.append(f"P:{color(item.project, YELLOW)}")
    parts.extend(f"T:{color(tag, BRIGHT_BLUE)}" for tag in item.tags)
    if item.done_date:
        parts.append(f"D:{item.done_date}")
    return ' '.join(parts)


def format_summary(item: TodoItem) -> str:
    """Plain single-line summary used in confirmation prompts."""
    parts = []
    if item.priority:
        parts.append(f"({item.priority})")
    parts.append(item.description)
    if item.context:
        parts.append(f"@{item.context}")
    if item.project:
        parts.append(f"P:{item.project}")
    parts.extend(f"T:{tag}" for tag in item.tags)
    if item.due_date:
        parts.append(f"Due:{item.due_date}")
    parts.append(f"S:{item.start_date}")
    return ' '.join(parts)


def format_project(name: str) -> str:
    return f"P:{color(name, YELLOW)}"
