"""Plain-text (todo.txt style) line parser."""

import re

from todo_list.model import TodoItem
from todo_list.tokenizer import FIRST_WINS, INPUT_PREFIXES, Prefix, classify_words

LINE_PREFIXES: tuple[Prefix, ...] = INPUT_PREFIXES + (
    Prefix('s:', 'start_date', FIRST_WINS),
    Prefix('d:', 'done_date', FIRST_WINS),
)

# "(A) " as the very first token of the line.
PRIORITY_RE = re.compile(r'^\(([A-Za-z])\) ')


def parse_line(line: str) -> TodoItem:
    """
    Parse one persisted line into a TodoItem.

    Format: [(P) ]text with embedded @ctx P:proj T:tag S:start D:done Due:due

    Rules:
    - Priority is recognized only at the start of the line, case-folded to upper
    - Every metadata field except tags is first-wins
    - Due dates are kept as written; relative offsets are only resolved on input
    - A missing S: token leaves start_date as an empty string
    """
    remaining = line.strip()

    priority = None
    priority_match = PRIORITY_RE.match(remaining)
    if priority_match:
        priority = priority_match.group(1).upper()
        remaining = remaining[priority_match.end():]

    description, found = classify_words(remaining.split(), LINE_PREFIXES)

    return TodoItem(
        description=description,
        start_date=found.get('start_date', ''),
        priority=priority,
        context=found.get('context'),
        project=found.get('project'),
        tags=found.get('tags', []),
        due_date=found.get('due_date'),
        done_date=found.get('done_date'),
    )


def parse_lines(content: str) -> list[TodoItem]:
    """Parse every non-blank line of a plain-text store."""
    return [parse_line(line) for line in content.splitlines() if line.strip()]
