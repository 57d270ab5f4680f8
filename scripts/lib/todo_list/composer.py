"""Plain-text line composer (inverse of parser.parse_line)."""

from todo_list.model import TodoItem
from todo_list.parser import LINE_PREFIXES, PRIORITY_RE
from todo_list.tokenizer import classify_words


def has_line_metadata(text: str) -> bool:
    """True if any word of `text` would be read back as a metadata token."""
    _, found = classify_words(text.split(), LINE_PREFIXES)
    return bool(found)


def compose_line(item: TodoItem) -> str:
    """Render an item as a single todo.txt style line."""
    head = []
    if item.priority:
        head.append(f"({item.priority})")

    meta = []
    if item.context:
        meta.append(f"@{item.context}")
    if item.project:
        meta.append(f"P:{item.project}")
    meta.extend(f"T:{tag}" for tag in item.tags)
    if item.start_date:
        meta.append(f"S:{item.start_date}")
    if item.due_date:
        meta.append(f"Due:{item.due_date}")
    if item.done_date:
        meta.append(f"D:{item.done_date}")

    if item.description:
        # An unprioritized "(X) text" at line start would parse as a priority.
        if not item.priority and meta and PRIORITY_RE.match(f"{item.description} "):
            meta.insert(1, item.description)
        else:
            head.append(item.description)
    return ' '.join(head + meta)


def compose_lines(items: list[TodoItem]) -> str:
    """Render a whole collection, one line per item, newline terminated."""
    return ''.join(f"{compose_line(item)}\n" for item in items)
