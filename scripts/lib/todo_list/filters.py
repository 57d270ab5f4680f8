"""Age, done-state, waiting and overdue filters."""

from datetime import date

from todo_list.dates import cutoff, format_today, parse_age_token
from todo_list.model import TodoItem

WAITING_CONTEXT = 'WF'

AGE_FILTER_ERROR = "Invalid age filter format. Use format like +1d, +2w, +3m, or +1y"
AGE_FILTER_HINT = "  d = days, w = weeks, m = months, y = years"


class FilterError(ValueError):
    """Raised for a malformed age filter token."""


def filter_by_age(items: list[TodoItem], token: str, today: date | None = None) -> list[TodoItem]:
    """Keep items started on or before the cutoff described by `token`.

    `+2w` keeps items at least two weeks old. Raises FilterError when the
    token does not parse.
    """
    parsed = parse_age_token(token)
    if parsed is None:
        raise FilterError(AGE_FILTER_ERROR)

    value, unit = parsed
    cutoff_date = cutoff(value, unit, today)
    return [item for item in items if item.start_date <= cutoff_date]


def filter_done(items: list[TodoItem], show_all: bool) -> list[TodoItem]:
    if show_all:
        return list(items)
    return [item for item in items if not item.is_done]


def filter_hide_waiting(items: list[TodoItem], hide: bool) -> list[TodoItem]:
    """Drop items whose context is @WF (waiting for) when `hide` is set."""
    if not hide:
        return list(items)
    return [
        item for item in items
        if item.context is None or item.context.upper() != WAITING_CONTEXT
    ]


def is_overdue(item: TodoItem, today: date | None = None) -> bool:
    if item.due_date is None:
        return False
    return item.due_date < format_today(today)


def unique_projects(items: list[TodoItem]) -> list[str]:
    """Sorted distinct project names, done items included."""
    return sorted({item.project for item in items if item.project is not None})
