"""Display ordering for todo items."""

from todo_list.model import TodoItem


def display_key(item: TodoItem) -> tuple:
    """Sort key for the default, date-aware order.

    Tiers, first to last:
    0. due date AND priority -> priority, then due date
    1. due date only         -> due date
    2. priority only         -> priority
    3. neither               -> position

    YYYY/MM/DD compares correctly as a string.
    """
    if item.due_date is not None and item.priority is not None:
        return (0, item.priority, item.due_date)
    if item.due_date is not None:
        return (1, item.due_date, '')
    if item.priority is not None:
        return (2, item.priority, '')
    return (3, '', item.position)


def forced_priority_key(item: TodoItem) -> tuple:
    """Sort key applied on top of the default order by `list --pr`.

    Due-dated items compare equal so the stable sort keeps them where the
    default order put them; the remaining items sort by priority, bare last.
    """
    if item.due_date is not None:
        return (0, '')
    if item.priority is not None:
        return (1, item.priority)
    return (2, '')


def order_for_display(items: list[TodoItem], force_priority: bool = False) -> list[TodoItem]:
    """Return a new list in display order."""
    ordered = sorted(items, key=display_key)
    if force_priority:
        ordered.sort(key=forced_priority_key)
    return ordered
