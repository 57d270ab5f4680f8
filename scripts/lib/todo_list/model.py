"""Todo item model and its JSON record mapping."""

from __future__ import annotations

from dataclasses import dataclass, field

# Order of keys in a persisted JSON record.
RECORD_FIELDS = (
    'priority',
    'description',
    'context',
    'project',
    'tags',
    'start_date',
    'done_date',
    'due_date',
)


@dataclass
class TodoItem:
    description: str
    start_date: str
    priority: str | None = None
    context: str | None = None
    project: str | None = None
    tags: list[str] = field(default_factory=list)
    due_date: str | None = None
    done_date: str | None = None
    # Recomputed from storage order on every load; never persisted.
    position: int = field(default=0, compare=False)

    @property
    def is_done(self) -> bool:
        return self.done_date is not None

    def to_record(self) -> dict:
        """Return the JSON record for this item (position excluded)."""
        record = {name: getattr(self, name) for name in RECORD_FIELDS}
        record['tags'] = list(self.tags)
        return record

    @classmethod
    def from_record(cls, record: dict) -> TodoItem:
        """Build an item from a JSON record.

        Raises ValueError when the record does not have the expected shape.
        Missing `due_date` / `done_date` / `context` / `project` / `priority`
        keys load as None and a missing `tags` key as an empty list.
        """
        if not isinstance(record, dict):
            raise ValueError(f"record must be an object, got {type(record).__name__}")

        description = record.get('description')
        start_date = record.get('start_date')
        if not isinstance(description, str):
            raise ValueError("record is missing a string 'description'")
        if not isinstance(start_date, str):
            raise ValueError("record is missing a string 'start_date'")

        priority = record.get('priority')
        if priority is not None and (not isinstance(priority, str) or len(priority) != 1):
            raise ValueError(f"invalid priority: {priority!r}")

        tags = record.get('tags', [])
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ValueError("'tags' must be a list of strings")

        optional = {}
        for key in ('context', 'project', 'due_date', 'done_date'):
            value = record.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"'{key}' must be a string or null")
            optional[key] = value

        return cls(
            description=description,
            start_date=start_date,
            priority=priority,
            tags=list(tags),
            **optional,
        )


def assign_positions(items: list[TodoItem]) -> list[TodoItem]:
    """Number items 1..n in their current order."""
    for idx, item in enumerate(items, start=1):
        item.position = idx
    return items
