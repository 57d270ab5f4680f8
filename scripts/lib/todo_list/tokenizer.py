"""Metadata tokenizer for free-form todo text.

Words are classified by prefix (case-insensitive):

    @home       context  (first wins, later ones dropped)
    P:Work      project  (first wins, later ones dropped)
    T:urgent    tag      (every occurrence kept, in order)
    Due:+3d     due date (first wins, resolved via parse_due_input)

Anything else is description text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from todo_list.dates import parse_due_input

FIRST_WINS = 'first'
ACCUMULATE = 'accumulate'


@dataclass(frozen=True)
class Prefix:
    marker: str  # lower-case
    field: str
    policy: str


# Longer markers first so 'due:' is never shadowed by a shorter prefix.
INPUT_PREFIXES: tuple[Prefix, ...] = (
    Prefix('due:', 'due_date', FIRST_WINS),
    Prefix('@', 'context', FIRST_WINS),
    Prefix('p:', 'project', FIRST_WINS),
    Prefix('t:', 'tags', ACCUMULATE),
)


@dataclass
class Metadata:
    description: str
    context: str | None = None
    project: str | None = None
    tags: list[str] = field(default_factory=list)
    due_date: str | None = None


def match_prefix(word: str, prefixes: tuple[Prefix, ...]) -> Prefix | None:
    """Return the prefix `word` starts with, if it carries a payload."""
    for prefix in prefixes:
        size = len(prefix.marker)
        if len(word) > size and word[:size].lower() == prefix.marker:
            return prefix
    return None


def classify_words(words: list[str], prefixes: tuple[Prefix, ...]) -> tuple[str, dict]:
    """Split words into description text and raw metadata payloads.

    Returns (description, found) where `found` maps a field name to the
    first payload (FIRST_WINS) or to the list of payloads (ACCUMULATE).
    Fields never seen are absent from `found`.
    """
    found: dict = {}
    description_words = []
    for word in words:
        prefix = match_prefix(word, prefixes)
        if prefix is None:
            description_words.append(word)
            continue
        payload = word[len(prefix.marker):]
        if prefix.policy == ACCUMULATE:
            found.setdefault(prefix.field, []).append(payload)
        else:
            found.setdefault(prefix.field, payload)
    return ' '.join(description_words), found


def tokenize(text: str, today: date | None = None) -> Metadata:
    """Extract metadata from user-entered todo text.

    An invalid `Due:` payload leaves the due date unset; the word is still
    removed from the description.
    """
    description, found = classify_words(text.split(), INPUT_PREFIXES)

    due_date = None
    if 'due_date' in found:
        due_date = parse_due_input(found['due_date'], today)

    return Metadata(
        description=description,
        context=found.get('context'),
        project=found.get('project'),
        tags=found.get('tags', []),
        due_date=due_date,
    )
