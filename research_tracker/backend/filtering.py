"""Search and category filtering over the entry collection."""

from __future__ import annotations

from typing import Iterable, List

from .models import Entry


def matches_search(entry: Entry, search_term: str) -> bool:
    """Case-insensitive substring match on title, description or any tag."""
    if not search_term:
        return True
    needle = search_term.casefold()
    if needle in entry.title.casefold() or needle in entry.description.casefold():
        return True
    return any(needle in tag.casefold() for tag in entry.tags)


def filter_entries(
    entries: Iterable[Entry],
    search_term: str = "",
    filter_category: str = "",
) -> List[Entry]:
    """Return the entries visible for the given search and category.

    An empty ``filter_category`` accepts every category, otherwise the
    entry's category must be exactly equal.  Order is preserved.
    """
    return [
        entry for entry in entries
        if (not filter_category or entry.category == filter_category)
        and matches_search(entry, search_term)
    ]
