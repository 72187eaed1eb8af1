"""
The ordered collection of research entries.

:class:`EntryStore` owns the in-memory list of entries and mirrors it
to a persistence port after every mutation.  The port is any object
with ``read()`` and ``write(blob)`` (see :mod:`.database`); the store
writes the whole collection as a JSON array each time, there is no
batching and no partial update.

Entries are never edited.  ``add`` stamps a new entry with an id
derived from the clock and today's date, ``delete`` removes one by
id and ``import_entries`` appends entries read back from an export.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .data_validator import EntryValidator
from .database import StoragePort
from .models import CATEGORIES, Draft, Entry

logger = logging.getLogger(__name__)


class EntryStore:
    """Entries in insertion order, persisted through ``storage``.

    Args:
        storage: Persistence port holding the serialised collection.
        clock: Callable returning the current time.  Ids and dates are
            derived from it; tests pass a fixed clock.
    """

    def __init__(self, storage: StoragePort, clock: Callable[[], datetime] = datetime.now) -> None:
        self.storage = storage
        self.clock = clock
        self.validator = EntryValidator()
        self._entries: List[Entry] = []

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def load(self) -> None:
        """Replace the in-memory collection with the persisted one.

        A missing slot leaves the store empty.  So does a malformed
        one (invalid JSON, not an array, or any record without an id,
        title or url): the problem is logged and the next mutation
        overwrites the bad value.
        """
        blob = self.storage.read()
        if not blob:
            self._entries = []
            logger.info("No saved entries found")
            return
        try:
            records = json.loads(blob)
            if not isinstance(records, list):
                raise ValueError(f"expected a JSON array, got {type(records).__name__}")
            for index, record in enumerate(records):
                issues = self.validator.validate_record(record)
                if issues:
                    raise ValueError(f"record {index}: {', '.join(issues)}")
            entries = [Entry.from_dict(record) for record in records]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring malformed saved entries: {e}")
            self._entries = []
            return
        self._entries = entries
        logger.info(f"Loaded {len(entries)} saved entries")

    def persist(self) -> None:
        """Write the whole collection to the storage slot."""
        blob = json.dumps([entry.to_dict() for entry in self._entries], ensure_ascii=False)
        self.storage.write(blob)

    def add(self, draft: Draft) -> Entry:
        """Create an entry from ``draft``, append it and persist.

        Raises:
            EntryValidationError: if the title or url is empty, or a
                category or evidence level is not one of the fixed values.
        """
        self.validator.check_draft(draft)
        now = self.clock()
        entry = Entry(
            id=self._new_id(now),
            title=draft.title,
            url=draft.url,
            date=now.date().isoformat(),
            description=draft.description,
            evidence_level=draft.evidence_level,
            category=draft.category,
            notes=draft.notes,
            tags=tuple(draft.tags),
        )
        self._entries.append(entry)
        self.persist()
        logger.info(f"Added entry {entry.id} ({entry.title!r})")
        return entry

    def delete(self, entry_id: str) -> bool:
        """Remove the entry with ``entry_id``.

        Returns ``False`` without touching storage if no entry matches.
        """
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        self.persist()
        logger.info(f"Deleted entry {entry_id}")
        return True

    def get(self, entry_id: str) -> Optional[Entry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def import_entries(self, entries: Iterable[Entry]) -> Dict[str, int]:
        """Append entries whose ids are not already in the store.

        Entries with a known id, or failing validation, are skipped.
        The collection is persisted once at the end if anything was
        added.  Returns counts of inserted, skipped and total entries.
        """
        stats = {"inserted": 0, "skipped": 0, "total": 0}
        known = {entry.id for entry in self._entries}
        for entry in entries:
            stats["total"] += 1
            if entry.id in known or self.validator.validate_record(entry.to_dict()):
                stats["skipped"] += 1
                continue
            self._entries.append(entry)
            known.add(entry.id)
            stats["inserted"] += 1
        if stats["inserted"]:
            self.persist()
        logger.info(f"Imported {stats['inserted']} of {stats['total']} entries")
        return stats

    def stats(self) -> Dict[str, Any]:
        """Return the entry count, the number of entries per category and
        how many drafts or records the validator has turned away."""
        counts = {category: 0 for category in CATEGORIES}
        uncategorised = 0
        for entry in self._entries:
            if entry.category in counts:
                counts[entry.category] += 1
            else:
                uncategorised += 1
        return {
            'total_entries': len(self._entries),
            'category_distribution': [
                {'category': category, 'count': count}
                for category, count in counts.items() if count
            ],
            'uncategorised': uncategorised,
            'rejected_records': self.validator.stats['rejected'],
        }

    def _new_id(self, now: datetime) -> str:
        # Millisecond timestamp, bumped past any id already taken
        candidate = int(now.timestamp() * 1000)
        taken = {entry.id for entry in self._entries}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

