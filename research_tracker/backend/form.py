"""
Draft composition for the entry form.

:class:`EntryForm` holds the draft the user is typing into and the
text of the tag input.  Tags are edited only here; once the draft is
submitted the resulting entry keeps its tags as an immutable tuple.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .data_validator import EntryValidationError
from .models import ATTRIBUTE_NAMES, DRAFT_FIELDS, Draft, Entry
from .store import EntryStore

logger = logging.getLogger(__name__)


class EntryForm:
    """A draft entry bound to the store it will be submitted to."""

    def __init__(self, store: EntryStore) -> None:
        self.store = store
        self.draft = Draft()
        self.tag_input = ""
        self.errors: List[str] = []

    def set_field(self, name: str, value: str) -> None:
        """Overwrite one scalar field of the draft.

        ``name`` uses the serialised field names (``evidenceLevel``).
        Tags are not a scalar field; use :meth:`add_tag` and
        :meth:`remove_tag`.

        Editing a field clears the messages left by a rejected submit.
        """
        if name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field: {name}")
        setattr(self.draft, ATTRIBUTE_NAMES.get(name, name), value)
        self.errors = []

    def add_tag(self, text: Optional[str] = None) -> bool:
        """Commit ``text`` (or the tag buffer) as a new tag.

        Blank text is ignored.  On success the tag buffer is cleared.
        """
        text = self.tag_input if text is None else text
        if not text or not text.strip():
            return False
        self.draft.tags.append(text)
        self.tag_input = ""
        return True

    def remove_tag(self, position: int) -> None:
        """Remove the tag at ``position`` in the current tag list."""
        if 0 <= position < len(self.draft.tags):
            del self.draft.tags[position]

    def submit(self) -> Optional[Entry]:
        """Add the draft to the store and start a fresh draft.

        When the draft is invalid nothing is added, the draft is kept
        as typed, the messages are left in ``errors`` and ``None`` is
        returned.
        """
        try:
            entry = self.store.add(self.draft)
        except EntryValidationError as e:
            self.errors = e.issues
            logger.debug(f"Draft rejected: {e}")
            return None
        self.reset()
        return entry

    def reset(self) -> None:
        self.draft = Draft()
        self.tag_input = ""
        self.errors = []
