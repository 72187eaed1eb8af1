"""
Domain records for the research tracker.

An :class:`Entry` is a saved research reference.  Entries are frozen
once created: the store only ever appends or removes them, it never
edits one in place.  A :class:`Draft` is the mutable shape the entry
form fills in before an entry is committed; it has no ``id`` or
``date`` because those are stamped by the store.

Serialised entries use camelCase keys (``evidenceLevel``) so that the
persisted slot and the CSV header keep the field names users see in
exported files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

CATEGORIES: Tuple[str, ...] = (
    "Biomécanique",
    "Ostéopathie",
    "Neurosciences",
    "Anatomie",
    "Neuroanatomie",
    "Neurophysiologie",
    "Biomécanique clinique",
)

EVIDENCE_LEVELS: Tuple[str, ...] = (
    "Niveau 1 – Méta-analyses",
    "Niveau 2 – Études prospectives",
    "Niveau 3 – Études rétrospectives",
    "Niveau 4 – Consensus d'experts",
)

# Column order for the persisted slot and the CSV export
ENTRY_FIELDS: Tuple[str, ...] = (
    "id",
    "title",
    "url",
    "date",
    "description",
    "evidenceLevel",
    "category",
    "notes",
    "tags",
)

# Scalar fields a user may edit on a draft
DRAFT_FIELDS: Tuple[str, ...] = (
    "title",
    "url",
    "description",
    "evidenceLevel",
    "category",
    "notes",
)

TAG_SEPARATOR = ", "

# Serialised field name -> attribute name, where they differ
ATTRIBUTE_NAMES: Dict[str, str] = {"evidenceLevel": "evidence_level"}


@dataclass(frozen=True)
class Entry:
    """A saved research reference."""

    id: str
    title: str
    url: str
    date: str
    description: str = ""
    evidence_level: str = ""
    category: str = ""
    notes: str = ""
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Return the serialised form used by the persisted slot."""
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "date": self.date,
            "description": self.description,
            "evidenceLevel": self.evidence_level,
            "category": self.category,
            "notes": self.notes,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        """Build an entry from its serialised form.

        ``id``, ``title`` and ``url`` must be present; a missing key
        raises ``KeyError``.  Optional text fields default to an empty
        string and ``tags`` must be a list of strings.
        """
        tags = data.get("tags") or []
        if not isinstance(tags, (list, tuple)):
            raise TypeError(f"tags must be a list, got {type(tags).__name__}")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            url=str(data["url"]),
            date=str(data.get("date") or ""),
            description=str(data.get("description") or ""),
            evidence_level=str(data.get("evidenceLevel") or ""),
            category=str(data.get("category") or ""),
            notes=str(data.get("notes") or ""),
            tags=tuple(str(tag) for tag in tags),
        )


@dataclass
class Draft:
    """An uncommitted entry being composed in the form."""

    title: str = ""
    url: str = ""
    description: str = ""
    evidence_level: str = ""
    category: str = ""
    notes: str = ""
    tags: List[str] = field(default_factory=list)
