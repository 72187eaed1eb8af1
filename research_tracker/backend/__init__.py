"""
Backend package for the research tracker.

Contains the entry model, the persisted entry store, the draft form,
filtering, CSV/text exporters and the CSV import parser.
"""

from .data_validator import EntryValidationError
from .database import MemoryStorage, SlotStorage
from .form import EntryForm
from .models import CATEGORIES, EVIDENCE_LEVELS, Draft, Entry
from .store import EntryStore

__all__ = [
    "CATEGORIES",
    "EVIDENCE_LEVELS",
    "Draft",
    "Entry",
    "EntryForm",
    "EntryStore",
    "EntryValidationError",
    "MemoryStorage",
    "SlotStorage",
]
