"""
Tests for exporting, importing and storing the entry collection.

The CSV export is checked with the standard library reader as well as
with the tracker's own import parser.  The SQL slot runs against an
in-memory SQLite database.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime

from research_tracker.backend import exporters, parsers
from research_tracker.backend.database import SlotStorage
from research_tracker.backend.models import CATEGORIES, ENTRY_FIELDS, EVIDENCE_LEVELS, Draft, Entry
from research_tracker.backend.store import EntryStore


def _entries():
    return [
        Entry(id="1718000000000", title="A", url="http://x", date="2024-06-10",
              description='Quotes "inside", commas, and\nnewlines', evidence_level="Niveau 1 – Méta-analyses",
              category="Anatomie", notes="", tags=("t1", "t2")),
        Entry(id="1718000000001", title="Étude crânienne", url="http://y", date="2024-06-11"),
    ]


def test_csv_export_round_trip_with_standard_reader() -> None:
    """Re-reading the CSV export yields the original field values."""
    data = exporters.entries_to_csv(_entries())
    rows = list(csv.DictReader(io.StringIO(data.decode("utf-8"))))
    assert len(rows) == 2
    assert tuple(rows[0].keys()) == ENTRY_FIELDS
    first = rows[0]
    assert first["title"] == "A"
    assert first["url"] == "http://x"
    assert first["description"] == 'Quotes "inside", commas, and\nnewlines'
    assert first["evidenceLevel"] == "Niveau 1 – Méta-analyses"
    assert json.loads(first["tags"]) == ["t1", "t2"]
    assert rows[1]["title"] == "Étude crânienne"
    assert rows[1]["tags"] == "[]"


def test_csv_export_of_empty_collection_has_header_only() -> None:
    data = exporters.entries_to_csv([]).decode("utf-8")
    assert data.strip() == ",".join(ENTRY_FIELDS)


def test_csv_import_restores_entries() -> None:
    """The import parser reads an export back into equal entries."""
    data = exporters.entries_to_csv(_entries())
    assert parsers.parse_entries_csv(io.BytesIO(data)) == _entries()


def test_csv_import_fills_missing_ids_and_dates() -> None:
    content = (
        "title,url,date,tags\n"
        "Gait,http://g,2024-06-10T08:00:00,\n"
        'No date,http://n,unknown,"a, b"\n'
        ",http://dropped,2024-01-01,\n"
    )
    entries = parsers.parse_entries_csv(io.StringIO(content))
    assert [entry.title for entry in entries] == ["Gait", "No date"]
    assert entries[0].date == "2024-06-10"
    assert entries[0].tags == ()
    assert entries[1].tags == ("a", "b")
    assert len(entries[1].date) == 10
    assert entries[0].id and entries[1].id and entries[0].id != entries[1].id


def test_csv_import_requires_title_and_url_columns() -> None:
    try:
        parsers.parse_entries_csv(io.StringIO("name,link\nA,http://x\n"))
    except ValueError as e:
        assert "title" in str(e) and "url" in str(e)
    else:
        raise AssertionError("expected ValueError")


def test_normalize_date() -> None:
    assert parsers.normalize_date("2024-06-10") == "2024-06-10"
    assert parsers.normalize_date("June 10, 2024") == "2024-06-10"
    assert parsers.normalize_date("") is None
    assert parsers.normalize_date("unknown") is None


def test_import_skips_known_ids() -> None:
    store = EntryStore(SlotStorage(url="sqlite:///:memory:"))
    existing = _entries()[0]
    store.import_entries([existing])
    stats = store.import_entries(_entries())
    assert stats == {"inserted": 1, "skipped": 1, "total": 2}
    assert [entry.id for entry in store] == [entry.id for entry in _entries()]


def test_import_rejects_values_outside_enumerations() -> None:
    """Imported rows must use the fixed categories and evidence levels."""
    content = (
        "id,title,url,date,category,evidenceLevel\n"
        "9,T,http://t,2024-01-01,Chirurgie,\n"
        "10,U,http://u,2024-01-01,,Niveau 9\n"
        "11,V,http://v,2024-01-01,Anatomie,Niveau 2 – Études prospectives\n"
    )
    store = EntryStore(SlotStorage(url="sqlite:///:memory:"))
    stats = store.import_entries(parsers.parse_entries_csv(io.StringIO(content)))
    assert stats == {"inserted": 1, "skipped": 2, "total": 3}
    assert [entry.id for entry in store] == ["11"]
    assert all(entry.category in CATEGORIES for entry in store)
    assert all(entry.evidence_level in EVIDENCE_LEVELS for entry in store)
    assert store.stats()["rejected_records"] == 2


def test_csv_round_trip_keeps_tags_containing_commas() -> None:
    """A tag holding the display separator reads back as one tag."""
    entry = Entry(id="1", title="T", url="http://t", date="2024-01-01",
                  tags=("gait, running", "[draft]", "plain"))
    data = exporters.entries_to_csv([entry])
    assert parsers.parse_entries_csv(io.BytesIO(data)) == [entry]


def test_split_tags_accepts_hand_written_lists() -> None:
    assert parsers.split_tags('["a, b", "c"]') == ["a, b", "c"]
    assert parsers.split_tags("a, b") == ["a", "b"]
    assert parsers.split_tags("[]") == []
    assert parsers.split_tags("") == []


def test_document_export_content() -> None:
    """The pseudo-document is a numbered plain text report."""
    text = exporters.entries_to_document(_entries()).decode("utf-8")
    lines = text.split("\n")
    assert lines[0] == "JOURNAL DE RECHERCHE BIOMÉDICALE"
    assert lines[1] == ""
    assert lines[2] == "1. A"
    assert "URL: http://x" in lines
    assert "Date: 2024-06-10" in lines
    assert "Catégorie: Anatomie" in lines
    assert "Niveau de preuve: Niveau 1 – Méta-analyses" in lines
    assert "Tags: t1, t2" in lines
    assert "2. ÉTUDE CRÂNIENNE" in lines
    assert text.endswith("Tags: \n\n")


def test_document_export_file_metadata() -> None:
    assert exporters.DOCUMENT_FILENAME == "recherches_biomedicales.docx"
    assert exporters.DOCUMENT_MIME == (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert exporters.CSV_FILENAME == "recherches_biomedicales.csv"
    # Plain text, not a zip container
    assert not exporters.entries_to_document(_entries()).startswith(b"PK")


def test_sql_slot_round_trip() -> None:
    """Entries written through the SQL slot survive a fresh store."""
    storage = SlotStorage(url="sqlite:///:memory:")
    assert storage.read() is None
    clock = lambda: datetime(2024, 6, 10, 9, 0, 0)  # noqa: E731
    store = EntryStore(storage, clock=clock)
    store.add(Draft(title="Gait Study", url="http://example.com", tags=["gait", "gait"]))
    store.add(Draft(title="Second", url="http://example.org", category="Neurosciences"))
    reloaded = EntryStore(storage, clock=clock)
    reloaded.load()
    assert reloaded.entries == store.entries
    assert reloaded.entries[0].tags == ("gait", "gait")


def test_sql_slots_are_independent(monkeypatch) -> None:
    """Two slot names in the same database do not see each other."""
    monkeypatch.setenv("RESEARCH_TRACKER_SLOT", "otherEntries")
    first = SlotStorage(url="sqlite:///:memory:")
    second = SlotStorage(slot="researchEntries", engine=first.engine)
    assert first.slot == "otherEntries"
    first.write("[]")
    second.write('[{"id": "1"}]')
    first.write("[1]")
    assert first.read() == "[1]"
    assert second.read() == '[{"id": "1"}]'
