"""
Export the entry collection as downloadable files.

Two formats are produced from the full, unfiltered collection:

* CSV, one row per entry with a header of the serialised field
  names.  Tags are written to one cell as a JSON array so that a tag
  containing a comma reads back unchanged.
* A plain text report offered under a ``.docx`` name and the
  word-processing MIME type.  The bytes are plain UTF-8 text, not an
  Office Open XML package, so software that validates the container
  will refuse to open it.  Word and LibreOffice fall back to reading
  it as text.

Both functions return bytes ready for ``st.download_button``.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable, List

import pandas as pd  # type: ignore

from .models import ENTRY_FIELDS, TAG_SEPARATOR, Entry

logger = logging.getLogger(__name__)

CSV_FILENAME = 'recherches_biomedicales.csv'
CSV_MIME = 'text/csv'
DOCUMENT_FILENAME = 'recherches_biomedicales.docx'
DOCUMENT_MIME = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
DOCUMENT_HEADING = 'JOURNAL DE RECHERCHE BIOMÉDICALE'


def entries_to_dataframe(entries: Iterable[Entry]) -> pd.DataFrame:
    """Tabulate entries with tags encoded as a JSON array per cell."""
    rows = []
    for entry in entries:
        row = entry.to_dict()
        row['tags'] = json.dumps(list(entry.tags), ensure_ascii=False)
        rows.append(row)
    return pd.DataFrame(rows, columns=list(ENTRY_FIELDS))


def entries_to_csv(entries: Iterable[Entry]) -> bytes:
    """Serialise entries as UTF-8 CSV with a header row."""
    df = entries_to_dataframe(entries)
    data = df.to_csv(index=False).encode('utf-8')
    logger.info(f"Exported {len(df)} entries to CSV ({len(data)} bytes)")
    return data


def entries_to_document(entries: Iterable[Entry]) -> bytes:
    """Build the numbered plain text report."""
    lines: List[str] = [DOCUMENT_HEADING, '']
    count = 0
    for index, entry in enumerate(entries, start=1):
        count = index
        lines.extend([
            f"{index}. {entry.title.upper()}",
            f"URL: {entry.url}",
            f"Date: {entry.date}",
            f"Catégorie: {entry.category}",
            f"Niveau de preuve: {entry.evidence_level}",
            f"Description: {entry.description}",
            f"Notes: {entry.notes}",
            f"Tags: {TAG_SEPARATOR.join(entry.tags)}",
            '',
        ])
    data = ('\n'.join(lines) + '\n').encode('utf-8')
    logger.info(f"Exported {count} entries to text document ({len(data)} bytes)")
    return data
