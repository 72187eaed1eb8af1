"""
Read exported entry files back into the tracker.

Only the tracker's own CSV export is supported: a header of the
serialised field names and one row per entry, with tags flattened to
a single cell.  Every cell is read as text so that ids such as
``1718000000000`` are not turned into numbers and empty cells stay
empty strings rather than NaN.
"""

from __future__ import annotations

import io
import json
import logging
import time
from datetime import date
from typing import Any, List, Optional

import pandas as pd  # type: ignore
from dateutil import parser as date_parser  # type: ignore

from .models import TAG_SEPARATOR, Entry

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('title', 'url')


def normalize_date(value: Any) -> Optional[str]:
    """Coerce a date cell into ``YYYY-MM-DD``.

    Returns ``None`` when the value is empty or cannot be parsed.
    """
    if value is None or pd.isna(value) or not str(value).strip():
        return None
    try:
        return date_parser.parse(str(value)).date().isoformat()
    except (ValueError, OverflowError):
        return None


def split_tags(value: Any) -> List[str]:
    """Decode a tags cell.

    Exports hold a JSON array.  Cells written by hand may instead list
    the tags separated by ``", "``.
    """
    if value is None or pd.isna(value) or not str(value).strip():
        return []
    text = str(value).strip()
    if text.startswith('['):
        try:
            tags = json.loads(text)
        except json.JSONDecodeError:
            tags = None
        if isinstance(tags, list):
            return [str(tag) for tag in tags]
    return text.split(TAG_SEPARATOR)


def parse_entries_csv(file_obj: io.IOBase) -> List[Entry]:
    """Parse a CSV export into entries.

    Rows without a title or url are dropped.  Rows without an id get a
    fresh millisecond id and rows without a usable date get today's.

    Raises:
        ValueError: if the title or url column is missing.
    """
    df = pd.read_csv(file_obj, dtype=str, keep_default_na=False)
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"CSV file is missing required columns: {', '.join(missing)}")
    entries: List[Entry] = []
    dropped = 0
    next_id = int(time.time() * 1000)
    for _, row in df.iterrows():
        title = row.get('title', '').strip()
        url = row.get('url', '').strip()
        if not title or not url:
            dropped += 1
            continue
        entry_id = row.get('id', '').strip()
        if not entry_id:
            entry_id = str(next_id)
            next_id += 1
        entries.append(Entry(
            id=entry_id,
            title=row['title'],
            url=row['url'],
            date=normalize_date(row.get('date')) or date.today().isoformat(),
            description=row.get('description', ''),
            evidence_level=row.get('evidenceLevel', ''),
            category=row.get('category', ''),
            notes=row.get('notes', ''),
            tags=tuple(split_tags(row.get('tags'))),
        ))
    if dropped:
        logger.warning(f"Dropped {dropped} rows without a title or url")
    logger.info(f"Parsed {len(entries)} entries from CSV")
    return entries
