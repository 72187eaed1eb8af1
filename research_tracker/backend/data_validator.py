"""
Validation for research entries.

Drafts are checked before the store accepts them and persisted
records are checked when the saved collection is loaded back.  The
checks are deliberately shallow: ``title`` and ``url`` must be
present and the two closed enumerations (category and evidence level)
must either be left empty or hold one of their fixed values.  URLs
are free text and are not parsed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from .models import CATEGORIES, EVIDENCE_LEVELS, Draft

logger = logging.getLogger(__name__)


class EntryValidationError(ValueError):
    """Raised when a draft cannot become an entry.

    ``issues`` holds one human readable message per failed check so the
    UI can list them under the form.
    """

    def __init__(self, issues: List[str]) -> None:
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))


class EntryValidator:
    """Check drafts and persisted records.

    The validator keeps running counts of what it has seen, in the
    same spirit as a data quality report: ``stats['rejected']`` grows
    each time a draft or record fails.
    """

    def __init__(self) -> None:
        self.stats: Dict[str, int] = {
            'checked': 0,
            'rejected': 0,
        }

    def validate_draft(self, draft: Draft) -> List[str]:
        """Return the list of problems with ``draft`` (empty if valid)."""
        issues: List[str] = []
        if not draft.title.strip():
            issues.append('Le titre est obligatoire')
        if not draft.url.strip():
            issues.append("L'URL est obligatoire")
        issues.extend(self._check_enumerations(draft.category, draft.evidence_level))
        self._count(issues)
        return issues

    def check_draft(self, draft: Draft) -> None:
        """Raise :class:`EntryValidationError` if ``draft`` is invalid."""
        issues = self.validate_draft(draft)
        if issues:
            raise EntryValidationError(issues)

    def validate_record(self, record: Any) -> List[str]:
        """Validate one serialised entry read back from storage or an import."""
        if not isinstance(record, dict):
            issues = [f'Expected an object, got {type(record).__name__}']
            self._count(issues)
            return issues
        issues = []
        for key in ('id', 'title', 'url'):
            value = record.get(key)
            if value is None or not str(value).strip():
                issues.append(f'Missing {key}')
        tags = record.get('tags', [])
        if tags is not None and not isinstance(tags, list):
            issues.append('tags must be a list')
        issues.extend(self._check_enumerations(
            str(record.get('category') or ''),
            str(record.get('evidenceLevel') or ''),
        ))
        self._count(issues)
        return issues

    @staticmethod
    def _check_enumerations(category: str, evidence_level: str) -> List[str]:
        issues: List[str] = []
        if category and category not in CATEGORIES:
            issues.append(f'Catégorie inconnue : {category}')
        if evidence_level and evidence_level not in EVIDENCE_LEVELS:
            issues.append(f'Niveau de preuve inconnu : {evidence_level}')
        return issues

    def _count(self, issues: List[str]) -> None:
        self.stats['checked'] += 1
        if issues:
            self.stats['rejected'] += 1
            logger.debug(f"Validation failed: {issues}")
