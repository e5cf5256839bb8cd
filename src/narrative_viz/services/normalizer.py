"""Annotation Normalizer - maps raw spreadsheet rows to annotation records.

Responsible for:
- Resolving the varying column spellings used across coded transcripts
- Canonicalizing numeric and string tag encodings
- Trimming quote characters and whitespace from line text
- Dropping empty and filler lines and re-sequencing line indexes
"""

import logging
import re
from typing import Any, Iterable, Mapping, Optional, Sequence

from narrative_viz.models import AnnotationRecord, TagKind, encode_value, is_present


logger = logging.getLogger(__name__)


TEXT_ALIASES: tuple[str, ...] = ("Text", "text")

TAG_ALIASES: dict[TagKind, tuple[str, ...]] = {
    TagKind.SELF: ("Story of Self", "Story of Self (Origin)", "self"),
    TagKind.US: ("Story of Us", "us"),
    TagKind.NOW: ("Story of Now", "now"),
    TagKind.CHALLENGE: ("Challenge", "challenge"),
    TagKind.CHOICE: ("Choice", "choice"),
    TagKind.OUTCOME: ("Outcome", "outcome"),
}

# Exact-match filler utterances excluded from every transcript
FILLER_STOPLIST: frozenset[str] = frozenset({"Wow.", "Thank you.", "Absolutely."})

DETAIL_COLUMNS: dict[str, str] = {
    "specific_details": "Specific/Vivid Details",
    "hope": "Hope",
    "values": "Values",
    "vulnerability": "Vulnerability",
    "third_person_content": "Third-Person Content",
    "coding_notes": "Coding Notes",
}

_EDGE_QUOTES = re.compile(r"^[\"'\s]+|[\"'\s]+$")


def clean_text(value: Any) -> str:
    """Strip leading/trailing quote characters and whitespace."""
    if value is None:
        return ""
    return _EDGE_QUOTES.sub("", str(value)).strip()


def _first_present(row: Mapping[str, Any], aliases: Sequence[str]) -> tuple[bool, Any]:
    """Find the first alias whose key exists in the row, even if its value is empty."""
    for alias in aliases:
        if alias in row:
            return True, row[alias]
    return False, None


class AnnotationNormalizer:
    """Normalizes heterogeneous coded-transcript rows."""

    def __init__(
        self,
        text_aliases: Sequence[str] = TEXT_ALIASES,
        tag_aliases: Optional[Mapping[TagKind, Sequence[str]]] = None,
        stoplist: Iterable[str] = FILLER_STOPLIST,
        detail_columns: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the normalizer.

        Args:
            text_aliases: Header spellings for the line text, first match wins
            tag_aliases: Header spellings per tag kind, first match wins
            stoplist: Exact line texts to drop
            detail_columns: Supplementary field name -> header to carry along
        """
        self.text_aliases = tuple(text_aliases)
        self.tag_aliases = {
            kind: tuple(aliases)
            for kind, aliases in (tag_aliases or TAG_ALIASES).items()
        }
        self.stoplist = frozenset(stoplist)
        self.detail_columns = dict(detail_columns if detail_columns is not None else DETAIL_COLUMNS)

    def normalize(self, raw_row: Mapping[str, Any], index: int) -> Optional[AnnotationRecord]:
        """Map one raw row to an AnnotationRecord.

        Args:
            raw_row: Header -> cell value mapping (strings, numbers or None)
            index: 1-based line index to assign to the record

        Returns:
            The record, or None if the row is empty or a filler utterance
        """
        text = self.extract_text(raw_row)
        if self.is_excluded(text):
            return None

        tags = set()
        values = {}
        for kind, aliases in self.tag_aliases.items():
            _, value = _first_present(raw_row, aliases)
            values[kind] = encode_value(value)
            if is_present(value):
                tags.add(kind)

        details = {}
        for field_name, header in self.detail_columns.items():
            value = raw_row.get(header)
            details[field_name] = "" if value is None else str(value).strip()

        return AnnotationRecord(
            line_index=index,
            text=text,
            tags=frozenset(tags),
            values=values,
            details=details,
        )

    def normalize_rows(self, rows: Iterable[Mapping[str, Any]]) -> list[AnnotationRecord]:
        """Normalize a row sequence, numbering lines over the kept rows only.

        A dropped row shifts every subsequent line index down by one so the
        output stays contiguous from 1.
        """
        records: list[AnnotationRecord] = []
        for raw_position, row in enumerate(rows, start=1):
            record = self.normalize(row, len(records) + 1)
            if record is None:
                logger.debug(
                    "Dropped row %d with text %r", raw_position, self.extract_text(row)
                )
                continue
            records.append(record)
        return records

    def extract_text(self, raw_row: Mapping[str, Any]) -> str:
        """Cleaned line text from the first matching text column."""
        _, value = _first_present(raw_row, self.text_aliases)
        return clean_text(value)

    def is_excluded(self, text: str) -> bool:
        """Check if a cleaned line text is dropped from the transcript."""
        return not text or text in self.stoplist


_default_normalizer = AnnotationNormalizer()


def normalize(raw_row: Mapping[str, Any], index: int) -> Optional[AnnotationRecord]:
    """Normalize one row with the default column aliases and stoplist."""
    return _default_normalizer.normalize(raw_row, index)


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> list[AnnotationRecord]:
    """Normalize rows with the default aliases, re-sequencing line indexes."""
    return _default_normalizer.normalize_rows(rows)
