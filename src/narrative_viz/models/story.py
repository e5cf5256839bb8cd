"""Story entity - a loaded, normalized interview transcript."""

from typing import Optional

from pydantic import Field

from narrative_viz.models.annotation import AnnotationRecord
from narrative_viz.models.base import NarrativeModel


class Story(NarrativeModel):
    """A coded transcript loaded from one CSV file."""

    name: str
    source: Optional[str] = Field(None, description="Path of the CSV file the story was read from")
    records: list[AnnotationRecord] = Field(default_factory=list)

    @property
    def line_count(self) -> int:
        return len(self.records)

    @property
    def word_count(self) -> int:
        """Total words across all lines."""
        return sum(r.word_count for r in self.records)

    def get_record(self, line_index: int) -> Optional[AnnotationRecord]:
        """Get the record for a 1-based line index."""
        if 1 <= line_index <= len(self.records):
            return self.records[line_index - 1]
        return None
