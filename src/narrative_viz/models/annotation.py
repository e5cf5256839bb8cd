"""Annotation record entity - one coded line of an interview transcript."""

from pydantic import Field

from narrative_viz.models.base import NarrativeModel
from narrative_viz.models.tags import NARRATIVE_ELEMENTS, STORY_TYPES, TagKind, TagValue


class AnnotationRecord(NarrativeModel):
    """A single transcript line with its narrative codes.

    Line indexes are 1-based and assigned after filler lines are dropped,
    so they are contiguous across a transcript.
    """

    line_index: int = Field(..., ge=1, description="1-based position in the filtered transcript")
    text: str
    tags: frozenset[TagKind] = Field(default_factory=frozenset)
    values: dict[TagKind, str] = Field(
        default_factory=dict,
        description="Encoded cell value per tag: '2', '1' or ''",
    )
    details: dict[str, str] = Field(
        default_factory=dict,
        description="Supplementary codebook columns (hope, values, coding notes...)",
    )

    @property
    def word_count(self) -> int:
        """Number of whitespace-delimited tokens in the text."""
        return len(self.text.split())

    @property
    def story_types(self) -> frozenset[TagKind]:
        return self.tags & frozenset(STORY_TYPES)

    @property
    def narrative_elements(self) -> frozenset[TagKind]:
        return self.tags & frozenset(NARRATIVE_ELEMENTS)

    def has_tag(self, kind: TagKind) -> bool:
        """Check if the line is coded with a tag."""
        return kind in self.tags

    def value_of(self, kind: TagKind) -> str:
        """Encoded cell value for a tag ("" when the column was absent)."""
        return self.values.get(kind, TagValue.NOT_PRESENT)
