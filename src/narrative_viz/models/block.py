"""Block entities - runs of consecutive lines sharing identical tags."""

from typing import Optional

from pydantic import Field, model_validator

from narrative_viz.models.base import NarrativeModel
from narrative_viz.models.tags import TagKind, dominant_story_type, dominant_tag


class _LineRange(NarrativeModel):
    """Inclusive range of transcript line indexes."""

    start_index: int = Field(..., ge=1)
    end_index: int = Field(..., ge=1)
    text: str = ""
    word_count: int = Field(0, ge=0)
    position: int = Field(0, ge=0, description="Cumulative word offset of the block start")

    @model_validator(mode="after")
    def validate_range(self) -> "_LineRange":
        """Ensure start_index <= end_index."""
        if self.start_index > self.end_index:
            raise ValueError("start_index must be <= end_index")
        return self

    @property
    def line_count(self) -> int:
        return self.end_index - self.start_index + 1

    @property
    def range_label(self) -> str:
        """Range as shown in tooltips, e.g. "3-7"."""
        return f"{self.start_index}-{self.end_index}"

    def contains_line(self, line_index: int) -> bool:
        return self.start_index <= line_index <= self.end_index

    def overlaps(self, start: int, end: int) -> bool:
        """Check if any line of this block falls within [start, end]."""
        return self.start_index <= end and self.end_index >= start


class Block(_LineRange):
    """Maximal run of consecutive lines with an identical tag set."""

    tags: frozenset[TagKind] = Field(default_factory=frozenset)

    @property
    def dominant_tag(self) -> Optional[TagKind]:
        return dominant_tag(self.tags)

    @property
    def dominant_story_type(self) -> Optional[TagKind]:
        return dominant_story_type(self.tags)


class ComparisonBlock(_LineRange):
    """Run of aligned lines where neither annotation sequence changes tags.

    Text and word counts come from the primary sequence.
    """

    primary_tags: frozenset[TagKind] = Field(default_factory=frozenset)
    secondary_tags: frozenset[TagKind] = Field(default_factory=frozenset)

    @property
    def agrees(self) -> bool:
        """True if both annotators coded the block identically."""
        return self.primary_tags == self.secondary_tags

    @property
    def disputed_tags(self) -> frozenset[TagKind]:
        """Tags present in exactly one of the two sequences."""
        return self.primary_tags ^ self.secondary_tags
