"""Tag value filters for the transcript table and timeline highlighting.

A filter compares encoded cell values exactly: "2" (very much) does not
match "1" (somewhat), even though both count as present for tag sets.
"""

from typing import Iterable, Literal, Sequence, Union

from pydantic import Field

from narrative_viz.models import (
    AnnotationRecord,
    Block,
    ComparisonBlock,
    NarrativeModel,
    TagKind,
    TagValue,
)


ALL = "all"

FilterValue = Literal["all", "2", "1", ""]

FILTER_OPTIONS: tuple[tuple[str, str], ...] = (
    (ALL, "All"),
    (TagValue.VERY_MUCH, "Very Much (2)"),
    (TagValue.SOMEWHAT, "Somewhat (1)"),
    (TagValue.NOT_PRESENT, "Not Present (0)"),
)


class TagFilters(NarrativeModel):
    """Per-tag value filters; "all" leaves a tag unconstrained."""

    criteria: dict[TagKind, FilterValue] = Field(
        default_factory=lambda: {kind: ALL for kind in TagKind}
    )

    @classmethod
    def from_pairs(cls, pairs: Iterable[str]) -> "TagFilters":
        """Build filters from "tag=value" strings, e.g. ["self=2", "choice="].

        A value of "0" is accepted as an alias for "" (not present).

        Raises:
            ValueError: If a pair is malformed or names an unknown tag
        """
        criteria: dict[TagKind, str] = {kind: ALL for kind in TagKind}
        for pair in pairs:
            if "=" not in pair:
                raise ValueError(f"Invalid filter {pair!r}, expected TAG=VALUE")
            name, value = pair.split("=", 1)
            try:
                kind = TagKind(name.strip().lower())
            except ValueError:
                choices = ", ".join(k.value for k in TagKind)
                raise ValueError(f"Unknown tag {name!r} (expected one of: {choices})")
            value = value.strip()
            criteria[kind] = TagValue.NOT_PRESENT if value == "0" else value
        return cls(criteria=criteria)

    def value_for(self, kind: TagKind) -> str:
        return self.criteria.get(kind, ALL)

    @property
    def is_active(self) -> bool:
        """True if at least one tag is constrained."""
        return any(value != ALL for value in self.criteria.values())

    def matches(self, record: AnnotationRecord) -> bool:
        """Check if a record's encoded values satisfy every constrained tag."""
        for kind, value in self.criteria.items():
            if value != ALL and record.value_of(kind) != value:
                return False
        return True

    def apply(self, records: Sequence[AnnotationRecord]) -> list[AnnotationRecord]:
        """Records matching the filters, in their original order."""
        return [r for r in records if self.matches(r)]

    def block_matches(
        self,
        block: Union[Block, ComparisonBlock],
        records: Sequence[AnnotationRecord],
    ) -> bool:
        """Check if a block is in filter, judged by the line that opens it."""
        # Normalized records are numbered 1..N
        position = block.start_index - 1
        if 0 <= position < len(records) and records[position].line_index == block.start_index:
            return self.matches(records[position])
        for record in records:
            if record.line_index == block.start_index:
                return self.matches(record)
        return False

    def describe(self) -> str:
        """Short summary of the active constraints, e.g. "self=2, choice=0"."""
        parts = [
            f"{kind.value}={value or '0'}"
            for kind, value in self.criteria.items()
            if value != ALL
        ]
        return ", ".join(parts) if parts else "none"
