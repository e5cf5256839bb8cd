"""Story statistics - tag distribution and annotator agreement."""

from dataclasses import dataclass, field
from typing import Sequence

from narrative_viz.models import (
    NARRATIVE_ELEMENTS,
    STORY_TYPES,
    AnnotationRecord,
    TagKind,
)


def _percent(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return count / total * 100


@dataclass
class StoryStatistics:
    """Share of lines (0-100) carrying each tag."""

    total_lines: int
    total_words: int
    tag_percentages: dict[TagKind, float] = field(default_factory=dict)
    no_story_type: float = 0.0
    no_narrative_element: float = 0.0

    def percentage(self, kind: TagKind) -> float:
        return self.tag_percentages.get(kind, 0.0)


@dataclass
class AgreementStatistics:
    """Agreement between two annotations of the same transcript.

    Rates are computed over the aligned prefix only; compare the line
    counts to see whether either sequence was truncated.
    """

    aligned_lines: int
    primary_lines: int
    secondary_lines: int
    tag_agreement: dict[TagKind, float] = field(default_factory=dict)
    exact_agreement: float = 0.0

    @property
    def truncated(self) -> bool:
        """True if the two sequences had different lengths."""
        return self.primary_lines != self.secondary_lines


def compute_statistics(records: Sequence[AnnotationRecord]) -> StoryStatistics:
    """Compute the tag distribution of a transcript.

    Args:
        records: Annotation records of one story

    Returns:
        StoryStatistics; all zeros for an empty transcript
    """
    total = len(records)
    tag_percentages = {
        kind: _percent(sum(1 for r in records if kind in r.tags), total)
        for kind in TagKind
    }
    story_types = frozenset(STORY_TYPES)
    narrative_elements = frozenset(NARRATIVE_ELEMENTS)

    return StoryStatistics(
        total_lines=total,
        total_words=sum(r.word_count for r in records),
        tag_percentages=tag_percentages,
        no_story_type=_percent(
            sum(1 for r in records if not (r.tags & story_types)), total
        ),
        no_narrative_element=_percent(
            sum(1 for r in records if not (r.tags & narrative_elements)), total
        ),
    )


def compare_annotations(
    primary: Sequence[AnnotationRecord],
    secondary: Sequence[AnnotationRecord],
) -> AgreementStatistics:
    """Compare two annotation sequences line by line.

    Args:
        primary: First annotation (e.g. model output)
        secondary: Second annotation of the same lines (e.g. human coder)

    Returns:
        AgreementStatistics over the first min(len) lines
    """
    aligned = min(len(primary), len(secondary))
    pairs = list(zip(primary[:aligned], secondary[:aligned]))

    tag_agreement = {
        kind: _percent(
            sum(1 for p, s in pairs if (kind in p.tags) == (kind in s.tags)), aligned
        )
        for kind in TagKind
    }

    return AgreementStatistics(
        aligned_lines=aligned,
        primary_lines=len(primary),
        secondary_lines=len(secondary),
        tag_agreement=tag_agreement,
        exact_agreement=_percent(sum(1 for p, s in pairs if p.tags == s.tags), aligned),
    )
