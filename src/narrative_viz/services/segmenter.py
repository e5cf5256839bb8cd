"""Run Segmenter - merges consecutive equally-coded lines into blocks.

Responsible for:
- Run-length segmentation of a single annotation sequence
- Aligned segmentation of two parallel sequences (e.g. model vs human)
- Word-weighted cumulative positions for proportional layout
- Locating blocks for hovered lines and ranges
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, TypeVar

from narrative_viz.models import AnnotationRecord, Block, ComparisonBlock, TagKind


B = TypeVar("B", Block, ComparisonBlock)


@dataclass
class _Run:
    """Mutable accumulator for the block being scanned."""

    start_index: int
    end_index: int
    tags: frozenset[TagKind]
    secondary_tags: frozenset[TagKind] = frozenset()
    texts: list[str] = field(default_factory=list)
    word_count: int = 0

    def extend(self, record: AnnotationRecord) -> None:
        self.end_index = record.line_index
        self.texts.append(record.text)
        self.word_count += record.word_count

    @property
    def text(self) -> str:
        return " ".join(self.texts)


def _open_run(
    record: AnnotationRecord,
    secondary_tags: frozenset[TagKind] = frozenset(),
) -> _Run:
    return _Run(
        start_index=record.line_index,
        end_index=record.line_index,
        tags=record.tags,
        secondary_tags=secondary_tags,
        texts=[record.text],
        word_count=record.word_count,
    )


def segment(records: Sequence[AnnotationRecord]) -> list[Block]:
    """Merge consecutive records with identical tag sets into blocks.

    Records without words are skipped since they would collapse to zero
    width. A boundary is drawn whenever any tag differs from the open
    block's tag set.

    Args:
        records: Annotation records in line order

    Returns:
        Contiguous, non-overlapping blocks with cumulative word positions
    """
    runs: list[_Run] = []
    current: Optional[_Run] = None

    for record in records:
        if record.word_count == 0:
            continue
        if current is None or record.tags != current.tags:
            if current is not None:
                runs.append(current)
            current = _open_run(record)
        else:
            current.extend(record)

    if current is not None:
        runs.append(current)

    blocks = []
    position = 0
    for run in runs:
        blocks.append(Block(
            start_index=run.start_index,
            end_index=run.end_index,
            tags=run.tags,
            text=run.text,
            word_count=run.word_count,
            position=position,
        ))
        position += run.word_count
    return blocks


def segment_aligned(
    primary: Sequence[AnnotationRecord],
    secondary: Sequence[AnnotationRecord],
) -> list[ComparisonBlock]:
    """Segment two parallel annotation sequences of the same transcript.

    Only the first min(len(primary), len(secondary)) positions are
    compared; the longer sequence's tail is ignored without error. A
    boundary is opened whenever either sequence changes its tag set. Text,
    line indexes and word counts come from the primary sequence.

    Args:
        primary: Annotation records whose text is displayed (e.g. model)
        secondary: Parallel records coding the same lines (e.g. human)

    Returns:
        Comparison blocks carrying both tag sets
    """
    aligned = min(len(primary), len(secondary))
    runs: list[_Run] = []
    current: Optional[_Run] = None

    for i in range(aligned):
        p = primary[i]
        s = secondary[i]
        if current is None or p.tags != current.tags or s.tags != current.secondary_tags:
            if current is not None:
                runs.append(current)
            current = _open_run(p, secondary_tags=s.tags)
        else:
            current.extend(p)

    if current is not None:
        runs.append(current)

    blocks = []
    position = 0
    for run in runs:
        blocks.append(ComparisonBlock(
            start_index=run.start_index,
            end_index=run.end_index,
            primary_tags=run.tags,
            secondary_tags=run.secondary_tags,
            text=run.text,
            word_count=run.word_count,
            position=position,
        ))
        position += run.word_count
    return blocks


def cumulative_total(blocks: Sequence[Block | ComparisonBlock]) -> int:
    """Total words across all blocks (the layout scale's domain maximum)."""
    return sum(b.word_count for b in blocks)


def display_coordinate(position: float, total: float, width: float) -> float:
    """Map a word offset onto a display axis of the given width.

    Linear scale from [0, total] to [0, width]. An empty transcript
    (total of 0) maps everything to 0.
    """
    if total <= 0:
        return 0.0
    return position / total * width


def find_block_for_line(blocks: Sequence[B], line_index: int) -> Optional[B]:
    """Find the block containing a 1-based line index."""
    for block in blocks:
        if block.contains_line(line_index):
            return block
    return None


def blocks_overlapping(blocks: Sequence[B], start: int, end: int) -> list[B]:
    """Blocks with at least one line inside the inclusive range [start, end]."""
    return [b for b in blocks if b.overlaps(start, end)]


class RunSegmenter:
    """Segments annotation sequences and lays blocks out on a display axis."""

    def __init__(self, display_width: float = 1030):
        """Initialize the segmenter.

        Args:
            display_width: Width in pixels of the axis blocks are mapped onto
        """
        self.display_width = display_width

    def segment(self, records: Sequence[AnnotationRecord]) -> list[Block]:
        return segment(records)

    def segment_aligned(
        self,
        primary: Sequence[AnnotationRecord],
        secondary: Sequence[AnnotationRecord],
    ) -> list[ComparisonBlock]:
        return segment_aligned(primary, secondary)

    def layout(self, blocks: Sequence[B]) -> list[tuple[B, float, float]]:
        """Compute (block, x, width) for every block on the display axis.

        Widths are word-count weighted, so the blocks tile the full axis.
        """
        total = cumulative_total(blocks)
        return [
            (
                block,
                display_coordinate(block.position, total, self.display_width),
                display_coordinate(block.word_count, total, self.display_width),
            )
            for block in blocks
        ]
