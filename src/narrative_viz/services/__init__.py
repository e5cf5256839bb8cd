"""Services for narrative annotation comparison.

Components:
- AnnotationNormalizer: Raw spreadsheet rows to annotation records
- RunSegmenter: Run-length blocks and aligned comparison blocks
- TagFilters: Exact-value filtering of records and blocks
- compute_statistics / compare_annotations: Tag distribution and agreement
- StoryCatalog: Named transcript CSV files
- DashboardRenderer: HTML dashboard and SVG timeline export
"""

from narrative_viz.services.normalizer import AnnotationNormalizer, normalize, normalize_rows
from narrative_viz.services.segmenter import (
    RunSegmenter,
    blocks_overlapping,
    cumulative_total,
    display_coordinate,
    find_block_for_line,
    segment,
    segment_aligned,
)
from narrative_viz.services.filters import FILTER_OPTIONS, TagFilters
from narrative_viz.services.statistics import (
    AgreementStatistics,
    StoryStatistics,
    compare_annotations,
    compute_statistics,
)
from narrative_viz.services.story_loader import StoryCatalog, load_story, read_rows
from narrative_viz.services.dashboard import DashboardRenderer

__all__ = [
    "AnnotationNormalizer",
    "normalize",
    "normalize_rows",
    "RunSegmenter",
    "segment",
    "segment_aligned",
    "cumulative_total",
    "display_coordinate",
    "find_block_for_line",
    "blocks_overlapping",
    "TagFilters",
    "FILTER_OPTIONS",
    "StoryStatistics",
    "AgreementStatistics",
    "compute_statistics",
    "compare_annotations",
    "StoryCatalog",
    "load_story",
    "read_rows",
    "DashboardRenderer",
]
