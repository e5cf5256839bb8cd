"""Data models for narrative annotation comparison.

All entities use Pydantic for validation and serialization and are frozen:
records are produced once per loaded dataset and blocks are recomputed on
every render pass.
"""

from narrative_viz.models.base import NarrativeModel
from narrative_viz.models.tags import (
    NARRATIVE_ELEMENTS,
    STORY_TYPES,
    TAG_LABELS,
    TagKind,
    TagValue,
    dominant_story_type,
    dominant_tag,
    encode_value,
    is_present,
    tags_equal,
)
from narrative_viz.models.annotation import AnnotationRecord
from narrative_viz.models.block import Block, ComparisonBlock
from narrative_viz.models.story import Story

__all__ = [
    # Base
    "NarrativeModel",
    # Tags
    "TagKind",
    "TagValue",
    "TAG_LABELS",
    "STORY_TYPES",
    "NARRATIVE_ELEMENTS",
    "is_present",
    "encode_value",
    "tags_equal",
    "dominant_tag",
    "dominant_story_type",
    # Records
    "AnnotationRecord",
    # Blocks
    "Block",
    "ComparisonBlock",
    # Story
    "Story",
]
