"""Tag kinds and pure tag-set helpers shared by the core and renderers."""

from enum import Enum
from typing import Iterable, Optional, Union


class TagKind(str, Enum):
    """Annotation tags coded per transcript line."""

    SELF = "self"
    US = "us"
    NOW = "now"
    CHALLENGE = "challenge"
    CHOICE = "choice"
    OUTCOME = "outcome"

    @property
    def label(self) -> str:
        """Human-readable codebook label."""
        return TAG_LABELS[self]

    @property
    def is_story_type(self) -> bool:
        return self in STORY_TYPES


class TagValue:
    """Codebook value encoding for a single tag cell."""

    VERY_MUCH = "2"
    SOMEWHAT = "1"
    NOT_PRESENT = ""

    PRESENT = (VERY_MUCH, SOMEWHAT)


TAG_LABELS = {
    TagKind.SELF: "Story of Self",
    TagKind.US: "Story of Us",
    TagKind.NOW: "Story of Now",
    TagKind.CHALLENGE: "Challenge",
    TagKind.CHOICE: "Choice",
    TagKind.OUTCOME: "Outcome",
}

STORY_TYPES = (TagKind.SELF, TagKind.US, TagKind.NOW)
NARRATIVE_ELEMENTS = (TagKind.CHALLENGE, TagKind.CHOICE, TagKind.OUTCOME)

# Highest priority first
STORY_TYPE_PRIORITY = (TagKind.NOW, TagKind.US, TagKind.SELF)
NARRATIVE_ELEMENT_PRIORITY = (TagKind.CHALLENGE, TagKind.CHOICE, TagKind.OUTCOME)

RawValue = Union[str, int, float, None]


def is_present(value: RawValue) -> bool:
    """Return True if a raw cell value marks its tag as present.

    Numeric 1 is present and any other number is absent. Strings "1" and
    "2" are present; "0", empty and anything else are absent. None is absent.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() in TagValue.PRESENT
    if isinstance(value, (int, float)):
        return value == 1
    return False


def encode_value(value: RawValue) -> str:
    """Canonicalize a raw cell value to the "2" / "1" / "" encoding.

    The encoding agrees with is_present(): a value is present exactly when
    its encoding is non-empty.
    """
    if value is None:
        return TagValue.NOT_PRESENT
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped in TagValue.PRESENT else TagValue.NOT_PRESENT
    if isinstance(value, (int, float)) and value == 1:
        return TagValue.SOMEWHAT
    return TagValue.NOT_PRESENT


def tags_equal(a: Iterable[TagKind], b: Iterable[TagKind]) -> bool:
    """Set equality of two tag collections, ignoring order and duplicates."""
    return frozenset(a) == frozenset(b)


def dominant_story_type(tags: Iterable[TagKind]) -> Optional[TagKind]:
    """Highest-priority story type in a tag set (Now > Us > Self)."""
    present = frozenset(tags)
    for kind in STORY_TYPE_PRIORITY:
        if kind in present:
            return kind
    return None


def dominant_tag(tags: Iterable[TagKind]) -> Optional[TagKind]:
    """Single representative tag for coloring or categorizing a tag set.

    Story types win over narrative elements (Now > Us > Self, then
    Challenge > Choice > Outcome). Returns None for an empty tag set, which
    renderers map to their neutral default.
    """
    present = frozenset(tags)
    story = dominant_story_type(present)
    if story is not None:
        return story
    for kind in NARRATIVE_ELEMENT_PRIORITY:
        if kind in present:
            return kind
    return None
