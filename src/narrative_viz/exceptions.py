"""Exceptions raised at the I/O and CLI boundary.

The normalizer, segmenter, filters and statistics never raise for data
content; a dropped filler line is a filtering decision, not an error.
"""


class NarrativeVizError(Exception):
    """Base class for narrative_viz errors."""


class StoryNotFoundError(NarrativeVizError):
    """A story name is not present in the catalog."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        choices = ", ".join(available) if available else "none configured"
        super().__init__(f"Unknown story: {name!r} (available: {choices})")


class StoryLoadError(NarrativeVizError):
    """A story file could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")
