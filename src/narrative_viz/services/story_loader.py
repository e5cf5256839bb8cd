"""Story Loader - reads coded transcript CSV files into stories.

Responsible for:
- Parsing header-row CSV files into raw row mappings
- Normalizing rows into annotation records
- Resolving configured story names to files
"""

import csv
import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from narrative_viz.exceptions import StoryLoadError, StoryNotFoundError
from narrative_viz.models import Story
from narrative_viz.services.normalizer import AnnotationNormalizer


logger = logging.getLogger(__name__)


def read_rows(path: Union[str, Path]) -> list[dict[str, str]]:
    """Read a CSV file with a header row.

    Rows whose cells are all empty are skipped. A UTF-8 byte order mark
    is tolerated.

    Raises:
        StoryLoadError: If the file cannot be read or decoded
    """
    path = Path(path)
    try:
        with path.open(newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            rows = [
                row for row in reader
                if any((value or "").strip() for value in row.values() if isinstance(value, str))
            ]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise StoryLoadError(str(path), str(e))

    return rows


def load_story(
    path: Union[str, Path],
    name: Optional[str] = None,
    normalizer: Optional[AnnotationNormalizer] = None,
) -> Story:
    """Load and normalize one coded transcript.

    Args:
        path: CSV file path
        name: Story name (default: the file stem)
        normalizer: Normalizer to use (default: standard aliases and stoplist)

    Returns:
        Story with re-sequenced annotation records
    """
    path = Path(path)
    name = name or path.stem
    normalizer = normalizer or AnnotationNormalizer()

    rows = read_rows(path)
    logger.info("Loading %s: %d raw rows from %s", name, len(rows), path)
    if rows:
        logger.debug("Column headers for %s: %s", name, list(rows[0].keys()))

    records = normalizer.normalize_rows(rows)
    logger.info("Processed %s: %d rows kept", name, len(records))
    if rows and not records:
        logger.warning("%s has 0 rows after processing; first raw row: %s", name, rows[0])

    return Story(name=name, source=str(path), records=records)


class StoryCatalog:
    """Named collection of coded transcript files."""

    def __init__(
        self,
        stories: Mapping[str, Union[str, Path]],
        data_dir: Optional[Union[str, Path]] = None,
        normalizer: Optional[AnnotationNormalizer] = None,
    ):
        """Initialize the catalog.

        Args:
            stories: Story name -> CSV path (relative paths resolve against data_dir)
            data_dir: Base directory for relative paths (default: current directory)
            normalizer: Normalizer shared by all loads
        """
        self.data_dir = Path(data_dir) if data_dir else Path(".")
        self.stories = dict(stories)
        self.normalizer = normalizer or AnnotationNormalizer()

    @classmethod
    def from_settings(cls, settings) -> "StoryCatalog":
        """Build a catalog from application settings."""
        return cls(settings.stories, data_dir=settings.data_dir)

    def names(self) -> list[str]:
        """Story names in configuration order."""
        return list(self.stories)

    def get_path(self, name: str) -> Path:
        """Resolve the CSV path of a story.

        Raises:
            StoryNotFoundError: If the name is not in the catalog
        """
        if name not in self.stories:
            raise StoryNotFoundError(name, self.names())
        path = Path(self.stories[name])
        return path if path.is_absolute() else self.data_dir / path

    def load(self, name: str) -> Story:
        """Load one story by name."""
        return load_story(self.get_path(name), name=name, normalizer=self.normalizer)

    def load_all(self) -> dict[str, Story]:
        """Load every story in the catalog.

        Raises:
            StoryLoadError: On the first file that cannot be read
        """
        stories = {name: self.load(name) for name in self.names()}
        logger.info("All stories loaded: %s", ", ".join(stories))
        return stories
