"""Tests for tag value filters."""

import pytest
from pydantic import ValidationError

from narrative_viz.models import TagKind
from narrative_viz.services.filters import FILTER_OPTIONS, TagFilters
from narrative_viz.services.normalizer import normalize_rows
from narrative_viz.services.segmenter import segment


@pytest.fixture
def records():
    return normalize_rows([
        {"Text": "Very much self", "Story of Self": "2"},
        {"Text": "Somewhat self", "Story of Self": "1"},
        {"Text": "Not self", "Story of Self": "", "Choice": "1"},
        {"Text": "Numeric self", "Story of Self": 1},
    ])


class TestTagFilters:
    """Tests for TagFilters matching."""

    def test_default_matches_everything(self, records):
        filters = TagFilters()

        assert not filters.is_active
        assert filters.apply(records) == records

    def test_exact_value_match(self, records):
        """A "2" filter does not match "1" lines."""
        filters = TagFilters.from_pairs(["self=2"])

        assert filters.is_active
        assert [r.text for r in filters.apply(records)] == ["Very much self"]

    def test_somewhat_includes_numeric_one(self, records):
        filters = TagFilters.from_pairs(["self=1"])
        assert [r.text for r in filters.apply(records)] == ["Somewhat self", "Numeric self"]

    def test_not_present_filter(self, records):
        filters = TagFilters.from_pairs(["self=0"])
        assert [r.text for r in filters.apply(records)] == ["Not self"]

    def test_filters_combine(self, records):
        filters = TagFilters.from_pairs(["self=", "choice=1"])
        assert [r.text for r in filters.apply(records)] == ["Not self"]

        filters = TagFilters.from_pairs(["self=2", "choice=1"])
        assert filters.apply(records) == []

    def test_case_insensitive_tag_names(self):
        filters = TagFilters.from_pairs(["NOW=2"])
        assert filters.value_for(TagKind.NOW) == "2"

    def test_malformed_pair(self):
        with pytest.raises(ValueError, match="expected TAG=VALUE"):
            TagFilters.from_pairs(["self"])

    def test_unknown_tag(self):
        with pytest.raises(ValueError, match="Unknown tag"):
            TagFilters.from_pairs(["hope=1"])

    def test_invalid_value(self):
        with pytest.raises(ValidationError):
            TagFilters.from_pairs(["self=3"])

    def test_describe(self):
        assert TagFilters().describe() == "none"
        assert TagFilters.from_pairs(["self=2", "choice=0"]).describe() == "self=2, choice=0"

    def test_block_matches_uses_opening_line(self, records):
        """A block is in filter when the line that opens it matches."""
        blocks = segment(records)
        # Lines 1-2 merge (both present for Self), 3 and 4 are separate runs
        assert [b.range_label for b in blocks] == ["1-2", "3-3", "4-4"]

        very_much = TagFilters.from_pairs(["self=2"])
        assert very_much.block_matches(blocks[0], records)

        somewhat = TagFilters.from_pairs(["self=1"])
        assert not somewhat.block_matches(blocks[0], records)
        assert somewhat.block_matches(blocks[2], records)

    def test_block_matches_indexes_numbered_records(self, records):
        """Records numbered 1..N are looked up directly, without a scan."""

        class NoScan(list):
            def __iter__(self):
                raise AssertionError("records were scanned")

        blocks = segment(records)
        filters = TagFilters.from_pairs(["choice=1"])

        assert filters.block_matches(blocks[1], NoScan(records))
        assert not filters.block_matches(blocks[2], NoScan(records))

    def test_block_matches_renumbered_subset(self, records):
        blocks = segment(records)
        subset = records[1:]
        filters = TagFilters.from_pairs(["choice=1"])

        assert filters.block_matches(blocks[1], subset)
        assert not filters.block_matches(blocks[0], subset)


class TestFilterOptions:
    def test_option_order(self):
        assert [value for value, _ in FILTER_OPTIONS] == ["all", "2", "1", ""]
        assert dict(FILTER_OPTIONS)[""] == "Not Present (0)"
