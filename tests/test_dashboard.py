"""Tests for the DashboardRenderer service."""

import tempfile
from pathlib import Path

import pytest

from narrative_viz.models import Story
from narrative_viz.services.dashboard import DashboardRenderer
from narrative_viz.services.filters import TagFilters
from narrative_viz.services.normalizer import normalize_rows


@pytest.fixture
def renderer():
    return DashboardRenderer(display_width=100)


@pytest.fixture
def story():
    """Two Self lines followed by a Now line with a choice."""
    return Story(
        name="Tim 1",
        records=normalize_rows([
            {"Text": "Hello world", "Story of Self": "1", "Challenge": "2"},
            {"Text": "again now", "Story of Self": "1", "Challenge": "1"},
            {"Text": "different", "Story of Now": "1", "Choice": "1"},
        ]),
    )


@pytest.fixture
def human_story():
    return Story(
        name="Human",
        records=normalize_rows([
            {"Text": "Hello world", "Story of Self": "1", "Challenge": "1"},
            {"Text": "again now", "Story of Us": "1"},
            {"Text": "different", "Story of Now": "1", "Choice": "1"},
        ]),
    )


class TestPrepareTimelineData:
    """Tests for timeline data preparation."""

    def test_single_lane_bars(self, renderer, story):
        data = renderer.prepare_timeline_data(story)

        assert len(data["lanes"]) == 1
        bars = data["lanes"][0]["bars"]
        assert [b["range"] for b in bars] == ["1-2", "3-3"]

    def test_bar_geometry_is_word_weighted(self, renderer, story):
        bars = renderer.prepare_timeline_data(story)["lanes"][0]["bars"]

        # 4 of 5 words in the first block, with a 1px gap between bars
        assert bars[0]["x"] == pytest.approx(1)
        assert bars[0]["width"] == pytest.approx(79)
        assert bars[1]["x"] == pytest.approx(81)
        assert bars[1]["width"] == pytest.approx(19)

    def test_colors_and_overlays(self, renderer, story):
        bars = renderer.prepare_timeline_data(story)["lanes"][0]["bars"]

        assert bars[0]["story_type"] == "self"
        assert bars[0]["color"] == "#8b00ff"
        assert bars[0]["overlays"] == ["challenge"]
        assert bars[1]["color"] == "#ffd700"
        assert bars[1]["overlays"] == ["choice"]

    def test_untagged_block_has_no_color(self, renderer):
        story = Story(name="plain", records=normalize_rows([{"Text": "nothing here"}]))
        bar = renderer.prepare_timeline_data(story)["lanes"][0]["bars"][0]

        assert bar["dominant"] is None
        assert bar["color"] is None
        assert bar["overlays"] == []

    def test_element_only_block_drawn_gray(self, renderer):
        story = Story(
            name="elements",
            records=normalize_rows([{"Text": "we chose", "Challenge": "2", "Choice": "1"}]),
        )
        bar = renderer.prepare_timeline_data(story)["lanes"][0]["bars"][0]

        assert bar["dominant"] == "challenge"
        assert bar["story_type"] == "gray"
        assert bar["color"] == DashboardRenderer.NEUTRAL_COLOR
        assert bar["overlays"] == ["challenge", "choice"]

    def test_story_type_outranks_elements(self, renderer, story):
        bars = renderer.prepare_timeline_data(story)["lanes"][0]["bars"]

        assert bars[0]["dominant"] == "self"
        assert bars[1]["dominant"] == "now"

    def test_default_opacity_in_filter(self, renderer, story):
        bars = renderer.prepare_timeline_data(story)["lanes"][0]["bars"]
        assert all(b["opacity"] == DashboardRenderer.OPACITY_IN_FILTER for b in bars)

    def test_filtered_out_blocks_dimmed(self, renderer, story):
        filters = TagFilters.from_pairs(["now=1"])
        bars = renderer.prepare_timeline_data(story, filters=filters)["lanes"][0]["bars"]

        assert bars[0]["opacity"] == DashboardRenderer.OPACITY_FILTERED_OUT
        assert bars[1]["opacity"] == DashboardRenderer.OPACITY_IN_FILTER

    def test_filter_hides_table_rows(self, renderer, story):
        filters = TagFilters.from_pairs(["now=1"])
        rows = renderer.prepare_timeline_data(story, filters=filters)["rows"]

        assert [r["line"] for r in rows] == [3]

    def test_hovered_range_highlights(self, renderer, story):
        data = renderer.prepare_timeline_data(story, hovered=(2, 2))
        bars = data["lanes"][0]["bars"]

        assert bars[0]["hovered"]
        assert bars[0]["opacity"] == DashboardRenderer.OPACITY_HOVERED
        assert not bars[1]["hovered"]
        assert [r["highlighted"] for r in data["rows"]] == [False, True, False]

    def test_table_rows_carry_block_range(self, renderer, story):
        rows = renderer.prepare_timeline_data(story)["rows"]

        assert [r["block"] for r in rows] == ["1-2", "1-2", "3-3"]
        assert rows[0]["values"] == ["1", "", "", "2", "", ""]

    def test_tooltip_content(self, renderer, story):
        bars = renderer.prepare_timeline_data(story)["lanes"][0]["bars"]
        tooltip = bars[0]["tooltip"]

        assert tooltip["title"] == "Lines 1-2"
        assert [b["label"] for b in tooltip["story_badges"]] == ["Story of Self"]
        assert tooltip["element_badges"] == ["Challenge"]

    def test_statistics(self, renderer, story):
        stats = renderer.prepare_timeline_data(story)["statistics"]

        values = {s["label"]: s["value"] for s in stats["story_types"]}
        assert values["Story of Self"] == pytest.approx(66.67, abs=0.01)
        assert values["No Story Type"] == 0.0
        assert stats["total_words"] == 5

    def test_comparison_lanes(self, renderer, story, human_story):
        data = renderer.prepare_timeline_data(story, compare_with=human_story)

        assert data["compare_name"] == "Human"
        assert [lane["label"] for lane in data["lanes"]] == ["Tim 1", "Human"]
        model_bars, human_bars = (lane["bars"] for lane in data["lanes"])
        assert [b["range"] for b in model_bars] == ["1-1", "2-2", "3-3"]
        assert [b["disagrees"] for b in model_bars] == [False, True, False]
        assert human_bars[1]["story_type"] == "us"
        assert model_bars[1]["story_type"] == "self"
        assert data["lanes"][1]["y"] > data["lanes"][0]["y"]

    def test_empty_story(self, renderer):
        data = renderer.prepare_timeline_data(Story(name="empty"))

        assert data["lanes"][0]["bars"] == []
        assert data["rows"] == []


class TestRender:
    """Tests for HTML and SVG output."""

    def test_render_html(self, renderer, story):
        html = renderer.render_html(story)

        assert html.startswith("<!DOCTYPE html>")
        assert "PN Codebook Data Visualization" in html
        assert 'data-line="3"' in html
        assert 'data-block="1-2"' in html
        assert "choice-pattern-self" in html
        assert "Story of Now" in html

    def test_html_escapes_text(self, renderer):
        story = Story(name="x", records=normalize_rows([{"Text": "<b>bold</b> claim"}]))
        html = renderer.render_html(story)

        assert "&lt;b&gt;bold&lt;/b&gt;" in html
        assert "<b>bold</b>" not in html

    def test_render_html_comparison(self, renderer, story, human_story):
        html = renderer.render_html(story, compare_with=human_story)

        assert "Tim 1 vs Human" in html
        assert 'class="disagreement"' in html

    def test_render_svg(self, renderer, story):
        svg = renderer.render_svg(story, hovered=(1, 2))

        assert svg.startswith("<?xml")
        assert "<svg" in svg
        assert 'class="highlight-bar"' in svg
        assert 'class="challenge-overlay"' in svg
        assert "<!DOCTYPE" not in svg

    def test_render_svg_element_only_block(self, renderer):
        story = Story(
            name="elements",
            records=normalize_rows([{"Text": "we chose", "Challenge": "2", "Choice": "1"}]),
        )
        svg = renderer.render_svg(story)

        assert 'class="story-bar"' in svg
        assert 'class="challenge-overlay"' in svg
        assert "url(#choice-pattern-gray)" in svg
        assert 'fill="#666666"' in svg

    def test_write_creates_directories(self, renderer, story):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = renderer.write(renderer.render_svg(story), Path(tmpdir) / "out" / "t.svg")
            assert path.exists()
            assert path.read_text().startswith("<?xml")

    def test_custom_template_dir(self, story, tmp_path):
        (tmp_path / "dashboard.html.j2").write_text("{{ title }}: {{ rows|length }} rows")
        renderer = DashboardRenderer(template_dir=str(tmp_path))

        assert renderer.render_html(story) == "Tim 1: 3 rows"

    def test_custom_template_dir_falls_back_to_package(self, story, tmp_path):
        (tmp_path / "dashboard.html.j2").write_text("{{ title }}")
        renderer = DashboardRenderer(template_dir=str(tmp_path))

        svg = renderer.render_svg(story)

        assert svg.startswith("<?xml")
        assert 'class="story-bar"' in svg

    def test_custom_template_includes_package_timeline(self, story, tmp_path):
        (tmp_path / "dashboard.html.j2").write_text('<div>{% include "timeline.svg.j2" %}</div>')
        renderer = DashboardRenderer(template_dir=str(tmp_path))

        html = renderer.render_html(story)

        assert html.startswith("<div><svg")
        assert "choice-pattern-self" in html
