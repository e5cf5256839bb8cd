"""Dashboard Renderer - generates the story visualization dashboard.

Responsible for:
- Proportional timeline bars (one rect per block, word-count weighted)
- Story-type coloring with challenge/choice/outcome overlays
- Filter dimming and hover highlighting
- Side-by-side comparison lanes for two annotations
- The transcript table and tag statistics
- Standalone SVG export of the timeline
"""

from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape

from narrative_viz.models import (
    NARRATIVE_ELEMENTS,
    STORY_TYPES,
    AnnotationRecord,
    Block,
    ComparisonBlock,
    Story,
    TagKind,
    dominant_tag,
)
from narrative_viz.services.filters import FILTER_OPTIONS, TagFilters
from narrative_viz.services.segmenter import RunSegmenter
from narrative_viz.services.statistics import compute_statistics

HoverRange = tuple[int, int]

PACKAGE_TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class DashboardRenderer:
    """Renders annotation blocks as HTML dashboards and SVG timelines."""

    # Story type colors
    STORY_COLORS = {
        TagKind.SELF: "#8b00ff",  # Purple
        TagKind.US: "#0066cc",    # Blue
        TagKind.NOW: "#ffd700",   # Yellow
    }

    # Badge text colors, chosen for contrast with STORY_COLORS
    STORY_TEXT_COLORS = {
        TagKind.SELF: "white",
        TagKind.US: "white",
        TagKind.NOW: "black",
    }

    # Narrative elements are drawn in the block's story color, or gray without one
    NEUTRAL_COLOR = "#666666"

    # Bar geometry, matching a 1200px container
    MARGIN = {"top": 15, "right": 120, "bottom": 25, "left": 50}
    BAR_HEIGHT = 80
    LANE_GAP = 30

    OPACITY_HOVERED = 1.0
    OPACITY_IN_FILTER = 0.7
    OPACITY_FILTERED_OUT = 0.1
    OPACITY_STORY_BASE = 0.15

    def __init__(self, display_width: float = 1030, template_dir: Optional[str] = None):
        """Initialize the renderer.

        Args:
            display_width: Width in pixels of the timeline bar
            template_dir: Optional directory with dashboard templates.
                          If None, uses package templates. Templates missing
                          from it fall back to the package ones.
        """
        self.segmenter = RunSegmenter(display_width=display_width)

        if template_dir:
            self.template_dir = Path(template_dir)
            loader = ChoiceLoader([
                FileSystemLoader(str(self.template_dir)),
                FileSystemLoader(str(PACKAGE_TEMPLATE_DIR)),
            ])
        else:
            self.template_dir = PACKAGE_TEMPLATE_DIR
            loader = FileSystemLoader(str(self.template_dir))

        self.jinja_env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "j2"]),
        )
        self.jinja_env.filters["percent"] = lambda v: f"{v:.1f}%"

    @property
    def display_width(self) -> float:
        return self.segmenter.display_width

    def render_html(
        self,
        story: Story,
        filters: Optional[TagFilters] = None,
        hovered: Optional[HoverRange] = None,
        compare_with: Optional[Story] = None,
    ) -> str:
        """Render the complete dashboard for a story.

        Args:
            story: The story whose timeline and transcript are shown
            filters: Tag value filters (dim out-of-filter blocks, hide table rows)
            hovered: Inclusive line range to highlight, as if hovered
            compare_with: Second annotation of the same transcript

        Returns:
            Complete HTML document as string
        """
        data = self.prepare_timeline_data(story, filters, hovered, compare_with)
        template = self.jinja_env.get_template("dashboard.html.j2")
        return template.render(**data)

    def render_svg(
        self,
        story: Story,
        filters: Optional[TagFilters] = None,
        hovered: Optional[HoverRange] = None,
        compare_with: Optional[Story] = None,
    ) -> str:
        """Render the timeline alone as a standalone SVG document."""
        data = self.prepare_timeline_data(story, filters, hovered, compare_with)
        template = self.jinja_env.get_template("timeline.svg.j2")
        return template.render(standalone=True, **data)

    def write(self, content: str, output_path: Union[str, Path]) -> Path:
        """Write rendered content, creating parent directories."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def prepare_timeline_data(
        self,
        story: Story,
        filters: Optional[TagFilters] = None,
        hovered: Optional[HoverRange] = None,
        compare_with: Optional[Story] = None,
    ) -> dict[str, Any]:
        """Prepare all data needed by the dashboard templates.

        Blocks are recomputed from the story's records on every call.

        Returns:
            Dictionary with lanes, table rows, statistics and legend data
        """
        filters = filters or TagFilters()
        records = story.records

        if compare_with is not None:
            aligned = self.segmenter.segment_aligned(records, compare_with.records)
            lanes = [
                self._prepare_lane(
                    story.name, aligned, records, filters, hovered, 0,
                    tags_of=lambda b: b.primary_tags,
                ),
                self._prepare_lane(
                    compare_with.name, aligned, records, filters, hovered, 1,
                    tags_of=lambda b: b.secondary_tags,
                ),
            ]
            table_blocks: Sequence[Union[Block, ComparisonBlock]] = aligned
        else:
            blocks = self.segmenter.segment(records)
            lanes = [
                self._prepare_lane(
                    story.name, blocks, records, filters, hovered, 0,
                    tags_of=lambda b: b.tags,
                )
            ]
            table_blocks = blocks

        margin = self.MARGIN
        lanes_height = len(lanes) * self.BAR_HEIGHT + (len(lanes) - 1) * self.LANE_GAP

        return {
            "title": story.name,
            "story": story,
            "compare_name": compare_with.name if compare_with is not None else None,
            "lanes": lanes,
            "rows": self._prepare_table_rows(records, table_blocks, filters, hovered),
            "statistics": self._prepare_statistics(records),
            "legend": self._prepare_legend(),
            "filters": self._prepare_filter_summary(filters),
            "filter_options": FILTER_OPTIONS,
            "margin": margin,
            "bar_height": self.BAR_HEIGHT,
            "display_width": self.display_width,
            "svg_width": self.display_width + margin["left"] + margin["right"],
            "svg_height": lanes_height + margin["top"] + margin["bottom"],
            "story_colors": {k.value: c for k, c in self.STORY_COLORS.items()},
            "neutral_color": self.NEUTRAL_COLOR,
        }

    def _prepare_lane(
        self,
        label: str,
        blocks: Sequence[Union[Block, ComparisonBlock]],
        records: Sequence[AnnotationRecord],
        filters: TagFilters,
        hovered: Optional[HoverRange],
        lane_index: int,
        tags_of,
    ) -> dict[str, Any]:
        """Prepare one timeline lane of bars."""
        y = self.MARGIN["top"] + lane_index * (self.BAR_HEIGHT + self.LANE_GAP)
        bars = []

        for block, x, width in self.segmenter.layout(blocks):
            tags = tags_of(block)
            is_hovered = hovered is not None and block.overlaps(*hovered)
            in_filter = not filters.is_active or filters.block_matches(block, records)
            bars.append(self._prepare_bar(block, tags, x, width, is_hovered, in_filter))

        return {
            "label": label,
            "y": y,
            "bars": bars,
        }

    def _prepare_bar(
        self,
        block: Union[Block, ComparisonBlock],
        tags: frozenset[TagKind],
        x: float,
        width: float,
        is_hovered: bool,
        in_filter: bool,
    ) -> dict[str, Any]:
        """Prepare a single block bar with overlays and tooltip."""
        dominant = dominant_tag(tags)
        if dominant is None:
            story_type, color = None, None
        elif dominant.is_story_type:
            story_type, color = dominant.value, self.STORY_COLORS[dominant]
        else:
            # Element-only blocks are drawn with the gray pattern
            story_type, color = "gray", self.NEUTRAL_COLOR

        if is_hovered:
            opacity = self.OPACITY_HOVERED
        elif in_filter:
            opacity = self.OPACITY_IN_FILTER
        else:
            opacity = self.OPACITY_FILTERED_OUT

        # 1px gap between adjacent bars
        return {
            "x": x + 1,
            "width": max(width - 1, 0.0),
            "start": block.start_index,
            "end": block.end_index,
            "range": block.range_label,
            "dominant": dominant.value if dominant else None,
            "story_type": story_type,
            "color": color,
            "overlays": [
                kind.value for kind in NARRATIVE_ELEMENTS if kind in tags
            ],
            "opacity": opacity,
            "hovered": is_hovered,
            "in_filter": in_filter,
            "disagrees": isinstance(block, ComparisonBlock) and not block.agrees,
            "tooltip": self._prepare_tooltip(block, tags),
        }

    def _prepare_tooltip(
        self,
        block: Union[Block, ComparisonBlock],
        tags: frozenset[TagKind],
    ) -> dict[str, Any]:
        """Tooltip content: line range, story badges and narrative elements."""
        return {
            "title": f"Lines {block.range_label}",
            "story_badges": [
                {
                    "label": kind.label,
                    "color": self.STORY_COLORS[kind],
                    "text_color": self.STORY_TEXT_COLORS[kind],
                }
                for kind in STORY_TYPES if kind in tags
            ],
            "element_badges": [kind.label for kind in NARRATIVE_ELEMENTS if kind in tags],
            "empty_story_text": "No story type",
            "empty_element_text": "No challenge, choice, or outcome",
        }

    def _prepare_table_rows(
        self,
        records: Sequence[AnnotationRecord],
        blocks: Sequence[Union[Block, ComparisonBlock]],
        filters: TagFilters,
        hovered: Optional[HoverRange],
    ) -> list[dict[str, Any]]:
        """Transcript table rows for the lines passing the filters."""
        block_ranges = {}
        for block in blocks:
            for line in range(block.start_index, block.end_index + 1):
                block_ranges[line] = block.range_label

        rows = []
        for record in filters.apply(records):
            line = record.line_index
            rows.append({
                "line": line,
                "block": block_ranges.get(line, f"{line}-{line}"),
                "text": record.text,
                "values": [record.value_of(kind) for kind in TagKind],
                "highlighted": hovered is not None and hovered[0] <= line <= hovered[1],
                "notes": record.details.get("coding_notes", ""),
            })
        return rows

    def _prepare_statistics(self, records: Sequence[AnnotationRecord]) -> dict[str, Any]:
        """Statistic bars for the story type and narrative element sections."""
        stats = compute_statistics(records)
        return {
            "story_types": [
                {"label": kind.label, "value": stats.percentage(kind), "color": self.STORY_COLORS[kind]}
                for kind in STORY_TYPES
            ] + [
                {"label": "No Story Type", "value": stats.no_story_type, "color": self.NEUTRAL_COLOR},
            ],
            "narrative_elements": [
                {"label": kind.label, "value": stats.percentage(kind), "color": self.NEUTRAL_COLOR}
                for kind in NARRATIVE_ELEMENTS
            ] + [
                {"label": "No Elements", "value": stats.no_narrative_element, "color": self.NEUTRAL_COLOR},
            ],
            "total_lines": stats.total_lines,
            "total_words": stats.total_words,
        }

    def _prepare_legend(self) -> dict[str, Any]:
        return {
            "story_types": [
                {"label": kind.label, "color": self.STORY_COLORS[kind]} for kind in STORY_TYPES
            ],
            "narrative_elements": [kind.label for kind in NARRATIVE_ELEMENTS],
        }

    def _prepare_filter_summary(self, filters: TagFilters) -> list[dict[str, str]]:
        labels = dict(FILTER_OPTIONS)
        return [
            {"tag": kind.label, "value": labels[filters.value_for(kind)]}
            for kind in TagKind
        ]
