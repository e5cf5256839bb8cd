"""CLI Runner for narrative annotation comparison.

Usage:
    narrative-viz stories
    narrative-viz stats <story-or-csv>
    narrative-viz blocks <story-or-csv> [--filter self=2]
    narrative-viz compare <primary> <secondary>
    narrative-viz render <story-or-csv> --output dashboard.html [--compare <csv>]
    narrative-viz export <story-or-csv> --output timeline.svg
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from narrative_viz import __version__
from narrative_viz.config import get_settings
from narrative_viz.exceptions import NarrativeVizError
from narrative_viz.models import TAG_LABELS, Story, TagKind

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich at the configured level."""
    settings = get_settings()
    level = logging.DEBUG if verbose else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def resolve_story(source: str) -> Story:
    """Load a story from a CSV path, or by name from the configured catalog."""
    from narrative_viz.services.story_loader import StoryCatalog, load_story

    path = Path(source)
    if path.is_file():
        return load_story(path)
    return StoryCatalog.from_settings(get_settings()).load(source)


def parse_filters(pairs: tuple):
    """Build TagFilters from repeated --filter options, exiting on bad input."""
    from narrative_viz.services.filters import TagFilters

    try:
        return TagFilters.from_pairs(pairs)
    except (ValueError, ValidationError) as e:
        raise click.BadParameter(str(e), param_hint="--filter")


def parse_range(value: Optional[str]) -> Optional[tuple[int, int]]:
    """Parse a "start-end" line range (or a single line)."""
    if not value:
        return None
    try:
        if "-" in value:
            start, end = (int(part) for part in value.split("-", 1))
        else:
            start = end = int(value)
    except ValueError:
        raise click.BadParameter(f"Invalid line range: {value}", param_hint="--highlight")
    if start > end:
        raise click.BadParameter(f"Range start after end: {value}", param_hint="--highlight")
    return start, end


def format_tags(tags) -> str:
    """Tag set as a comma-separated label list, in codebook order."""
    labels = [TAG_LABELS[kind] for kind in TagKind if kind in tags]
    return ", ".join(labels) if labels else "-"


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Narrative annotation comparison toolkit.

    Segment coded interview transcripts into story blocks and compare
    human and model annotations.
    """
    try:
        configure_logging(verbose)
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            console.print(f"[red]Error:[/red] Invalid setting {field}: {escape(error['msg'])}")
        sys.exit(1)


@cli.command("stories")
def list_stories():
    """List the configured stories."""
    from narrative_viz.services.story_loader import StoryCatalog

    catalog = StoryCatalog.from_settings(get_settings())
    names = catalog.names()

    if not names:
        console.print("No stories configured.")
        return

    table = Table(title="Stories")
    table.add_column("Name", style="cyan")
    table.add_column("File")
    table.add_column("Lines", justify="right")

    for name in names:
        path = catalog.get_path(name)
        if path.is_file():
            try:
                lines = str(catalog.load(name).line_count)
            except NarrativeVizError:
                lines = "[red]unreadable[/red]"
        else:
            lines = "[yellow]missing[/yellow]"
        table.add_row(name, str(path), lines)

    console.print(table)


@cli.command("stats")
@click.argument("source")
def show_statistics(source: str):
    """Show tag distribution for a story or CSV file."""
    from narrative_viz.services.statistics import compute_statistics

    try:
        story = resolve_story(source)
    except NarrativeVizError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    stats = compute_statistics(story.records)

    table = Table(title=f"{story.name}: {stats.total_lines} lines, {stats.total_words} words")
    table.add_column("Tag", style="cyan")
    table.add_column("Lines", justify="right")

    for kind in TagKind:
        table.add_row(kind.label, f"{stats.percentage(kind):.1f}%")
    table.add_row("No Story Type", f"{stats.no_story_type:.1f}%")
    table.add_row("No Elements", f"{stats.no_narrative_element:.1f}%")

    console.print(table)


@cli.command("blocks")
@click.argument("source")
@click.option("--filter", "-f", "filters", multiple=True, help="Tag filter, e.g. self=2 or choice=0")
def show_blocks(source: str, filters: tuple):
    """Show the run-length blocks of a story."""
    from narrative_viz.services.segmenter import segment

    tag_filters = parse_filters(filters)

    try:
        story = resolve_story(source)
    except NarrativeVizError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    blocks = segment(story.records)
    if not blocks:
        console.print("No blocks found.")
        return

    table = Table(title=f"{story.name}: {len(blocks)} blocks")
    table.add_column("Lines", style="cyan")
    table.add_column("Tags")
    table.add_column("Dominant")
    table.add_column("Words", justify="right")
    table.add_column("Position", justify="right")

    for block in blocks:
        dominant = block.dominant_tag
        in_filter = not tag_filters.is_active or tag_filters.block_matches(block, story.records)
        style = None if in_filter else "dim"
        table.add_row(
            block.range_label,
            format_tags(block.tags),
            dominant.label if dominant else "-",
            str(block.word_count),
            str(block.position),
            style=style,
        )

    console.print(table)
    if tag_filters.is_active:
        console.print(f"Filters: {tag_filters.describe()} (out-of-filter blocks dimmed)")


@cli.command("compare")
@click.argument("primary")
@click.argument("secondary")
def compare_stories(primary: str, secondary: str):
    """Compare two annotations of the same transcript."""
    from narrative_viz.services.segmenter import segment_aligned
    from narrative_viz.services.statistics import compare_annotations

    try:
        first = resolve_story(primary)
        second = resolve_story(secondary)
    except NarrativeVizError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    agreement = compare_annotations(first.records, second.records)
    if agreement.truncated:
        console.print(
            f"[yellow]Warning:[/yellow] line counts differ "
            f"({agreement.primary_lines} vs {agreement.secondary_lines}); "
            f"comparing the first {agreement.aligned_lines} lines"
        )

    blocks = segment_aligned(first.records, second.records)

    table = Table(title=f"{first.name} vs {second.name}")
    table.add_column("Lines", style="cyan")
    table.add_column(first.name)
    table.add_column(second.name)
    table.add_column("Agree")

    for block in blocks:
        table.add_row(
            block.range_label,
            format_tags(block.primary_tags),
            format_tags(block.secondary_tags),
            "[green]yes[/green]" if block.agrees else "[red]no[/red]",
        )

    console.print(table)
    console.print(f"Exact agreement: {agreement.exact_agreement:.1f}%")
    for kind in TagKind:
        console.print(f"  {kind.label}: {agreement.tag_agreement[kind]:.1f}%")


@cli.command("render")
@click.argument("source")
@click.option("--output", "-o", required=True, help="Output HTML file path")
@click.option("--compare", "compare_source", default=None, help="Second annotation to compare against")
@click.option("--filter", "-f", "filters", multiple=True, help="Tag filter, e.g. self=2 or choice=0")
@click.option("--highlight", default=None, help="Line range to highlight, e.g. 3-7")
@click.option("--width", type=int, default=None, help="Timeline width in pixels")
def render_dashboard(source: str, output: str, compare_source: Optional[str], filters: tuple,
                     highlight: Optional[str], width: Optional[int]):
    """Generate the HTML dashboard for a story."""
    from narrative_viz.services.dashboard import DashboardRenderer

    tag_filters = parse_filters(filters)
    hovered = parse_range(highlight)

    try:
        story = resolve_story(source)
        other = resolve_story(compare_source) if compare_source else None
    except NarrativeVizError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    renderer = DashboardRenderer(display_width=width or get_settings().display_width)
    html = renderer.render_html(story, filters=tag_filters, hovered=hovered, compare_with=other)
    path = renderer.write(html, output)
    console.print(f"[green]Dashboard saved to:[/green] {path}")


@cli.command("export")
@click.argument("source")
@click.option("--output", "-o", required=True, help="Output SVG file path")
@click.option("--compare", "compare_source", default=None, help="Second annotation to compare against")
@click.option("--filter", "-f", "filters", multiple=True, help="Tag filter, e.g. self=2 or choice=0")
@click.option("--width", type=int, default=None, help="Timeline width in pixels")
def export_timeline(source: str, output: str, compare_source: Optional[str], filters: tuple,
                    width: Optional[int]):
    """Export the story timeline as a standalone SVG image."""
    from narrative_viz.services.dashboard import DashboardRenderer

    tag_filters = parse_filters(filters)

    try:
        story = resolve_story(source)
        other = resolve_story(compare_source) if compare_source else None
    except NarrativeVizError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    renderer = DashboardRenderer(display_width=width or get_settings().display_width)
    svg = renderer.render_svg(story, filters=tag_filters, compare_with=other)
    path = renderer.write(svg, output)
    console.print(f"[green]Timeline saved to:[/green] {path}")


if __name__ == "__main__":
    cli()
