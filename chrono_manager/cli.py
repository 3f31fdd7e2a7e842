"""CLI entry point for building the chronology."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from .constants.config import CHRONO_BASE_URL
from .constants.paths import CHARACTERS_JSON_PATH, INPUT_FILE_PATH
from .models.entry import ChronoEntry


def _write_output(entries: list[ChronoEntry], output_format: str, characters_path: Path,
                  output: Optional[Path], done_flags: Optional[list[bool]] = None) -> None:
    from .renderers.entry import entries_to_json, render_html
    from .utils.characters import load_character_names

    if output_format == "json":
        text = entries_to_json(entries, done_flags) + "\n"
    else:
        characters = load_character_names(characters_path)
        text = "".join(render_html(entry, characters) for entry in entries)

    if output:
        output.write_text(text, encoding="utf-8")
        click.echo(f"Wrote {len(entries)} entries to {output}", err=True)
    else:
        click.echo(text, nl=False)


@click.group()
def cli():
    """Chronology manager - merge forum posts and chronology pages."""
    pass


@cli.command("convert-posts")
@click.option(
    "--input", "-i", "input_path",
    default=str(INPUT_FILE_PATH),
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help=f"Post dump with entries separated by '------' lines (default: {INPUT_FILE_PATH})"
)
@click.option(
    "--format", "-f", "output_format",
    default="html",
    type=click.Choice(["html", "json"]),
    help="Output HTML fragments or a JSON array (default: html)"
)
@click.option(
    "--characters", "-c", "characters_path",
    default=str(CHARACTERS_JSON_PATH),
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Character registry JSON used to name the cast (default: {CHARACTERS_JSON_PATH})"
)
@click.option("--sort", is_flag=True, help="Order entries by arc, then start time")
@click.option(
    "--output", "-o",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to a file instead of stdout"
)
def convert_posts(input_path: Path, output_format: str, characters_path: Path,
                  sort: bool, output: Optional[Path]):
    """Convert a dump of labeled forum posts.

    Blocks that are incomplete or have an unclear timezone are skipped.

    Examples:

        chrono convert-posts

        chrono convert-posts -i posts.txt --format json --sort
    """
    from .parsers.post import read_post_file
    from .utils.timeline import sort_entries

    skipped = 0

    def on_skipped(block: str, error: ValueError):
        nonlocal skipped
        skipped += 1
        first_line = block.splitlines()[0] if block else ""
        click.echo(f"Skipping block '{first_line}': {error}", err=True)

    entries = read_post_file(input_path, on_skipped=on_skipped)
    click.echo(f"Parsed {len(entries)} entries ({skipped} skipped)", err=True)

    if sort:
        entries = sort_entries(entries)

    _write_output(entries, output_format, characters_path, output)


@cli.command("scrape-pages")
@click.option(
    "--base-url",
    default=CHRONO_BASE_URL,
    help=f"Site root serving the chronology pages (default: {CHRONO_BASE_URL})"
)
@click.option(
    "--format", "-f", "output_format",
    default="html",
    type=click.Choice(["html", "json"]),
    help="Output HTML fragments or a JSON array (default: html)"
)
@click.option(
    "--characters", "-c", "characters_path",
    default=str(CHARACTERS_JSON_PATH),
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Character registry JSON used to name the cast (default: {CHARACTERS_JSON_PATH})"
)
@click.option("--sort", is_flag=True, help="Order entries by arc, then start time")
@click.option(
    "--page-status",
    is_flag=True,
    help="Write each episode's status from the page as the JSON 'done' flag instead of always true"
)
@click.option(
    "--output", "-o",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to a file instead of stdout"
)
def scrape_pages(base_url: str, output_format: str, characters_path: Path, sort: bool,
                 page_status: bool, output: Optional[Path]):
    """Read episodes back from the published chronology pages.

    Fetches every arc page one after another and parses all three legacy
    episode formats.

    Examples:

        chrono scrape-pages

        chrono scrape-pages --format json --page-status -o chronology.json
    """
    from .scrapers.chronology import scrape_chronology
    from .utils.timeline import arc_sort_key

    def on_page_scraped(arc, page_entries):
        click.echo(f"[arc {arc}] {len(page_entries)} episodes", err=True)

    click.echo(f"Scraping chronology pages from {base_url}...", err=True)

    try:
        raw_entries = asyncio.run(scrape_chronology(
            base_url=base_url,
            on_page_scraped=on_page_scraped,
        ))
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    pairs = []
    skipped = 0
    for raw in raw_entries:
        try:
            entry = raw.to_entry()
        except ValueError as e:
            skipped += 1
            click.echo(f"Skipping {raw.source.value} entry {raw.id}: {e}", err=True)
            continue
        pairs.append((entry, raw.done if raw.done is not None else True))

    if sort:
        pairs.sort(key=lambda pair: arc_sort_key(pair[0]))

    entries = [entry for entry, _ in pairs]
    done_flags = [done for _, done in pairs] if page_status else None

    click.echo(f"\nScraped {len(entries)} episodes ({skipped} skipped)", err=True)
    _write_output(entries, output_format, characters_path, output, done_flags)
