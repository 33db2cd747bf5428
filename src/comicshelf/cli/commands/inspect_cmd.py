# ABOUTME: The `comicshelf inspect` command for viewing how one file resolves.
# ABOUTME: Shows embedded ComicInfo fields and the resolver's folder suggestion.

from dataclasses import fields
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from comicshelf.cli.lookup import open_lookup_client
from comicshelf.cli.options import api_option
from comicshelf.formats.comicinfo import ComicInfoStatus, read_comic_info_outcome
from comicshelf.metadata.filename import format_issue_number
from comicshelf.metadata.resolver import MetadataResolver

console = Console()


def _value(value: object) -> str:
    if value is None or value == "":
        return "[dim]none[/dim]"
    return escape(str(value))


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@api_option
def inspect(path: Path, use_api: bool) -> None:
    """Show embedded metadata and the resolved folder for a comic file."""
    outcome = read_comic_info_outcome(path)

    if outcome.status is ComicInfoStatus.FOUND and outcome.metadata is not None:
        info = Table(title="ComicInfo.xml", show_header=False, pad_edge=False)
        info.add_column("Field", style="bold")
        info.add_column("Value")
        for field in fields(outcome.metadata):
            value = getattr(outcome.metadata, field.name)
            if value is not None:
                info.add_row(field.name.replace("_", " ").title(), _value(value))
        console.print(info)
    else:
        detail = f" ({outcome.detail})" if outcome.detail else ""
        console.print(f"[dim]ComicInfo.xml: {outcome.status.value}{escape(detail)}[/dim]")

    with open_lookup_client(use_api) as lookup_client:
        resolver = MetadataResolver(lookup_client=lookup_client)
        record = resolver.resolve(path.name, path=path, use_api=use_api)

    table = Table(title=escape(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Cleaned name", _value(record.cleaned_name))
    table.add_row("Series", _value(record.series))
    table.add_row("Issue", _value(format_issue_number(record.issue_number)))
    table.add_row("Year", _value(record.year))
    table.add_row("Publisher", _value(record.publisher))
    if record.title:
        table.add_row("Title", _value(record.title))
    if record.authors:
        table.add_row("Authors", _value(record.author))
    table.add_row("Source", record.source.value)
    table.add_row("Confidence", record.confidence.value)
    table.add_row("Folder", f"[green]{escape(record.suggested_folder)}[/green]")

    console.print(table)
