"""
Extracts translatable strings from SQL seed data into a translation catalog.
The catalog is printed to stdout unless an output file is given.
"""

from __future__ import annotations

from pathlib import Path

import click
from .catalog import Catalog
from .config import ConfigError, build_config, build_registry
from .constants import STDIN_SOURCE
from .exceptions import ScanFileError
from .filesystem import (
    collect_file_stat,
    enforce_file_size,
    get_max_file_size,
    normalize_filepath,
    write_catalog,
)
from .models import ScanWarning
from .scanner import scan_file, scan_lines

__all__ = ["cli"]


@click.command()
@click.version_option()
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the catalog to this file instead of stdout",
)
@click.option(
    "-t",
    "--translatable",
    "translatables",
    multiple=True,
    metavar="TABLE.COLUMN",
    help="Additional translatable column (repeatable)",
)
@click.option("--delimiter", help="Default field delimiter for COPY data")
@click.option("--encoding", help="Encoding of the input files")
@click.option("-q", "--quiet", is_flag=True, help="Do not report scan warnings")
@click.argument("files", nargs=-1, type=click.Path(dir_okay=False, allow_dash=True))
def cli(
    files: tuple[str, ...],
    output: str | None = None,
    translatables: tuple[str, ...] = (),
    delimiter: str | None = None,
    encoding: str | None = None,
    quiet: bool = False,
):
    """
    Entry point for extracting translatable strings from SQL files.

    Reads each FILE (or standard input when none is given, or for ``-``) and
    collects the string literals stored in translatable columns of INSERT
    statements and COPY data blocks.

    Args:
        files: SQL files to scan; ``-`` stands for standard input.
        output: Destination file for the catalog.
        translatables: Extra ``table.column`` entries for the registry.
        delimiter: Override for the default COPY delimiter.
        encoding: Override for the input encoding.
        quiet: Suppress scan warnings.

    Returns:
        None.

    Raises:
        click.BadParameter: If paths or configuration values are invalid.
        click.ClickException: If an input cannot be read or the catalog cannot
            be written.

    Examples:
        extract-sql sql/modules/*.sql -o locale/sql.pot
    """
    try:
        config = build_config(
            Path.cwd(), translatables, delimiter=delimiter, encoding=encoding
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    registry = build_registry(config)
    catalog = Catalog()

    def report(warning: ScanWarning) -> None:
        if not quiet:
            click.echo(str(warning), err=True)

    for raw_path in files or ("-",):
        if raw_path == "-":
            stream = click.get_text_stream("stdin", encoding=config.encoding)
            try:
                scan_lines(stream, registry, catalog, STDIN_SOURCE, report, config.delimiter)
            except (OSError, UnicodeDecodeError) as error:
                raise click.ClickException(f"{STDIN_SOURCE}: {error}") from error
            continue

        try:
            filepath = normalize_filepath(raw_path)
        except ValueError as error:
            raise click.BadParameter(str(error)) from error

        try:
            enforce_file_size(collect_file_stat(filepath), max_file_size, filepath)
            scan_file(
                filepath,
                registry,
                catalog,
                report,
                source=raw_path,
                encoding=config.encoding,
                delimiter=config.delimiter,
            )
        except (IOError, ScanFileError) as error:
            raise click.ClickException(str(error)) from error

    if output is None:
        click.echo(catalog.serialize(), nl=False)
        return

    try:
        write_catalog(
            Path(output),
            catalog.render(),
            warn=lambda message: click.echo(message, err=True),
        )
    except IOError as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":
    cli()
