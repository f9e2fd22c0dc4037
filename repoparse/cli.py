#!/usr/bin/env python3

import click
import logging
import sys

from repoparse import __version__
from repoparse.config import load_config, catalog_from_config, configure_logging
from repoparse.decoder import StreamDecoder
from repoparse.exit_codes import CommandError, SUCCESS, INTERRUPTED, get_exit_code_for_exception
from repoparse.infra import open_database, database_name, STDIN
from repoparse.output import (
    AttributeHandler,
    DescHandler,
    JsonHandler,
    JsonLinesHandler,
    ListHandler,
    TableHandler,
    chain_last,
    emit_error,
)

logger = logging.getLogger(__name__)


def _make_handler(output, attr, delim, catalog, header):
    if attr:
        return AttributeHandler(attr)
    if output == 'json':
        return JsonHandler()
    if output == 'jsonl':
        return JsonLinesHandler()
    if output == 'desc':
        return DescHandler(catalog=catalog, header=header)
    if output == 'table':
        return TableHandler()
    return ListHandler(delimiter=delim)


@click.command()
@click.argument('paths', nargs=-1, type=click.Path(dir_okay=False, allow_dash=True))
@click.option('--list', 'output', flag_value='list',
              help='Print name and version of each package (default)')
@click.option('--json', 'output', flag_value='json', help='Print packages as a JSON array')
@click.option('--jsonl', 'output', flag_value='jsonl', help='Print packages as JSON lines')
@click.option('--desc', 'output', flag_value='desc', help='Print packages as desc blocks')
@click.option('--table', 'output', flag_value='table', help='Print packages as a table')
@click.option('-a', '--attr', help='Print the values of one attribute (e.g. Depends)')
@click.option('--list-attr', is_flag=True, help='List known attribute tokens and exit')
@click.option('--list-labels', is_flag=True, help='List known attribute labels and exit')
@click.option('-s', '--search', help='Only print packages where the search field matches this regex')
@click.option('--search-by', help='Label of the field searched (default: Name)')
@click.option('--header', help='Attribute token starting each entry (default: FILENAME)')
@click.option('--db-name', help='Repository name (default: derived from the file name)')
@click.option('--delim', help='Separator for --list output (default: tab)')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), help='Configuration file')
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
@click.version_option(version=__version__)
def cli(paths, output, attr, list_attr, list_labels, search, search_by, header,
        db_name, delim, config_path, verbose):
    """repoparse - Decode pacman repository databases.

    Reads the desc entries of each database PATH (a .db or .files archive,
    a plain desc file, or - for standard input) and prints the packages
    whose search field matches.

    \b
    Examples:
        repoparse custom.db
        repoparse --json -s '^python-' custom.db.tar.gz
        repoparse --attr Depends --search-by Name -s '^foo$' custom.db
        bsdtar -Oxf custom.db '*/desc' | repoparse --jsonl
    """
    if attr and output:
        raise click.UsageError(f"--attr cannot be combined with --{output}")

    try:
        config = load_config(config_path)
        configure_logging(config, verbose)
        catalog = catalog_from_config(config)

        if list_attr:
            for token in catalog.list_tokens():
                click.echo(token)
            sys.exit(SUCCESS)
        if list_labels:
            for label in catalog.list_labels():
                click.echo(label)
            sys.exit(SUCCESS)

        parse_config = config.get('parse', {})
        header = header or parse_config.get('header', 'FILENAME')
        search_by = search_by or parse_config.get('search_by', 'Name')
        delim = delim if delim is not None else parse_config.get('delimiter', '\t')

        handler = _make_handler(output, attr, delim, catalog, header)
        decoder = StreamDecoder(catalog)

        paths = paths or (STDIN,)
        total = 0
        for index, path in enumerate(paths):
            name = db_name or database_name(path)
            total += decoder.decode(
                open_database(path),
                str(path),
                name,
                header,
                chain_last(handler, index == len(paths) - 1),
                search,
                search_by,
            )

        # Databases without entries never deliver the terminal call
        if not handler.finished:
            handler(None, total, True)

        logger.debug(f"{handler.emitted} of {total} entries printed")

    except KeyboardInterrupt:
        sys.exit(INTERRUPTED)
    except CommandError as e:
        emit_error(str(e), type=type(e).__name__)
        sys.exit(e.exit_code)
    except Exception as e:
        emit_error(str(e), type=type(e).__name__)
        sys.exit(get_exit_code_for_exception(e))


def main():
    cli()

if __name__ == "__main__":
    main()
