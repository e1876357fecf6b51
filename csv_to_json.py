#!/usr/bin/env python3

# Convert verses.csv to a hierarchical, vowel-scored verses.json.

# * Imports

# ** Standard library

import logging as log

# ** 3rd-party

import click
from click_default_group import DefaultGroup

# ** Local

import verses
from verses import INPUT_FILENAME, OUTPUT_FILENAME

# * Click

@click.group(cls=DefaultGroup, default='convert', default_if_no_args=True)
@click.option('-v', '--verbose', count=True)
def cli(verbose):

    # Setup logging
    if verbose >= 2:
        LOG_LEVEL = log.DEBUG
    elif verbose == 1:
        LOG_LEVEL = log.INFO
    else:
        LOG_LEVEL = log.WARNING

    log.basicConfig(level=LOG_LEVEL, format="%(levelname)s: %(message)s")
    log.debug("Logging level: %s" % LOG_LEVEL)

# ** Commands

# *** convert

@click.command()
def convert():
    """Convert verses.csv in the current directory to verses.json.  This is the default command."""

    try:
        books = verses.convert(INPUT_FILENAME, OUTPUT_FILENAME)
    except verses.VersesError as e:
        # Nothing is retried or cleaned up; a failed write may leave
        # a partial verses.json behind.
        raise click.ClickException(str(e))

    log.info("Converted %s chapters in %s books",
             sum(len(book.chapters) for book in books), len(books))

cli.add_command(convert)

# * Main

if __name__ == "__main__":
    cli()
