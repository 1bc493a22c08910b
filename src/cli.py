#!/usr/bin/env python3
"""
CLI for the translation manager.
"""

import click
from importlib.metadata import version
from commands import log, page, status


@click.group()
@click.version_option(version=version("translation-manager"))
def cli():
    """Translation Manager CLI - Track, filter and update article translation status."""
    pass


# Register command groups
cli.add_command(page.page)
cli.add_command(status.status)
cli.add_command(log.log)


if __name__ == "__main__":
    cli()
