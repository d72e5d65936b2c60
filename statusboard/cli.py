#!/usr/bin/env python3

import click

from statusboard.commands.index import index_handler
from statusboard.commands.status import status_handler
from statusboard.commands.config import config_cmd


@click.group()
@click.version_option(package_name='statusboard')
def cli():
    """statusboard - Incremental index of GitHub projects for a status dashboard.

    Crawls configured organizations and projects, pulling repository,
    npm package, README, CI, issue, activity and commit data into a
    key-value index the dashboard reads.
    """
    pass


cli.add_command(index_handler, name='index')
cli.add_command(status_handler, name='status')
cli.add_command(config_cmd)


def main():
    cli()


if __name__ == "__main__":
    main()
