"""
Index command for statusboard.

Runs one incremental build: refreshes the stalest projects and writes
their data to the index database.
"""

import json
import sqlite3
import sys
from pathlib import Path
from typing import Optional

import click

from ..config import load_config, configure_logging
from ..database import KeyValueStore, get_db_path
from ..errors import StatusboardError
from ..exit_codes import INTERRUPTED, PARTIAL_SUCCESS, CommandError, get_exit_code_for_exception
from ..index import run_index_build
from ..render import render_index_summary


@click.command('index')
@click.option('-c', '--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='Config file (default: ~/.statusboard/config.*)')
@click.option('--db', 'db_file', type=click.Path(dir_okay=False), help='Index database path')
@click.option('-n', '--limit', type=int, default=None,
              help='Projects to refresh this run (default: index.max_projects)')
@click.option('--strict', is_flag=True, help='Exit non-zero if any source failed')
@click.option('--pretty', is_flag=True, help='Show a summary table instead of JSON')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging')
def index_handler(config_file: Optional[str], db_file: Optional[str], limit: Optional[int],
                  strict: bool, pretty: bool, verbose: bool):
    """
    Refresh the status board index.

    Picks the projects that have gone longest without a refresh,
    fetches their repository, package, README, CI, issue, activity and
    commit data, and writes it to the index database.

    \b
    Examples:
        statusboard index
        statusboard index --limit 10 --pretty
        statusboard index -c board.yaml --db ./data.db
    """
    try:
        config = load_config(Path(config_file) if config_file else None)
        configure_logging(config, verbose=verbose)
        db_path = Path(db_file) if db_file else get_db_path(config)

        with KeyValueStore(db_path) as store:
            stats = run_index_build(config, store, limit=limit)
    except (StatusboardError, CommandError, sqlite3.Error) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(get_exit_code_for_exception(e))
    except KeyboardInterrupt:
        click.echo("Interrupted. Projects without a new lastUpdated will be picked again next run.", err=True)
        sys.exit(INTERRUPTED)

    summary = stats.to_dict()
    if pretty:
        render_index_summary(summary)
    else:
        print(json.dumps(summary, ensure_ascii=False))

    if strict and stats.errors:
        sys.exit(PARTIAL_SUCCESS)
