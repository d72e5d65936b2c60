"""
Status command for statusboard.

Lists indexed projects with the time of their last complete crawl,
read straight from the index database.
"""

import json
import sqlite3
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from ..config import load_config
from ..database import KeyValueStore, get_db_path
from ..errors import NotFoundError
from ..exit_codes import DATA_ERROR, GENERAL_ERROR
from ..projector import LAST_UPDATED
from ..render import render_status_table


def collect_status(store) -> List[Dict[str, Any]]:
    """
    Summarize every project that has a lastUpdated marker.

    Returns:
        One dict per project, stalest first
    """
    suffix = f":{LAST_UPDATED}"
    projects = []
    for key, value in store.items():
        if not key.endswith(suffix):
            continue
        prefix = key[:-len(suffix)]
        owner, _, name = prefix.partition(':')

        package = None
        try:
            package = store.get(f"{prefix}:PACKAGE_JSON").get('name')
        except NotFoundError:
            pass

        projects.append({
            'repo': f"{owner}/{name}",
            'last_updated': value,
            'issues': len(store.keys(f"{prefix}:ISSUE:")),
            'commits': len(store.keys(f"{prefix}:COMMIT:")),
            'package': package,
        })

    projects.sort(key=lambda p: (p['last_updated'], p['repo']))
    return projects


@click.command('status')
@click.option('-c', '--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='Config file (default: ~/.statusboard/config.*)')
@click.option('--db', 'db_file', type=click.Path(dir_okay=False), help='Index database path')
@click.option('--table/--no-table', default=None, help='Display as table (auto-detected by default)')
def status_handler(config_file: Optional[str], db_file: Optional[str], table: Optional[bool]):
    """
    Show indexed projects and when each was last refreshed.

    Output is a table on a terminal and JSONL when piped.
    """
    config = load_config(Path(config_file) if config_file else None)
    db_path = Path(db_file) if db_file else get_db_path(config)

    if not db_path.exists():
        click.echo(f"No index at {db_path}. Run 'statusboard index' first.", err=True)
        sys.exit(GENERAL_ERROR)

    try:
        with KeyValueStore(db_path, read_only=True) as store:
            projects = collect_status(store)
    except sqlite3.Error as e:
        click.echo(f"Cannot read index at {db_path}: {e}", err=True)
        sys.exit(DATA_ERROR)

    if table is None:
        table = sys.stdout.isatty()

    if table:
        render_status_table(projects, title=config.get('title'))
    else:
        for project in projects:
            print(json.dumps(project, ensure_ascii=False))
