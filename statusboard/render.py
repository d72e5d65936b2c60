"""
Rendering functions for statusboard output.

Core functions return data, this module makes it human-readable.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

console = Console()


def format_timestamp(millis: Optional[int]) -> str:
    if not millis:
        return "never"
    return datetime.fromtimestamp(millis / 1000).strftime('%Y-%m-%d %H:%M')


def render_table(headers: List[str], rows: List[List[Any]], title: Optional[str] = None) -> None:
    """
    Render a generic table with the given headers and rows.

    Args:
        headers: List of column headers
        rows: List of rows, where each row is a list of values
        title: Optional table title
    """
    if not rows:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    for header in headers:
        table.add_column(header)

    for row in rows:
        table.add_row(*[str(val) for val in row])

    console.print(table)


def render_status_table(projects: List[Dict[str, Any]], title: Optional[str] = None) -> None:
    """
    Render indexed projects as a table.

    Args:
        projects: Dictionaries from commands.status.collect_status()
    """
    if not projects:
        console.print("[yellow]No indexed projects.[/yellow]")
        return

    rows = [
        [
            p['repo'],
            format_timestamp(p.get('last_updated')),
            p.get('issues', 0),
            p.get('commits', 0),
            p.get('package') or '-',
        ]
        for p in projects
    ]
    render_table(['Project', 'Last updated', 'Open issues', 'Commits', 'Package'], rows, title=title)


def render_index_summary(summary: Dict[str, Any]) -> None:
    """Render the stats of one index build."""
    written = summary.get('written', {})
    rows = [[kind, count] for kind, count in sorted(written.items())]
    render_table(['Kind', 'Written'], rows, title="Index build")

    console.print(f"[green]✓[/green] {len(summary.get('finished', []))} projects indexed")
    if summary.get('errors'):
        console.print(
            f"[yellow]⚠[/yellow] {summary['errors']} source errors in "
            f"{len(summary.get('failed_projects', []))} projects"
        )
    for repo in summary.get('truncated', []):
        console.print(f"[yellow]⚠[/yellow] {repo}: open issues truncated after two pages")
