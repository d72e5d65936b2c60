"""
Staleness-based project selection.

Each run refreshes a bounded batch of projects: the ones that have gone
longest without a complete crawl. A project's last complete crawl is
the '{owner}:{name}:lastUpdated' key written by the projector.
"""

import logging
from typing import Iterable, List, Tuple

from .domain import Project
from .errors import NotFoundError

logger = logging.getLogger(__name__)

NEVER_UPDATED = 0


def last_updated_key(project: Project) -> str:
    return f"{project.key_prefix}:lastUpdated"


def get_last_updated(store, project: Project) -> int:
    """
    Read a project's last-updated timestamp.

    Returns:
        Epoch milliseconds, or NEVER_UPDATED if the project was never indexed

    Raises:
        Any store error other than NotFoundError
    """
    try:
        return int(store.get(last_updated_key(project)))
    except NotFoundError:
        return NEVER_UPDATED


def rank_by_staleness(store, projects: Iterable[Project]) -> List[Tuple[Project, int]]:
    """Pair each project with its timestamp, oldest first, ties by identity."""
    ranked = [(project, get_last_updated(store, project)) for project in projects]
    ranked.sort(key=lambda pair: (pair[1], pair[0].identity))
    return ranked


def select_projects_to_update(store, projects: Iterable[Project], limit: int = 50) -> List[Project]:
    """
    Pick the projects to crawl this run.

    Never-indexed projects come first, then the least recently updated.
    A store failure other than a missing key propagates.

    Args:
        store: Key-value store with get()
        projects: Candidate projects
        limit: Maximum number of projects to return

    Returns:
        At most `limit` projects, stalest first
    """
    ranked = rank_by_staleness(store, projects)
    selected = ranked[:max(limit, 0)]

    for project, updated in selected:
        logger.debug(f"Selected {project.repo} (last updated {updated or 'never'})")
    logger.info(f"Selected {len(selected)} of {len(ranked)} projects to update")

    return [project for project, _ in selected]
