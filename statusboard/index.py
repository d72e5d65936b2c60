"""
Index build orchestration.

One run: resolve projects, select the stalest batch, prefetch their open
issues in two batched GraphQL passes, crawl each project, and write the
events to the store.
"""

import logging
from typing import Any, Dict, List, Optional

from .crawler import Sources, iterate_projects
from .domain import Project
from .exit_codes import NoProjectsFoundError
from .infra import ContentReader, GitHubClient, NpmClient
from .pagination import DEFAULT_PAGE_SIZE, IssueBatch, IssuePaginator
from .projector import ProjectionStats, now_millis, project_events
from .registry import get_all_projects
from .selector import select_projects_to_update

logger = logging.getLogger(__name__)

DEFAULT_MAX_PROJECTS = 50


def build_sources(
    config: Dict[str, Any],
    github: Optional[Any] = None,
    npm: Optional[Any] = None,
    content: Optional[Any] = None,
) -> Sources:
    """Use injected clients where given, otherwise construct them from config."""
    return Sources(
        github=github if github is not None else GitHubClient.from_config(config),
        npm=npm if npm is not None else NpmClient.from_config(config),
        content=content if content is not None else ContentReader.from_config(config),
    )


def run_index_build(
    config: Dict[str, Any],
    store,
    github: Optional[Any] = None,
    npm: Optional[Any] = None,
    content: Optional[Any] = None,
    limit: Optional[int] = None,
    clock=now_millis,
) -> ProjectionStats:
    """
    Run one incremental index build.

    Args:
        config: Loaded configuration
        store: Key-value store (get/put)
        github: GitHub client; built from config if None
        npm: npm registry client; built from config if None
        content: Repository file reader; built from config if None
        limit: Projects to refresh this run (defaults to index.max_projects)
        clock: Source of lastUpdated timestamps

    Returns:
        ProjectionStats for the run

    Raises:
        BatchQueryError: If a batched issue query reports errors
        TransportError: If a batched issue query cannot be sent
        NoProjectsFoundError: If the config names no projects or orgs resolve to none
    """
    index_config = config.get('index', {})
    if limit is None:
        limit = index_config.get('max_projects', DEFAULT_MAX_PROJECTS)

    sources = build_sources(config, github=github, npm=npm, content=content)

    projects = get_all_projects(sources.github, config)
    if not projects:
        raise NoProjectsFoundError("No projects configured. Add orgs or projects to the config file.")

    selected = select_projects_to_update(store, projects, limit)
    if not selected:
        logger.info("Nothing to index")
        return ProjectionStats()

    issues = prefetch_issues(sources.github, selected, index_config.get('issue_page_size', DEFAULT_PAGE_SIZE))

    stats = project_events(store, iterate_projects(sources, selected, config, issues=issues), clock=clock)
    logger.info(f"Indexed {len(stats.finished)} projects")
    return stats


def prefetch_issues(client, projects: List[Project], page_size: int = DEFAULT_PAGE_SIZE) -> IssueBatch:
    """Fetch open issues for all selected projects in at most two requests."""
    return IssuePaginator(client, page_size=page_size).fetch_open_issues(projects)
