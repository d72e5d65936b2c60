"""
Per-project crawler.

load_project() visits every data source for one project and yields an
ordered stream of CrawlEvents:

    REPO, PACKAGE_JSON, PACKUMENT, PACKAGE_MANIFEST, README, TRAVIS,
    ISSUE*, ACTIVITY*, COMMIT*, FINISHED

Each source is isolated. A failing source yields one ERROR event and
the crawl moves on to the next source; FINISHED is always last.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from .domain import (
    CrawlEvent,
    EventKind,
    Project,
    error_event,
    finished_event,
    project_detail,
)
from .errors import SourceFetchError
from .pagination import IssueBatch

logger = logging.getLogger(__name__)

# Failures isolated to one source: API errors plus malformed payloads
SOURCE_ERRORS = (SourceFetchError, KeyError, ValueError, TypeError)


@dataclass
class Sources:
    """
    The collaborators a crawl reads from.

    Attributes:
        github: GitHubClient-like (get_repo, get_readme, get_issues, get_activity, get_commits)
        npm: NpmClient-like (get_packument, get_manifest)
        content: ContentReader-like (get_package_json, get_travis_config)
    """
    github: Any
    npm: Any
    content: Any


def _fetch(project: Project, kind: EventKind, fetcher: Callable[[], Any]) -> Iterator[CrawlEvent]:
    """Yield one event from a single-value source, or an ERROR event if it fails."""
    try:
        detail = fetcher()
        event = project_detail(kind, project, detail) if detail is not None else None
    except SOURCE_ERRORS as e:
        logger.debug(f"{project}: {kind} failed: {e}")
        yield error_event(project, kind, e)
        return
    if event is not None:
        yield event


def _stream(project: Project, kind: EventKind, items: Callable[[], Iterable[Any]]) -> Iterator[CrawlEvent]:
    """Yield one event per item of a multi-value source; a failure ends the source with one ERROR."""
    try:
        for item in items():
            yield project_detail(kind, project, item)
    except SOURCE_ERRORS as e:
        logger.debug(f"{project}: {kind} failed: {e}")
        yield error_event(project, kind, e)


def load_project(
    sources: Sources,
    project: Project,
    config: Dict[str, Any],
    issues: Optional[IssueBatch] = None,
) -> Iterator[CrawlEvent]:
    """
    Crawl one project.

    The generator is lazy and not restartable: iterating it again means
    calling load_project() again, which re-issues every request.

    Args:
        sources: Clients to read from
        project: Project to crawl; package_name and primary_branch are
            filled in when discovered
        config: Loaded configuration (reads the 'index' section)
        issues: Prefetched open issues; projects missing from it fall back
            to the GitHub REST issue listing

    Yields:
        CrawlEvent values in source order, ending with FINISHED
    """
    index_config = config.get('index', {})
    owner, name = project.repo_owner, project.repo_name

    repo = None
    try:
        repo = sources.github.get_repo(owner, name)
    except SOURCE_ERRORS as e:
        yield error_event(project, EventKind.REPO, e)

    # Files and README are read from the resolved default branch
    if repo is not None and not project.primary_branch:
        project.primary_branch = repo.default_branch

    pkg = None
    try:
        pkg = sources.content.get_package_json(project)
    except SOURCE_ERRORS as e:
        yield error_event(project, EventKind.PACKAGE_JSON, e)

    # Registry sources key off the package name, so set it before emitting anything
    if pkg is not None and not project.package_name:
        name = pkg.get('name')
        project.package_name = name if isinstance(name, str) and name else None

    if repo is not None:
        yield project_detail(EventKind.REPO, project, repo)

    if pkg is not None:
        yield project_detail(EventKind.PACKAGE_JSON, project, pkg)

        if project.package_name:
            package_name = project.package_name
            yield from _fetch(project, EventKind.PACKUMENT, lambda: sources.npm.get_packument(package_name))
            yield from _fetch(project, EventKind.PACKAGE_MANIFEST, lambda: sources.npm.get_manifest(package_name))
        else:
            logger.info(f"{project}: package.json has no usable name, skipping npm registry")

    yield from _fetch(
        project, EventKind.README,
        lambda: sources.github.get_readme(owner, name, project.primary_branch),
    )
    yield from _fetch(project, EventKind.TRAVIS, lambda: sources.content.get_travis_config(project))

    prefetched = issues.for_project(project) if issues is not None else None
    if prefetched is not None:
        yield from _stream(project, EventKind.ISSUE, lambda: prefetched)
    else:
        yield from _stream(project, EventKind.ISSUE, lambda: sources.github.get_issues(owner, name))

    yield from _stream(
        project, EventKind.ACTIVITY,
        lambda: sources.github.get_activity(owner, name, limit=index_config.get('activity_limit')),
    )
    yield from _stream(
        project, EventKind.COMMIT,
        lambda: sources.github.get_commits(
            owner, name, branch=project.primary_branch, limit=index_config.get('commit_limit')
        ),
    )

    truncated = issues.is_truncated(project) if issues is not None else False
    yield finished_event(project, issues_truncated=truncated)


def iterate_projects(
    sources: Sources,
    projects: Iterable[Project],
    config: Dict[str, Any],
    issues: Optional[IssueBatch] = None,
) -> Iterator[CrawlEvent]:
    """Crawl projects one after another; each project's events stay contiguous and in order."""
    for project in projects:
        logger.info(f"Crawling {project.repo}")
        yield from load_project(sources, project, config, issues=issues)
