"""
Domain layer for statusboard.

Pure domain objects with no I/O:
- Project / Organization: what gets crawled
- CrawlEvent and its per-kind payloads: what a crawl produces
"""

from .project import Project, Organization
from .event import (
    EventKind,
    CrawlEvent,
    RepoFacts,
    Issue,
    Label,
    Activity,
    Commit,
    CrawlError,
    Finished,
    project_detail,
    error_event,
    finished_event,
)

__all__ = [
    'Project',
    'Organization',
    'EventKind',
    'CrawlEvent',
    'RepoFacts',
    'Issue',
    'Label',
    'Activity',
    'Commit',
    'CrawlError',
    'Finished',
    'project_detail',
    'error_event',
    'finished_event',
]
