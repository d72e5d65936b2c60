"""
statusboard - incremental crawl-and-index pipeline for a project status board.

Quick Start:
    from statusboard import load_config, run_index_build
    from statusboard.database import KeyValueStore, get_db_path

    config = load_config()
    with KeyValueStore(get_db_path(config)) as store:
        stats = run_index_build(config, store)
        print(stats.to_dict())

Pipeline:
    registry   - configured orgs + projects -> deduplicated Projects
    selector   - stalest projects first, bounded per run
    pagination - open issues for all selected projects in two GraphQL passes
    crawler    - ordered CrawlEvent stream per project, failures isolated per source
    projector  - one store write per event; lastUpdated written last
"""

__version__ = "0.1.0"

from .domain import (
    Project,
    Organization,
    EventKind,
    CrawlEvent,
)
from .errors import (
    StatusboardError,
    TransportError,
    NotFoundError,
    BatchQueryError,
    SourceFetchError,
)
from .config import load_config
from .crawler import Sources, load_project, iterate_projects
from .pagination import IssuePaginator, IssueBatch
from .projector import project_events, event_key
from .registry import get_all_projects
from .selector import select_projects_to_update
from .index import run_index_build

__all__ = [
    "__version__",
    "Project",
    "Organization",
    "EventKind",
    "CrawlEvent",
    "StatusboardError",
    "TransportError",
    "NotFoundError",
    "BatchQueryError",
    "SourceFetchError",
    "load_config",
    "Sources",
    "load_project",
    "iterate_projects",
    "IssuePaginator",
    "IssueBatch",
    "project_events",
    "event_key",
    "get_all_projects",
    "select_projects_to_update",
    "run_index_build",
]
