"""
Writes crawl events into the key-value store.

Events are consumed in the order produced, one put() per event. ERROR
events are logged and never stored. FINISHED writes the current time
under '{owner}:{name}:lastUpdated'; because it is always a project's
last event, that key marks the project's data as complete.

A crawl whose open issues were cut off after two pages is not complete,
so its FINISHED event rewrites the previous lastUpdated value (or 0 for a
project never indexed). The project keeps its place in the staleness
queue and is picked again on a later run.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Set, Tuple

from .domain import CrawlEvent, EventKind, Project
from .selector import get_last_updated

logger = logging.getLogger(__name__)

LAST_UPDATED = 'lastUpdated'


def now_millis() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def event_key(event: CrawlEvent) -> Optional[str]:
    """
    Deterministic store key for an event, or None for ERROR events.

    Multi-instance kinds get a per-item suffix so instances never
    overwrite each other.
    """
    prefix = event.project.key_prefix
    kind = event.kind

    if kind is EventKind.ERROR:
        return None
    if kind is EventKind.FINISHED:
        return f"{prefix}:{LAST_UPDATED}"
    if kind is EventKind.ISSUE:
        return f"{prefix}:{kind.value}:{event.detail.number}"
    if kind is EventKind.ACTIVITY:
        return f"{prefix}:{kind.value}:{event.detail.id}"
    if kind is EventKind.COMMIT:
        return f"{prefix}:{kind.value}:{event.detail.node_id}"
    return f"{prefix}:{kind.value}"


def event_value(event: CrawlEvent, clock: Callable[[], int] = now_millis) -> Any:
    """JSON-compatible value stored for an event."""
    if event.kind is EventKind.FINISHED:
        return clock()
    detail = event.detail
    if hasattr(detail, 'to_dict'):
        return detail.to_dict()
    return detail


@dataclass
class ProjectionStats:
    """What a projection run wrote."""
    written: Counter = field(default_factory=Counter)
    errors: int = 0
    finished: Set[Project] = field(default_factory=set)
    truncated: Set[Project] = field(default_factory=set)
    failed_projects: Set[Project] = field(default_factory=set)

    @property
    def total_written(self) -> int:
        return sum(self.written.values())

    def to_dict(self) -> dict:
        return {
            'written': {kind.value: count for kind, count in self.written.items()},
            'total_written': self.total_written,
            'errors': self.errors,
            'finished': sorted(p.repo for p in self.finished),
            'truncated': sorted(p.repo for p in self.truncated),
            'failed_projects': sorted(p.repo for p in self.failed_projects),
        }


def write_event(store, event: CrawlEvent, clock: Callable[[], int] = now_millis) -> Optional[Tuple[str, Any]]:
    """Write one event. Returns the (key, value) written, or None for ERROR events."""
    key = event_key(event)
    if key is None:
        logger.warning(f"{event.project.repo}: {event.detail}")
        return None
    if event.kind is EventKind.FINISHED and event.detail.issues_truncated:
        value = get_last_updated(store, event.project)
        logger.warning(f"{event.project.repo}: issues truncated, lastUpdated kept at {value}")
    else:
        value = event_value(event, clock)
    store.put(key, value)
    return key, value


def project_events(
    store,
    events: Iterable[CrawlEvent],
    clock: Callable[[], int] = now_millis,
) -> ProjectionStats:
    """
    Consume an event stream into the store.

    Writes are synchronous and in stream order, so a project's
    lastUpdated key is written only after all its other records.

    Args:
        store: Key-value store with put()
        events: Ordered crawl events
        clock: Source of the lastUpdated timestamp (epoch milliseconds)

    Returns:
        ProjectionStats describing what was written
    """
    stats = ProjectionStats()

    for event in events:
        write_event(store, event, clock)

        if event.kind is EventKind.ERROR:
            stats.errors += 1
            stats.failed_projects.add(event.project)
            continue

        stats.written[event.kind] += 1
        if event.kind is EventKind.FINISHED:
            stats.finished.add(event.project)
            if event.detail.issues_truncated:
                stats.truncated.add(event.project)
            logger.info(f"Finished {event.project.repo}")

    logger.info(f"Wrote {stats.total_written} records, {stats.errors} source errors")
    return stats
