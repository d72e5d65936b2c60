"""
Two-pass batched pagination of open issues over GitHub GraphQL.

GraphQL quota is charged per item requested rather than per request, so
the paginator keeps round trips to at most two per run:

Pass 1: one aliased query covering every selected project, asking for the
        first page of open issues (newest first) of each.
Pass 2: for projects whose totalCount exceeds what pass 1 returned, one
        more aliased query asking each for exactly its remaining issues
        (capped at one page) after its last-seen cursor.

Projects that still have issues left after pass 2 are reported as
truncated. Their next crawl comes around through staleness selection.

Any query-level error aborts the pass with BatchQueryError; such errors
cannot be attributed to individual projects.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .domain import Issue, Project
from .errors import BatchQueryError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

ISSUE_FIELDS = """
        totalCount
        edges {
          cursor
          node {
            number
            title
            url
            createdAt
            updatedAt
            author { login }
            labels(first: 10) { nodes { name color } }
          }
        }"""


@dataclass(frozen=True)
class PageRequest:
    """One project's sub-query within a combined request."""
    project: Project
    first: int
    after: Optional[str] = None


@dataclass
class IssuePage:
    """What one sub-query returned for one project."""
    project: Project
    total_count: int
    issues: List[Issue] = field(default_factory=list)
    end_cursor: Optional[str] = None


@dataclass(frozen=True)
class Continuation:
    """A project that needs another page: where to resume and how many are left."""
    project: Project
    cursor: str
    remaining: int


@dataclass
class IssueBatch:
    """Open issues for a set of projects, merged across both passes."""
    issues: Dict[Project, List[Issue]] = field(default_factory=dict)
    truncated: Set[Project] = field(default_factory=set)

    def for_project(self, project: Project) -> Optional[List[Issue]]:
        return self.issues.get(project)

    def is_truncated(self, project: Project) -> bool:
        return project in self.truncated


def alias_for(index: int) -> str:
    """GraphQL alias for the index-th sub-query. Aliases must be valid names."""
    return f"repo{index}"


def build_issue_query(requests: Sequence[PageRequest]) -> Tuple[str, Dict[str, Any], Dict[str, Project]]:
    """
    Build one combined query for many projects.

    Owners, names and cursors are passed as variables so repository names
    never need escaping inside the query text.

    Returns:
        (query, variables, alias -> project)
    """
    declarations: List[str] = []
    selections: List[str] = []
    variables: Dict[str, Any] = {}
    aliases: Dict[str, Project] = {}

    for i, request in enumerate(requests):
        alias = alias_for(i)
        aliases[alias] = request.project
        variables[f"owner{i}"] = request.project.repo_owner
        variables[f"name{i}"] = request.project.repo_name
        variables[f"first{i}"] = request.first
        declarations.extend([f"$owner{i}: String!", f"$name{i}: String!", f"$first{i}: Int!"])

        after = ""
        if request.after is not None:
            variables[f"after{i}"] = request.after
            declarations.append(f"$after{i}: String")
            after = f", after: $after{i}"

        selections.append(
            f"""
  {alias}: repository(owner: $owner{i}, name: $name{i}) {{
    issues(states: OPEN, first: $first{i}{after}, orderBy: {{field: CREATED_AT, direction: DESC}}) {{{ISSUE_FIELDS}
    }}
  }}"""
        )

    query = f"query OpenIssues({', '.join(declarations)}) {{{''.join(selections)}\n}}"
    return query, variables, aliases


def parse_issue_page(project: Project, node: Optional[Dict[str, Any]]) -> IssuePage:
    """Turn one aliased repository result into an IssuePage."""
    if node is None:
        logger.warning(f"{project}: repository missing from batch response")
        return IssuePage(project=project, total_count=0)

    connection = node.get('issues') or {}
    edges = connection.get('edges') or []
    return IssuePage(
        project=project,
        total_count=connection.get('totalCount', 0),
        issues=[Issue.from_graphql(edge['node']) for edge in edges],
        end_cursor=edges[-1]['cursor'] if edges else None,
    )


class IssuePaginator:
    """
    Fetches open issues for many projects in at most two GraphQL requests.

    Example:
        paginator = IssuePaginator(GitHubClient(token))
        batch = paginator.fetch_open_issues(projects)
        for issue in batch.for_project(project) or []:
            print(issue.number)
    """

    def __init__(self, client, page_size: int = DEFAULT_PAGE_SIZE):
        """
        Args:
            client: Anything with graphql(query, variables) -> payload dict
            page_size: Issues per project per pass (GitHub caps this at 100)
        """
        if not 0 < page_size <= 100:
            raise ValueError(f"page_size must be between 1 and 100, got {page_size}")
        self.client = client
        self.page_size = page_size

    def _execute(self, requests: Sequence[PageRequest], pass_name: str) -> Dict[Project, IssuePage]:
        query, variables, aliases = build_issue_query(requests)
        logger.debug(f"{pass_name}: requesting issues for {len(aliases)} projects")

        payload = self.client.graphql(query, variables)
        errors = payload.get('errors')
        if errors:
            raise BatchQueryError(errors, pass_name=pass_name)

        data = payload.get('data')
        if data is None:
            raise BatchQueryError([{'message': 'response contained no data'}], pass_name=pass_name)

        return {project: parse_issue_page(project, data.get(alias)) for alias, project in aliases.items()}

    def first_pass(self, projects: Iterable[Project]) -> Dict[Project, IssuePage]:
        """Request the first page of open issues for every project at once."""
        requests = [PageRequest(project=project, first=self.page_size) for project in projects]
        if not requests:
            return {}
        return self._execute(requests, 'pass 1')

    def find_remaining(self, pages: Dict[Project, IssuePage]) -> List[Continuation]:
        """Projects whose reported total exceeds what was returned."""
        continuations = []
        for project, page in pages.items():
            remaining = page.total_count - len(page.issues)
            if remaining > 0 and page.end_cursor:
                continuations.append(Continuation(project=project, cursor=page.end_cursor, remaining=remaining))
        return continuations

    def second_pass(self, continuations: Sequence[Continuation]) -> Dict[Project, IssuePage]:
        """Request each continuing project's remaining issues after its cursor, in one request."""
        requests = [
            PageRequest(project=c.project, first=min(self.page_size, c.remaining), after=c.cursor)
            for c in continuations
        ]
        if not requests:
            return {}
        return self._execute(requests, 'pass 2')

    def fetch_open_issues(self, projects: Iterable[Project]) -> IssueBatch:
        """
        Run both passes and merge the results.

        Raises:
            BatchQueryError: If either pass reports query errors
            TransportError: If either round trip fails
        """
        pages = self.first_pass(projects)
        batch = IssueBatch(issues={project: list(page.issues) for project, page in pages.items()})

        continuations = self.find_remaining(pages)
        if continuations:
            logger.info(f"{len(continuations)} projects need a second page of issues")
            for project, page in self.second_pass(continuations).items():
                batch.issues[project].extend(page.issues)

        for project, page in pages.items():
            if len(batch.issues[project]) < page.total_count:
                batch.truncated.add(project)
                logger.warning(
                    f"{project}: fetched {len(batch.issues[project])} of {page.total_count} open issues"
                )

        return batch
