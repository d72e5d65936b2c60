"""
Crawl event domain objects for statusboard.

A crawl produces an ordered stream of CrawlEvent values per project.
Each event kind carries its own payload type:

    REPO              RepoFacts
    PACKAGE_JSON      dict (package.json contents)
    PACKUMENT         dict (npm registry document)
    PACKAGE_MANIFEST  dict (npm manifest for one version)
    README            str
    TRAVIS            dict (parsed .travis.yml)
    ISSUE             Issue
    ACTIVITY          Activity
    COMMIT            Commit
    FINISHED          Finished
    ERROR             CrawlError

Events are immutable once produced.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .project import Project


class EventKind(str, Enum):
    """Kinds of crawl event, in the order a project emits them."""
    REPO = 'REPO'
    PACKAGE_JSON = 'PACKAGE_JSON'
    PACKUMENT = 'PACKUMENT'
    PACKAGE_MANIFEST = 'PACKAGE_MANIFEST'
    README = 'README'
    TRAVIS = 'TRAVIS'
    ISSUE = 'ISSUE'
    ACTIVITY = 'ACTIVITY'
    COMMIT = 'COMMIT'
    FINISHED = 'FINISHED'
    ERROR = 'ERROR'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RepoFacts:
    """GitHub repository metadata."""
    owner: str
    name: str
    full_name: str
    description: Optional[str] = None
    homepage: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues: int = 0
    is_fork: bool = False
    is_archived: bool = False
    default_branch: str = 'main'
    topics: tuple = ()
    license_key: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    pushed_at: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'RepoFacts':
        """Create from a GitHub REST API repository response."""
        owner = data.get('owner') or {}
        license_info = data.get('license') or {}

        return cls(
            owner=owner.get('login', '') if isinstance(owner, dict) else str(owner),
            name=data.get('name', ''),
            full_name=data.get('full_name', ''),
            description=data.get('description'),
            homepage=data.get('homepage'),
            language=data.get('language'),
            stars=data.get('stargazers_count', 0),
            forks=data.get('forks_count', 0),
            watchers=data.get('watchers_count', 0),
            open_issues=data.get('open_issues_count', 0),
            is_fork=data.get('fork', False),
            is_archived=data.get('archived', False),
            default_branch=data.get('default_branch') or 'main',
            topics=tuple(data.get('topics') or ()),
            license_key=license_info.get('key') if isinstance(license_info, dict) else None,
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
            pushed_at=data.get('pushed_at'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'owner': self.owner,
            'name': self.name,
            'full_name': self.full_name,
            'description': self.description,
            'homepage': self.homepage,
            'language': self.language,
            'stars': self.stars,
            'forks': self.forks,
            'watchers': self.watchers,
            'open_issues': self.open_issues,
            'is_fork': self.is_fork,
            'is_archived': self.is_archived,
            'default_branch': self.default_branch,
            'topics': list(self.topics),
            'license_key': self.license_key,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'pushed_at': self.pushed_at,
        }


@dataclass(frozen=True)
class Label:
    name: str
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'color': self.color}


@dataclass(frozen=True)
class Issue:
    """An open issue. Keyed by its number within the repository."""
    number: int
    title: str
    url: Optional[str] = None
    author: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    labels: tuple = ()

    @classmethod
    def from_graphql(cls, node: Dict[str, Any]) -> 'Issue':
        """Create from a GraphQL issue node."""
        author = node.get('author') or {}
        label_nodes = (node.get('labels') or {}).get('nodes') or []
        return cls(
            number=node['number'],
            title=node.get('title', ''),
            url=node.get('url'),
            author=author.get('login'),
            created_at=node.get('createdAt'),
            updated_at=node.get('updatedAt'),
            labels=tuple(Label(name=l.get('name', ''), color=l.get('color')) for l in label_nodes),
        )

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'Issue':
        """Create from a GitHub REST API issue response."""
        user = data.get('user') or {}
        return cls(
            number=data['number'],
            title=data.get('title', ''),
            url=data.get('html_url'),
            author=user.get('login'),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
            labels=tuple(
                Label(name=l.get('name', ''), color=l.get('color'))
                for l in data.get('labels') or []
                if isinstance(l, dict)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'number': self.number,
            'title': self.title,
            'url': self.url,
            'author': self.author,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'labels': [label.to_dict() for label in self.labels],
        }


@dataclass(frozen=True)
class Activity:
    """A repository event from the GitHub events feed."""
    id: str
    type: str
    actor: Optional[str] = None
    created_at: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'Activity':
        actor = data.get('actor') or {}
        return cls(
            id=str(data['id']),
            type=data.get('type', ''),
            actor=actor.get('login'),
            created_at=data.get('created_at'),
            payload=data.get('payload') or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type,
            'actor': self.actor,
            'createdAt': self.created_at,
            'payload': self.payload,
        }


@dataclass(frozen=True)
class Commit:
    """A commit on the default branch. Keyed by its GraphQL node id."""
    node_id: str
    sha: str
    message: str = ''
    author: Optional[str] = None
    date: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'Commit':
        commit = data.get('commit') or {}
        commit_author = commit.get('author') or {}
        user = data.get('author') or {}
        return cls(
            node_id=data['node_id'],
            sha=data.get('sha', ''),
            message=commit.get('message', ''),
            author=user.get('login') or commit_author.get('name'),
            date=commit_author.get('date'),
            url=data.get('html_url'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodeId': self.node_id,
            'sha': self.sha,
            'message': self.message,
            'author': self.author,
            'date': self.date,
            'url': self.url,
        }


@dataclass(frozen=True)
class CrawlError:
    """A failed source: which one, and why."""
    source: EventKind
    cause: BaseException = field(hash=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self.source.value,
            'error': type(self.cause).__name__,
            'message': str(self.cause),
        }

    def __str__(self) -> str:
        return f"{self.source.value}: {type(self.cause).__name__}: {self.cause}"


@dataclass(frozen=True)
class Finished:
    """Terminal marker. issues_truncated is set when open issues did not fit two pages."""
    issues_truncated: bool = False


_PAYLOAD_TYPES = {
    EventKind.REPO: RepoFacts,
    EventKind.PACKAGE_JSON: dict,
    EventKind.PACKUMENT: dict,
    EventKind.PACKAGE_MANIFEST: dict,
    EventKind.README: str,
    EventKind.TRAVIS: dict,
    EventKind.ISSUE: Issue,
    EventKind.ACTIVITY: Activity,
    EventKind.COMMIT: Commit,
    EventKind.FINISHED: Finished,
    EventKind.ERROR: CrawlError,
}


@dataclass(frozen=True)
class CrawlEvent:
    """
    One unit of a project's crawl stream.

    Attributes:
        kind: What the detail is
        project: The project the event belongs to
        detail: Kind-specific payload (see module docstring)
    """

    kind: EventKind
    project: Project
    detail: Any

    def __post_init__(self):
        expected = _PAYLOAD_TYPES[self.kind]
        if not isinstance(self.detail, expected):
            raise TypeError(
                f"{self.kind.value} event expects {expected.__name__}, "
                f"got {type(self.detail).__name__}"
            )

    def __repr__(self) -> str:
        return f"CrawlEvent(kind={self.kind.value}, project={self.project.repo!r})"


def project_detail(kind: EventKind, project: Project, detail: Any) -> CrawlEvent:
    return CrawlEvent(kind=kind, project=project, detail=detail)


def error_event(project: Project, source: EventKind, cause: BaseException) -> CrawlEvent:
    return CrawlEvent(kind=EventKind.ERROR, project=project, detail=CrawlError(source, cause))


def finished_event(project: Project, issues_truncated: bool = False) -> CrawlEvent:
    return CrawlEvent(kind=EventKind.FINISHED, project=project, detail=Finished(issues_truncated))
