"""
Project domain objects for statusboard.

A Project is identified by its GitHub owner and repository name. Two
projects with the same (owner, name) are the same project regardless of
the optional fields discovered during a crawl.
"""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Dict, Optional, Tuple, Union


@total_ordering
@dataclass(eq=False)
class Project:
    """
    A repository tracked on the status board.

    Attributes:
        repo_owner: GitHub owner (user or organization)
        repo_name: GitHub repository name
        package_name: npm package name, discovered from package.json if unset
        primary_branch: Branch to read files from, discovered from the repo if unset
        display_name: Optional human readable name from configuration
    """

    repo_owner: str
    repo_name: str
    package_name: Optional[str] = None
    primary_branch: Optional[str] = None
    display_name: Optional[str] = field(default=None, repr=False)

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.repo_owner, self.repo_name)

    @property
    def repo(self) -> str:
        """Repository slug, e.g. 'expressjs/express'."""
        return f"{self.repo_owner}/{self.repo_name}"

    @property
    def key_prefix(self) -> str:
        """Prefix shared by every store key for this project."""
        return f"{self.repo_owner}:{self.repo_name}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Project):
            return NotImplemented
        return self.identity == other.identity

    def __lt__(self, other) -> bool:
        if not isinstance(other, Project):
            return NotImplemented
        return self.identity < other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __str__(self) -> str:
        return self.repo

    @classmethod
    def from_spec(cls, spec: Union[str, Dict[str, Any], 'Project']) -> 'Project':
        """
        Build a Project from a configuration entry.

        Accepts:
            'owner/name'
            {'repo': 'owner/name', 'name': 'Display', 'packageName': 'pkg', 'primaryBranch': 'main'}
            {'repoOwner': 'owner', 'repoName': 'name'}

        Raises:
            ValueError: If the entry does not name a repository
        """
        if isinstance(spec, Project):
            return spec

        if isinstance(spec, str):
            owner, name = _split_slug(spec)
            return cls(repo_owner=owner, repo_name=name)

        if isinstance(spec, dict):
            if spec.get('repo'):
                owner, name = _split_slug(spec['repo'])
            else:
                owner = spec.get('repoOwner') or spec.get('repo_owner')
                name = spec.get('repoName') or spec.get('repo_name')
                if not owner or not name:
                    raise ValueError(f"Project entry has no repository: {spec!r}")
            return cls(
                repo_owner=owner,
                repo_name=name,
                package_name=spec.get('packageName') or spec.get('package_name'),
                primary_branch=spec.get('primaryBranch') or spec.get('primary_branch'),
                display_name=spec.get('name'),
            )

        raise ValueError(f"Unsupported project entry: {spec!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'repoOwner': self.repo_owner,
            'repoName': self.repo_name,
            'packageName': self.package_name,
            'primaryBranch': self.primary_branch,
        }


def _split_slug(slug: str) -> Tuple[str, str]:
    parts = slug.strip().strip('/').split('/')
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Expected 'owner/name', got {slug!r}")
    return parts[0], parts[1]


@dataclass(frozen=True)
class Organization:
    """A GitHub organization whose repositories are all tracked."""

    name: str

    @classmethod
    def from_spec(cls, spec: Union[str, Dict[str, Any]]) -> 'Organization':
        if isinstance(spec, str):
            return cls(name=spec)
        if isinstance(spec, dict) and spec.get('name'):
            return cls(name=spec['name'])
        raise ValueError(f"Unsupported organization entry: {spec!r}")
