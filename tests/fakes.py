"""
In-memory fakes for the external collaborators.

They follow the client contracts used by the crawler, registry and
paginator, and record every call so tests can assert on request volume.
"""

from typing import Any, Dict, List, Optional, Tuple

from statusboard.domain import Activity, Commit, Issue, RepoFacts
from statusboard.errors import NotFoundError

Key = Tuple[str, str]


def issue_node(number: int) -> Dict[str, Any]:
    return {
        'number': number,
        'title': f'Issue {number}',
        'url': f'https://github.com/acme/repo/issues/{number}',
        'createdAt': '2024-01-01T00:00:00Z',
        'updatedAt': '2024-01-02T00:00:00Z',
        'author': {'login': 'octocat'},
        'labels': {'nodes': [{'name': 'bug', 'color': 'd73a4a'}]},
    }


class FakeGitHub:
    """
    Fake GitHubClient.

    Open issues for a repo are numbered total..1 (newest first); the
    cursor of the n-th edge (0-based) is 'cursor-n'.
    """

    def __init__(
        self,
        org_repos: Optional[Dict[str, List[str]]] = None,
        open_issues: Optional[Dict[Key, int]] = None,
        activity: Optional[Dict[Key, List[Activity]]] = None,
        commits: Optional[Dict[Key, List[Commit]]] = None,
        failures: Optional[Dict[Tuple[str, str, str], Exception]] = None,
        graphql_errors: Optional[List[Dict[str, Any]]] = None,
    ):
        self.org_repos = org_repos or {}
        self.open_issues = open_issues or {}
        self.activity = activity or {}
        self.commits = commits or {}
        self.failures = failures or {}
        self.graphql_errors = graphql_errors
        self.graphql_calls: List[Tuple[str, Dict[str, Any]]] = []
        self.calls: List[Tuple[str, str, str]] = []

    def _call(self, method: str, owner: str, name: str) -> None:
        self.calls.append((method, owner, name))
        error = self.failures.get((method, owner, name))
        if error is not None:
            raise error

    def list_org_repos(self, org: str):
        error = self.failures.get(('list_org_repos', org, ''))
        if error is not None:
            raise error
        if org not in self.org_repos:
            raise NotFoundError(f"orgs/{org}")
        for name in self.org_repos[org]:
            yield RepoFacts(owner=org, name=name, full_name=f"{org}/{name}")

    def get_repo(self, owner: str, name: str) -> RepoFacts:
        self._call('get_repo', owner, name)
        return RepoFacts(owner=owner, name=name, full_name=f"{owner}/{name}", default_branch='main')

    def get_readme(self, owner: str, name: str, branch: Optional[str] = None) -> str:
        self._call('get_readme', owner, name)
        return f"# {name} ({branch})"

    def get_issues(self, owner: str, name: str, limit: Optional[int] = None):
        self._call('get_issues', owner, name)
        for number in range(self.open_issues.get((owner, name), 0), 0, -1):
            yield Issue.from_graphql(issue_node(number))

    def get_activity(self, owner: str, name: str, limit: Optional[int] = None):
        self._call('get_activity', owner, name)
        yield from self.activity.get((owner, name), [])[:limit]

    def get_commits(self, owner: str, name: str, branch: Optional[str] = None, limit: Optional[int] = None):
        self._call('get_commits', owner, name)
        yield from self.commits.get((owner, name), [])[:limit]

    def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        variables = dict(variables or {})
        self.graphql_calls.append((query, variables))
        if self.graphql_errors:
            return {'data': None, 'errors': self.graphql_errors}

        data = {}
        i = 0
        while f'owner{i}' in variables:
            key = (variables[f'owner{i}'], variables[f'name{i}'])
            total = self.open_issues.get(key, 0)
            numbers = list(range(total, 0, -1))
            after = variables.get(f'after{i}')
            start = int(after.split('-')[1]) + 1 if after else 0
            chunk = numbers[start:start + variables[f'first{i}']]
            data[f'repo{i}'] = {
                'issues': {
                    'totalCount': total,
                    'edges': [
                        {'cursor': f'cursor-{start + j}', 'node': issue_node(number)}
                        for j, number in enumerate(chunk)
                    ],
                }
            }
            i += 1
        return {'data': data}


class FakeNpm:
    """Fake NpmClient; unknown packages raise NotFoundError."""

    def __init__(self, packages: Optional[Dict[str, str]] = None,
                 failures: Optional[Dict[Tuple[str, str], Exception]] = None):
        self.packages = packages or {}
        self.failures = failures or {}
        self.calls: List[Tuple[str, str]] = []

    def _check(self, method: str, name: str) -> None:
        self.calls.append((method, name))
        error = self.failures.get((method, name))
        if error is not None:
            raise error
        if name not in self.packages:
            raise NotFoundError(name)

    def get_packument(self, name: str) -> Dict[str, Any]:
        self._check('get_packument', name)
        version = self.packages[name]
        return {'name': name, 'dist-tags': {'latest': version}, 'versions': {version: {}}}

    def get_manifest(self, name: str, version: str = 'latest') -> Dict[str, Any]:
        self._check('get_manifest', name)
        return {'name': name, 'version': self.packages[name]}


class FakeContent:
    """Fake ContentReader keyed by (owner, name)."""

    def __init__(self, package_json: Optional[Dict[Key, Dict[str, Any]]] = None,
                 travis: Optional[Dict[Key, Dict[str, Any]]] = None,
                 failures: Optional[Dict[Tuple[str, str, str], Exception]] = None):
        self.package_json = package_json or {}
        self.travis = travis or {}
        self.failures = failures or {}
        self.branches: List[Optional[str]] = []

    def _check(self, method: str, project) -> None:
        self.branches.append(project.primary_branch)
        error = self.failures.get((method, project.repo_owner, project.repo_name))
        if error is not None:
            raise error

    def get_package_json(self, project):
        self._check('get_package_json', project)
        return self.package_json.get(project.identity)

    def get_travis_config(self, project):
        self._check('get_travis_config', project)
        return self.travis.get(project.identity)


class MemoryStore:
    """Dict-backed store with the KeyValueStore get/put contract."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = dict(data or {})
        self.puts: List[Tuple[str, Any]] = []

    def get(self, key: str) -> Any:
        if key not in self.data:
            raise NotFoundError(key)
        return self.data[key]

    def put(self, key: str, value: Any) -> None:
        self.puts.append((key, value))
        self.data[key] = value

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        return sorted(k for k in self.data if prefix is None or k.startswith(prefix))
