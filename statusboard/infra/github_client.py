"""
GitHub API client infrastructure for statusboard.

Provides a thin abstraction over GitHub API access:
- REST calls through a requests session with token authentication
- Rate limit tracking from response headers
- Exponential backoff when rate limited (REST only)
- A raw GraphQL entry point used by the issue paginator

GraphQL requests are never retried here: a batch query charges quota per
item requested, so a failed pass is surfaced to the caller instead.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

import requests

from ..domain import RepoFacts, Issue, Activity, Commit
from ..errors import NotFoundError, TransportError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def minutes_until_reset(self) -> int:
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 100 remaining)."""
        return self.remaining < 100


def _is_rate_limited(response: requests.Response) -> bool:
    """429, or a 403 that comes with an exhausted quota or a Retry-After header."""
    if response.status_code == 429:
        return True
    if response.status_code != 403:
        return False
    return response.headers.get('X-RateLimit-Remaining') == '0' or 'Retry-After' in response.headers


class GitHubClient:
    """
    GitHub API client with rate limiting.

    Example:
        client = GitHubClient(token="...")
        repo = client.get_repo("expressjs", "express")
        for issue in client.get_issues("expressjs", "express"):
            print(issue.number, issue.title)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        timeout: int = 30,
        api_url: str = GITHUB_API_URL,
        graphql_url: str = GITHUB_GRAPHQL_URL,
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token (defaults to STATUSBOARD_GITHUB_TOKEN or GITHUB_TOKEN env var)
            max_retries: Maximum retry attempts for rate-limited REST requests
            base_delay: Base delay for exponential backoff
            max_delay: Maximum delay between retries
            timeout: HTTP timeout in seconds
        """
        self.token = token or os.environ.get('STATUSBOARD_GITHUB_TOKEN') or os.environ.get('GITHUB_TOKEN')
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.timeout = timeout
        self.api_url = api_url.rstrip('/')
        self.graphql_url = graphql_url
        self._rate_limit_status: Optional[RateLimitStatus] = None

        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'statusboard',
        })
        if self.token:
            self.session.headers['Authorization'] = f'bearer {self.token}'

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'GitHubClient':
        github = config.get('github', {})
        rate_limit = github.get('rate_limit', {})
        return cls(
            token=github.get('token') or None,
            max_retries=rate_limit.get('max_retries', 3),
            max_delay=rate_limit.get('max_delay_seconds', 60),
            timeout=github.get('timeout_seconds', 30),
        )

    @property
    def rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Status from the last API call, if any."""
        return self._rate_limit_status

    def _update_rate_limit_from_headers(self, headers) -> None:
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )

            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    def _request(self, url: str, params: Optional[Dict[str, Any]] = None,
                 accept: Optional[str] = None) -> requests.Response:
        """
        GET a REST url, retrying while rate limited.

        Raises:
            NotFoundError: On 404
            TransportError: On any other failure
        """
        headers = {'Accept': accept} if accept else None

        for attempt in range(self.max_retries):
            try:
                response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            except requests.RequestException as e:
                raise TransportError(f"GitHub request failed for {url}: {e}") from e

            self._update_rate_limit_from_headers(response.headers)

            if response.status_code == 200:
                return response

            if response.status_code == 404:
                raise NotFoundError(url)

            if _is_rate_limited(response) and attempt < self.max_retries - 1:
                reset_time = response.headers.get('X-RateLimit-Reset')
                if reset_time:
                    wait_time = int(reset_time) - int(time.time())
                    if 0 < wait_time < self.max_delay:
                        logger.info(f"Rate limited, waiting {wait_time}s")
                        time.sleep(wait_time)
                        continue

                # Exponential backoff
                delay = min(self.base_delay * (2 ** attempt), self.max_delay)
                logger.info(f"Rate limited, waiting {delay}s (attempt {attempt + 1})")
                time.sleep(delay)
                continue

            raise TransportError(
                f"GitHub API error {response.status_code} for {url}",
                status_code=response.status_code,
            )

        raise TransportError(f"GitHub API retries exhausted for {url}")

    def _api(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = self._request(f"{self.api_url}/{endpoint}", params=params)
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"GitHub returned invalid JSON for {endpoint}: {e}") from e

    def _paginate(self, endpoint: str, params: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None) -> Iterator[Dict[str, Any]]:
        """Yield items across pages by following Link headers."""
        url: Optional[str] = f"{self.api_url}/{endpoint}"
        query = dict(params or {})
        query.setdefault('per_page', 100)
        count = 0

        while url:
            response = self._request(url, params=query)
            try:
                items = response.json()
            except ValueError as e:
                raise TransportError(f"GitHub returned invalid JSON for {endpoint}: {e}") from e

            for item in items:
                if limit is not None and count >= limit:
                    return
                yield item
                count += 1

            if limit is not None and count >= limit:
                return
            url = response.links.get('next', {}).get('url')
            # The next link already carries the query string
            query = None

    def list_org_repos(self, org: str) -> Iterator[RepoFacts]:
        """Lazily list every repository in an organization."""
        for data in self._paginate(f"orgs/{org}/repos", params={'type': 'public'}):
            yield RepoFacts.from_api_response(data)

    def get_repo(self, owner: str, name: str) -> RepoFacts:
        return RepoFacts.from_api_response(self._api(f"repos/{owner}/{name}"))

    def get_readme(self, owner: str, name: str, branch: Optional[str] = None) -> str:
        """
        Get the raw README for a branch.

        Raises:
            NotFoundError: If the repository has no README
        """
        params = {'ref': branch} if branch else None
        response = self._request(
            f"{self.api_url}/repos/{owner}/{name}/readme",
            params=params,
            accept='application/vnd.github.v3.raw',
        )
        return response.text

    def get_issues(self, owner: str, name: str, limit: Optional[int] = None) -> Iterator[Issue]:
        """Lazily list open issues, newest first. Pull requests are skipped."""
        params = {'state': 'open', 'sort': 'created', 'direction': 'desc'}
        for data in self._paginate(f"repos/{owner}/{name}/issues", params=params, limit=limit):
            if 'pull_request' in data:
                continue
            yield Issue.from_api_response(data)

    def get_activity(self, owner: str, name: str, limit: Optional[int] = None) -> Iterator[Activity]:
        for data in self._paginate(f"repos/{owner}/{name}/events", limit=limit):
            yield Activity.from_api_response(data)

    def get_commits(self, owner: str, name: str, branch: Optional[str] = None,
                    limit: Optional[int] = None) -> Iterator[Commit]:
        params = {'sha': branch} if branch else None
        for data in self._paginate(f"repos/{owner}/{name}/commits", params=params, limit=limit):
            yield Commit.from_api_response(data)

    def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute one GraphQL request and return the raw payload.

        The payload is returned as-is, including any top-level 'errors'
        list; callers decide how to treat query-level errors.

        Raises:
            TransportError: If the HTTP round trip fails
        """
        body = {'query': query, 'variables': variables or {}}
        try:
            response = self.session.post(self.graphql_url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"GitHub GraphQL request failed: {e}") from e

        self._update_rate_limit_from_headers(response.headers)

        if response.status_code != 200:
            raise TransportError(
                f"GitHub GraphQL error {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"GitHub GraphQL returned invalid JSON: {e}") from e
