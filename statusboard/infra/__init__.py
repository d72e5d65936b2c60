"""
Infrastructure layer for statusboard.

Contains abstractions for external systems:
- GitHubClient: GitHub REST and GraphQL access
- NpmClient: npm registry access
- ContentReader: raw file reads from repositories

These provide clean interfaces that can be replaced with fakes for testing.
"""

from .github_client import GitHubClient, RateLimitStatus
from .npm_client import NpmClient
from .content_reader import ContentReader

__all__ = [
    'GitHubClient',
    'RateLimitStatus',
    'NpmClient',
    'ContentReader',
]
