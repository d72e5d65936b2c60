"""
Repository file reader for statusboard.

Reads individual files (package.json, .travis.yml) straight from
raw.githubusercontent.com for a project's primary branch. A missing
file is not an error: the reader returns None.
"""

import json
import logging
from typing import Any, Dict, Optional

import requests
import yaml

from ..domain import Project
from ..errors import SourceFetchError, TransportError

logger = logging.getLogger(__name__)

RAW_CONTENT_URL = "https://raw.githubusercontent.com"


class ContentReader:
    """
    Fetches raw files from a repository.

    Example:
        reader = ContentReader()
        pkg = reader.get_package_json(Project('expressjs', 'express'))
        if pkg:
            print(pkg['name'])
    """

    def __init__(self, base_url: str = RAW_CONTENT_URL, timeout: int = 30,
                 token: Optional[str] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers['User-Agent'] = 'statusboard'
        if token:
            self.session.headers['Authorization'] = f'token {token}'

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ContentReader':
        github = config.get('github', {})
        return cls(timeout=github.get('timeout_seconds', 30), token=github.get('token') or None)

    def get_file(self, project: Project, path: str) -> Optional[str]:
        """
        Read one file from the project's primary branch.

        Returns:
            File text, or None if the file does not exist
        """
        ref = project.primary_branch or 'HEAD'
        url = f"{self.base_url}/{project.repo_owner}/{project.repo_name}/{ref}/{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Request failed for {url}: {e}") from e

        if response.status_code == 404:
            logger.debug(f"{project}: no {path} on {ref}")
            return None
        if response.status_code != 200:
            raise TransportError(f"{url} returned {response.status_code}", status_code=response.status_code)
        return response.text

    def get_package_json(self, project: Project) -> Optional[Dict[str, Any]]:
        text = self.get_file(project, 'package.json')
        if text is None:
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SourceFetchError(f"{project}: invalid package.json: {e}") from e
        if not isinstance(data, dict):
            raise SourceFetchError(f"{project}: package.json is not an object")
        return data

    def get_travis_config(self, project: Project) -> Optional[Dict[str, Any]]:
        text = self.get_file(project, '.travis.yml')
        if text is None:
            return None
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SourceFetchError(f"{project}: invalid .travis.yml: {e}") from e
        return data if isinstance(data, dict) else {}
