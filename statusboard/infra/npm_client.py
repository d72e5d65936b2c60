"""
npm registry client for statusboard.

Fetches the packument (every version of a package) and the manifest
(one resolved version) from the public registry.
"""

import logging
from typing import Any, Dict
from urllib.parse import quote

import requests

from ..errors import NotFoundError, SourceFetchError, TransportError

logger = logging.getLogger(__name__)

NPM_REGISTRY_URL = "https://registry.npmjs.org"


def encode_package_name(name: str) -> str:
    """Encode a package name for a registry URL ('@scope/pkg' -> '@scope%2Fpkg')."""
    if not isinstance(name, str) or not name:
        raise ValueError(f"Invalid npm package name: {name!r}")
    return quote(name, safe='@')


class NpmClient:
    """
    Client for the npm registry REST API.

    Example:
        npm = NpmClient()
        packument = npm.get_packument("express")
        manifest = npm.get_manifest("express")
    """

    def __init__(self, registry_url: str = NPM_REGISTRY_URL, timeout: int = 30):
        self.registry_url = registry_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'statusboard',
        })

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'NpmClient':
        npm = config.get('npm', {})
        return cls(
            registry_url=npm.get('registry_url', NPM_REGISTRY_URL),
            timeout=npm.get('timeout_seconds', 30),
        )

    def _get(self, path: str) -> Dict[str, Any]:
        url = f"{self.registry_url}/{path}"
        logger.debug(f"npm registry GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"npm registry request failed for {url}: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(url)
        if response.status_code != 200:
            raise TransportError(
                f"npm registry returned {response.status_code} for {url}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"npm registry returned invalid JSON for {url}: {e}") from e
        if not isinstance(data, dict):
            raise SourceFetchError(f"npm registry returned a non-object document for {url}")
        return data

    def get_packument(self, name: str) -> Dict[str, Any]:
        """Get the full registry document for a package."""
        return self._get(encode_package_name(name))

    def get_manifest(self, name: str, version: str = 'latest') -> Dict[str, Any]:
        """Get the manifest for one version or dist-tag of a package."""
        return self._get(f"{encode_package_name(name)}/{quote(version, safe='')}")
