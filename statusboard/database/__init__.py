"""
Database module for statusboard.

Provides the SQLite-backed key-value store the index is written to and
the dashboard reads from.

Key namespace:
    {owner}:{name}:lastUpdated          epoch milliseconds of the last full crawl
    {owner}:{name}:REPO                 repository facts
    {owner}:{name}:PACKAGE_JSON         package.json
    {owner}:{name}:PACKUMENT            npm packument
    {owner}:{name}:PACKAGE_MANIFEST     npm manifest
    {owner}:{name}:README               README text
    {owner}:{name}:TRAVIS               parsed .travis.yml
    {owner}:{name}:ISSUE:{number}       open issue
    {owner}:{name}:ACTIVITY:{id}        activity record
    {owner}:{name}:COMMIT:{nodeId}      commit
"""

from .connection import get_connection, get_db_path
from .schema import CURRENT_VERSION, ensure_schema, get_schema_version
from .store import KeyValueStore

__all__ = [
    'get_connection',
    'get_db_path',
    'CURRENT_VERSION',
    'ensure_schema',
    'get_schema_version',
    'KeyValueStore',
]
