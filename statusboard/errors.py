"""
Error taxonomy for statusboard.

- TransportError: network/API failure talking to GitHub or npm
- NotFoundError: the resource does not exist (a signal, not a failure)
- BatchQueryError: a combined multi-project GraphQL query reported errors
- SourceFetchError: one source for one project could not be read

TransportError and NotFoundError both derive from SourceFetchError so the
crawler can isolate any per-source failure with a single except clause.
"""

from typing import Any, Dict, List, Optional


class StatusboardError(Exception):
    """Base class for all statusboard errors."""


class SourceFetchError(StatusboardError):
    """A single data source for a single project failed."""


class TransportError(SourceFetchError):
    """Network or API failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(SourceFetchError):
    """The requested resource or key does not exist."""

    def __init__(self, what: str):
        super().__init__(f"Not found: {what}")
        self.what = what


class BatchQueryError(StatusboardError):
    """A combined GraphQL query returned top-level errors."""

    def __init__(self, errors: List[Dict[str, Any]], pass_name: str = ""):
        messages = [e.get('message', str(e)) if isinstance(e, dict) else str(e) for e in errors]
        prefix = f"{pass_name}: " if pass_name else ""
        super().__init__(f"{prefix}{len(errors)} GraphQL error(s): " + "; ".join(messages))
        self.errors = errors
        self.pass_name = pass_name
