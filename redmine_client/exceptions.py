"""Errors raised by the Redmine client."""
from typing import List, Optional


class RedmineClientError(Exception):
    """Base exception for all Redmine client errors."""


class TransportError(RedmineClientError):
    """A request to the Redmine server failed or returned an unusable response."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        path: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.path = path
        self.status_code = status_code


class ValidationError(RedmineClientError):
    """Mandatory fields are missing from an outgoing payload."""

    def __init__(self, missing: List[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing mandatory parameters: {', '.join(self.missing)}")
