"""
Redmine REST API client.

Provides:
- Paginated collection fetching with a per-resource cache
- Name/id listings derived from fetched collections
- XML payload building for create/update requests
- Project and custom field resource operations
"""

from .exceptions import RedmineClientError, TransportError, ValidationError

__all__ = [
    "RedmineClientError",
    "TransportError",
    "ValidationError",
]
