"""
Redmine API Module

Transport client, paginated collection fetching and resource operations.
"""

from .client import RedmineClient, build_path
from .pagination import PaginatedCollectionFetcher
from .resource_registry import ResourceRegistry
from .resources import (
    CUSTOM_FIELD_SCHEMA,
    PROJECT_SCHEMA,
    CustomFieldApi,
    ProjectApi,
    Redmine,
    ResourceApi,
)

__all__ = [
    "CUSTOM_FIELD_SCHEMA",
    "CustomFieldApi",
    "PROJECT_SCHEMA",
    "PaginatedCollectionFetcher",
    "ProjectApi",
    "Redmine",
    "RedmineClient",
    "ResourceApi",
    "ResourceRegistry",
    "build_path",
]
