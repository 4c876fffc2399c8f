"""
Paginated collection fetching.

Redmine listing endpoints answer in bounded pages (offset/limit, at most 100
records each). PaginatedCollectionFetcher walks the pages of an endpoint,
returns the whole collection and keeps the latest one per resource type so
name/id lookups do not hit the server again.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from config import MAX_PAGE_SIZE
from redmine_client.exceptions import TransportError
from redmine_client.schema.models import (
    CollectionCache,
    CollectionEndpoint,
    IndexDirection,
    NameIndex,
    ResourceCollection,
    freeze_record,
)

logger = logging.getLogger(__name__)


class PaginatedCollectionFetcher:
    """
    Fetches complete collections from paged listing endpoints

    Usage:
    ```python
    fetcher = PaginatedCollectionFetcher(client, page_size=25)
    projects = CollectionEndpoint("/projects.json", "projects")

    collection = fetcher.fetch_all(projects, {"status": 1})
    project_id = fetcher.get_id_by_name(projects, "Website")
    ```
    """

    DEFAULT_PAGE_SIZE = 25

    def __init__(
        self,
        client,
        page_size: int = DEFAULT_PAGE_SIZE,
        cache: Optional[CollectionCache] = None,
    ):
        """
        Initialize fetcher

        Args:
            client: Transport exposing get(path, params) -> decoded JSON
            page_size: Records requested per page, capped at the server
                maximum (MAX_PAGE_SIZE)
            cache: Collection cache (a fresh one when omitted)
        """
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.client = client
        self.page_size = min(page_size, MAX_PAGE_SIZE)
        self.cache = cache if cache is not None else CollectionCache()
        self._indexes: Dict[Tuple[str, IndexDirection], Tuple[ResourceCollection, NameIndex]] = {}

    def fetch_all(
        self,
        endpoint: CollectionEndpoint,
        params: Optional[Dict[str, Any]] = None,
    ) -> ResourceCollection:
        """
        Fetch every page of a collection

        Caller params are sent with every page. An "offset" param sets the
        starting point and a "limit" param caps the total number of records
        retrieved; page-level offset/limit are computed here.

        Stops on a short page, an empty page, or once the server-reported
        total_count is reached. Without a total_count, a last page that is
        exactly full costs one extra (empty) request.

        Args:
            endpoint: Collection to fetch
            params: Filter parameters (e.g. {"status": 1})

        Returns:
            ResourceCollection with records in server order

        Raises:
            TransportError: If any page request fails. Nothing fetched in this
                call is kept and the cached snapshot is left unchanged.
        """
        page_params = dict(params or {})
        offset = int(page_params.pop("offset", 0) or 0)
        remaining = page_params.pop("limit", None)
        remaining = int(remaining) if remaining is not None else None

        records: List[Dict[str, Any]] = []
        total_count: Optional[int] = None
        pages = 0

        while remaining is None or remaining > 0:
            limit = self.page_size if remaining is None else min(self.page_size, remaining)
            page = self.client.get(endpoint.path, {**page_params, "offset": offset, "limit": limit})
            page_records = self._records_from_page(endpoint, page)
            pages += 1

            records.extend(page_records)
            offset += len(page_records)
            if remaining is not None:
                remaining -= len(page_records)
            if page.get("total_count") is not None:
                total_count = self._total_count_from_page(endpoint, page["total_count"])

            logger.debug(
                f"{endpoint.path} page {pages}: {len(page_records)} records "
                f"(offset={offset}, total_count={total_count})"
            )

            if len(page_records) < limit:
                break
            if total_count is not None and offset >= total_count:
                break

        collection = ResourceCollection(
            records=tuple(freeze_record(r) for r in records),
            total_count=total_count,
        )
        self.cache.store(endpoint.key, collection)

        logger.info(f"Fetched {len(collection)} {endpoint.key} in {pages} page(s)")
        return collection

    def listing(
        self,
        endpoint: CollectionEndpoint,
        force_update: bool = False,
        params: Optional[Dict[str, Any]] = None,
        index_by: IndexDirection = IndexDirection.NAME_TO_ID,
    ) -> NameIndex:
        """
        Name/id index of a collection

        Reuses the cached collection unless force_update is set or nothing
        (or an empty collection) is cached yet. Params only apply when a
        fetch actually happens.

        Args:
            endpoint: Collection to index
            force_update: Always fetch from the server
            params: Filter parameters for the fetch
            index_by: NAME_TO_ID (default) or ID_TO_NAME

        Returns:
            NameIndex built from the current collection
        """
        if force_update or self.cache.is_empty(endpoint.key):
            collection = self.fetch_all(endpoint, params)
        else:
            logger.debug(f"Using cached {endpoint.key}")
            collection = self.cache.get(endpoint.key)

        cache_key = (endpoint.key, index_by)
        cached = self._indexes.get(cache_key)
        if cached is not None and cached[0] is collection:
            return cached[1]

        index = NameIndex.from_collection(collection, index_by)
        self._indexes[cache_key] = (collection, index)
        return index

    def get_id_by_name(
        self,
        endpoint: CollectionEndpoint,
        name: Any,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[int]:
        """
        Resolve a record id from its name

        Returns:
            The id, or None when no record has that name
        """
        return self.listing(endpoint, params=params).lookup(str(name))

    def invalidate(self, endpoint: Optional[CollectionEndpoint] = None) -> None:
        """Forget the cached collection for endpoint, or all of them."""
        self.cache.invalidate(endpoint.key if endpoint is not None else None)

    @staticmethod
    def _records_from_page(endpoint: CollectionEndpoint, page: Any) -> List[Dict[str, Any]]:
        """Extract the records of one page"""
        if not isinstance(page, dict):
            raise TransportError(
                f"GET {endpoint.path} returned {type(page).__name__}, expected an object",
                method="GET",
                path=endpoint.path,
            )
        records = page.get(endpoint.key) or []
        if not isinstance(records, list):
            raise TransportError(
                f"GET {endpoint.path} returned a non-list '{endpoint.key}'",
                method="GET",
                path=endpoint.path,
            )
        for record in records:
            if not isinstance(record, dict):
                raise TransportError(
                    f"GET {endpoint.path} returned a {type(record).__name__} record, expected an object",
                    method="GET",
                    path=endpoint.path,
                )
            missing = [field for field in ("id", "name") if field not in record]
            if missing:
                raise TransportError(
                    f"GET {endpoint.path} returned a record without {', '.join(missing)}: {record!r}",
                    method="GET",
                    path=endpoint.path,
                )
            try:
                int(record["id"])
            except (TypeError, ValueError) as e:
                raise TransportError(
                    f"GET {endpoint.path} returned a non-numeric id {record['id']!r}",
                    method="GET",
                    path=endpoint.path,
                ) from e
        return records

    @staticmethod
    def _total_count_from_page(endpoint: CollectionEndpoint, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise TransportError(
                f"GET {endpoint.path} returned a non-numeric total_count {value!r}",
                method="GET",
                path=endpoint.path,
            ) from e
