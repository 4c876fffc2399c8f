"""
Unit tests for paginated collection fetching

Tests:
- fetch_all: page walking, stop conditions, params, failures
- listing: cache reuse, forced refresh, index directions
- get_id_by_name: hits and misses
"""

import pytest
from unittest.mock import Mock

from redmine_client.api.pagination import PaginatedCollectionFetcher
from redmine_client.exceptions import TransportError
from redmine_client.schema.models import (
    CollectionEndpoint,
    IndexDirection,
    NameIndex,
    ResourceCollection,
)


PROJECTS = CollectionEndpoint("/projects.json", "projects")


def make_records(count, start=1):
    """Records shaped like Redmine projects"""
    return [
        {"id": i, "name": f"Project {i}", "identifier": f"project-{i}"}
        for i in range(start, start + count)
    ]


def paged_client(records, report_total=True, key="projects", max_limit=None):
    """Transport stub serving records by offset/limit like the server does

    max_limit caps the page size the way Redmine silently caps limit at 100.
    """
    client = Mock()

    def get(path, params=None):
        offset = params["offset"]
        limit = params["limit"] if max_limit is None else min(params["limit"], max_limit)
        page = {key: records[offset:offset + limit], "offset": offset, "limit": limit}
        if report_total:
            page["total_count"] = len(records)
        return page

    client.get.side_effect = get
    return client


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def sixty_projects():
    return make_records(60)


@pytest.fixture
def duplicate_projects():
    """Two projects named X, fetched in id order"""
    return [
        {"id": 1, "name": "X"},
        {"id": 2, "name": "X"},
        {"id": 3, "name": "Y"},
    ]


# ============================================================================
# TEST: fetch_all
# ============================================================================


class TestFetchAll:
    """Tests for PaginatedCollectionFetcher.fetch_all"""

    def test_fetches_every_record_in_server_order(self, sixty_projects):
        """Test 60 records in pages of 25 take 3 requests"""
        client = paged_client(sixty_projects)
        fetcher = PaginatedCollectionFetcher(client, page_size=25)

        collection = fetcher.fetch_all(PROJECTS)

        assert isinstance(collection, ResourceCollection)
        assert len(collection) == 60
        assert [r["id"] for r in collection] == list(range(1, 61))
        assert collection.total_count == 60
        assert client.get.call_count == 3

    def test_request_count_when_total_is_multiple_of_page_size(self):
        """Test the stated total stops the loop without an extra request"""
        client = paged_client(make_records(50))
        fetcher = PaginatedCollectionFetcher(client, page_size=25)

        collection = fetcher.fetch_all(PROJECTS)

        assert len(collection) == 50
        assert client.get.call_count == 2

    def test_offsets_advance_by_records_returned(self, sixty_projects):
        """Test each request carries the computed offset and limit"""
        client = paged_client(sixty_projects)
        fetcher = PaginatedCollectionFetcher(client, page_size=25)

        fetcher.fetch_all(PROJECTS)

        sent = [call.args[1] for call in client.get.call_args_list]
        assert [(p["offset"], p["limit"]) for p in sent] == [(0, 25), (25, 25), (50, 25)]
        assert all(call.args[0] == "/projects.json" for call in client.get.call_args_list)

    def test_short_page_stops_before_stated_total(self):
        """Test a short page ends the fetch even if total_count says more"""
        client = Mock()
        client.get.return_value = {"projects": make_records(10), "total_count": 100}
        fetcher = PaginatedCollectionFetcher(client, page_size=25)

        collection = fetcher.fetch_all(PROJECTS)

        assert len(collection) == 10
        assert client.get.call_count == 1

    def test_empty_page_stops(self):
        """Test an empty first page yields an empty collection"""
        client = Mock()
        client.get.return_value = {"projects": []}
        fetcher = PaginatedCollectionFetcher(client, page_size=25)

        collection = fetcher.fetch_all(PROJECTS)

        assert collection.is_empty
        assert collection.total_count is None
        assert client.get.call_count == 1

    def test_full_last_page_without_total_costs_one_extra_request(self):
        """Test exhaustion is confirmed with an empty page when no total is reported"""
        client = paged_client(make_records(50), report_total=False)
        fetcher = PaginatedCollectionFetcher(client, page_size=25)

        collection = fetcher.fetch_all(PROJECTS)

        assert len(collection) == 50
        assert client.get.call_count == 3
        assert client.get.call_args_list[-1].args[1]["offset"] == 50

    def test_caller_params_sent_with_every_page(self, sixty_projects):
        """Test filter params are merged into each page request"""
        client = paged_client(sixty_projects)
        fetcher = PaginatedCollectionFetcher(client, page_size=25)
        params = {"status": 1}

        fetcher.fetch_all(PROJECTS, params)

        for call in client.get.call_args_list:
            assert call.args[1]["status"] == 1
        assert params == {"status": 1}

    def test_caller_limit_caps_total_records(self, sixty_projects):
        """Test a caller limit is a cap on records, split into pages"""
        client = paged_client(sixty_projects)
        fetcher = PaginatedCollectionFetcher(client, page_size=25)

        collection = fetcher.fetch_all(PROJECTS, {"limit": 30})

        assert len(collection) == 30
        sent = [call.args[1]["limit"] for call in client.get.call_args_list]
        assert sent == [25, 5]

    def test_caller_offset_is_starting_point(self, sixty_projects):
        """Test a caller offset skips records"""
        client = paged_client(sixty_projects)
        fetcher = PaginatedCollectionFetcher(client, page_size=25)

        collection = fetcher.fetch_all(PROJECTS, {"offset": 40})

        assert [r["id"] for r in collection] == list(range(41, 61))
        assert client.get.call_args_list[0].args[1]["offset"] == 40

    def test_failure_discards_pages_and_keeps_previous_snapshot(self, sixty_projects):
        """Test a failed page propagates and leaves the cache untouched"""
        client = paged_client(sixty_projects)
        fetcher = PaginatedCollectionFetcher(client, page_size=25)
        previous = fetcher.fetch_all(PROJECTS)

        first_page = {"projects": make_records(25), "total_count": 60}
        client.get.side_effect = [first_page, TransportError("boom", status_code=500)]

        with pytest.raises(TransportError):
            fetcher.fetch_all(PROJECTS)

        assert fetcher.cache.get("projects") is previous

    def test_malformed_page_raises_transport_error(self):
        """Test a non-object response is reported as a transport failure"""
        client = Mock()
        client.get.return_value = ["not", "a", "page"]
        fetcher = PaginatedCollectionFetcher(client)

        with pytest.raises(TransportError):
            fetcher.fetch_all(PROJECTS)

    def test_records_are_read_only(self):
        """Test fetched records cannot be modified"""
        client = paged_client(make_records(3))
        fetcher = PaginatedCollectionFetcher(client)

        record = fetcher.fetch_all(PROJECTS).records[0]

        with pytest.raises(TypeError):
            record["name"] = "changed"

    def test_page_size_must_be_positive(self):
        """Test page_size validation"""
        with pytest.raises(ValueError):
            PaginatedCollectionFetcher(Mock(), page_size=0)

    def test_page_size_capped_at_server_maximum(self):
        """Test an oversized page_size is clamped so a capped server is walked to the end"""
        client = paged_client(make_records(250), max_limit=100)
        fetcher = PaginatedCollectionFetcher(client, page_size=150)

        collection = fetcher.fetch_all(PROJECTS)

        assert fetcher.page_size == 100
        assert len(collection) == 250
        assert [call.args[1]["limit"] for call in client.get.call_args_list] == [100, 100, 100]

    def test_capped_server_without_total(self):
        """Test clamping also holds when the server reports no total"""
        client = paged_client(make_records(250), report_total=False, max_limit=100)
        fetcher = PaginatedCollectionFetcher(client, page_size=500)

        assert len(fetcher.fetch_all(PROJECTS)) == 250


# ============================================================================
# TEST: malformed pages
# ============================================================================


class TestMalformedPages:
    """Tests for responses that do not look like a Redmine collection"""

    def assert_reported(self, page):
        client = Mock()
        client.get.return_value = page
        fetcher = PaginatedCollectionFetcher(client)

        with pytest.raises(TransportError) as exc_info:
            fetcher.fetch_all(PROJECTS)

        assert exc_info.value.method == "GET"
        assert exc_info.value.path == "/projects.json"
        assert fetcher.cache.get("projects") is None
        return exc_info.value

    def test_non_numeric_total_count(self):
        error = self.assert_reported({"projects": [{"id": 1, "name": "A"}], "total_count": "n/a"})

        assert "total_count" in str(error)
        assert isinstance(error.__cause__, ValueError)

    def test_record_without_name(self):
        error = self.assert_reported({"projects": [{"id": 1}], "total_count": 1})

        assert "name" in str(error)

    def test_record_without_id(self):
        self.assert_reported({"projects": [{"name": "A"}], "total_count": 1})

    def test_non_mapping_record(self):
        self.assert_reported({"projects": ["x"], "total_count": 1})

    def test_non_numeric_id(self):
        self.assert_reported({"projects": [{"id": "seven", "name": "A"}]})

    def test_non_list_collection(self):
        self.assert_reported({"projects": {"id": 1, "name": "A"}})


# ============================================================================
# TEST: listing
# ============================================================================


class TestListing:
    """Tests for cached name/id listings"""

    def test_listing_reuses_cached_collection(self):
        """Test two listings without force issue one round-trip"""
        client = paged_client(make_records(5))
        fetcher = PaginatedCollectionFetcher(client)

        first = fetcher.listing(PROJECTS)
        second = fetcher.listing(PROJECTS)

        assert client.get.call_count == 1
        assert first == second
        assert first["Project 3"] == 3

    def test_force_update_always_fetches(self):
        """Test force_update issues a fresh round-trip every time"""
        client = paged_client(make_records(5))
        fetcher = PaginatedCollectionFetcher(client)

        fetcher.listing(PROJECTS)
        fetcher.listing(PROJECTS, force_update=True)
        fetcher.listing(PROJECTS, force_update=True)

        assert client.get.call_count == 3

    def test_listing_after_fetch_all_uses_cache(self):
        """Test fetch_all fills the cache used by listing"""
        client = paged_client(make_records(5))
        fetcher = PaginatedCollectionFetcher(client)

        fetcher.fetch_all(PROJECTS)
        fetcher.listing(PROJECTS)

        assert client.get.call_count == 1

    def test_empty_collection_gives_empty_index(self):
        """Test an empty collection is not an error"""
        client = Mock()
        client.get.return_value = {"projects": [], "total_count": 0}
        fetcher = PaginatedCollectionFetcher(client)

        index = fetcher.listing(PROJECTS)

        assert isinstance(index, NameIndex)
        assert len(index) == 0

    def test_empty_cached_collection_is_refetched(self):
        """Test an empty snapshot does not count as cached"""
        client = Mock()
        client.get.return_value = {"projects": [], "total_count": 0}
        fetcher = PaginatedCollectionFetcher(client)

        fetcher.listing(PROJECTS)
        fetcher.listing(PROJECTS)

        assert client.get.call_count == 2

    def test_duplicate_names_last_record_wins(self, duplicate_projects):
        """Test two records named X resolve to the later id"""
        client = paged_client(duplicate_projects)
        fetcher = PaginatedCollectionFetcher(client)

        index = fetcher.listing(PROJECTS)

        assert index["X"] == 2
        assert index["Y"] == 3
        assert len(index) == 2

    def test_id_to_name_direction(self, duplicate_projects):
        """Test the inverse index maps ids to names"""
        client = paged_client(duplicate_projects)
        fetcher = PaginatedCollectionFetcher(client)

        index = fetcher.listing(PROJECTS, index_by=IndexDirection.ID_TO_NAME)

        assert index.direction is IndexDirection.ID_TO_NAME
        assert dict(index) == {1: "X", 2: "X", 3: "Y"}

    def test_string_ids_are_converted_to_int(self):
        """Test ids are normalized to integers"""
        client = paged_client([{"id": "7", "name": "Seven"}])
        fetcher = PaginatedCollectionFetcher(client)

        assert fetcher.listing(PROJECTS)["Seven"] == 7

    def test_cache_is_per_resource_type(self):
        """Test different endpoints are cached separately"""
        custom_fields = CollectionEndpoint("/custom_fields.json", "custom_fields")
        client = Mock()
        client.get.side_effect = lambda path, params=None: (
            {"projects": [{"id": 1, "name": "P"}]}
            if path == "/projects.json"
            else {"custom_fields": [{"id": 9, "name": "CF"}]}
        )
        fetcher = PaginatedCollectionFetcher(client)

        assert fetcher.listing(PROJECTS)["P"] == 1
        assert fetcher.listing(custom_fields)["CF"] == 9
        assert fetcher.listing(PROJECTS)["P"] == 1
        assert client.get.call_count == 2

    def test_invalidate_forces_refetch(self):
        """Test invalidate drops the snapshot"""
        client = paged_client(make_records(2))
        fetcher = PaginatedCollectionFetcher(client)

        fetcher.listing(PROJECTS)
        fetcher.invalidate(PROJECTS)
        fetcher.listing(PROJECTS)

        assert client.get.call_count == 2

    def test_separate_fetchers_do_not_share_cache(self):
        """Test caching is per fetcher instance"""
        client = paged_client(make_records(2))

        PaginatedCollectionFetcher(client).listing(PROJECTS)
        PaginatedCollectionFetcher(client).listing(PROJECTS)

        assert client.get.call_count == 2


# ============================================================================
# TEST: get_id_by_name
# ============================================================================


class TestGetIdByName:
    """Tests for name to id resolution"""

    def test_known_name(self):
        """Test a known name resolves to its id"""
        fetcher = PaginatedCollectionFetcher(paged_client(make_records(3)))

        assert fetcher.get_id_by_name(PROJECTS, "Project 2") == 2

    def test_unknown_name_returns_none(self):
        """Test a miss returns None instead of raising"""
        fetcher = PaginatedCollectionFetcher(paged_client(make_records(3)))

        assert fetcher.get_id_by_name(PROJECTS, "does-not-exist") is None

    def test_lookups_share_one_fetch(self):
        """Test repeated lookups do not refetch"""
        client = paged_client(make_records(3))
        fetcher = PaginatedCollectionFetcher(client)

        fetcher.get_id_by_name(PROJECTS, "Project 1")
        fetcher.get_id_by_name(PROJECTS, "missing")

        assert client.get.call_count == 1

    def test_non_string_name_is_matched_as_string(self):
        """Test numeric-looking names can be passed as numbers"""
        fetcher = PaginatedCollectionFetcher(paged_client([{"id": 4, "name": "2024"}]))

        assert fetcher.get_id_by_name(PROJECTS, 2024) == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
