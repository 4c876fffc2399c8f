"""Resource operations for projects and custom fields."""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from config import RedmineApiConfig
from redmine_client.api.client import RedmineClient
from redmine_client.api.pagination import PaginatedCollectionFetcher
from redmine_client.builder import FieldKind, FieldSpec, PayloadBuilder, ResourceSchema, merge_params
from redmine_client.exceptions import ValidationError
from redmine_client.schema.models import (
    CollectionEndpoint,
    IndexDirection,
    NameIndex,
    ResourceCollection,
)

logger = logging.getLogger(__name__)


PROJECT_SCHEMA = ResourceSchema(
    root_tag="project",
    fields=(
        FieldSpec("name", required=True),
        FieldSpec("identifier", required=True),
        FieldSpec("description"),
        FieldSpec("homepage"),
        FieldSpec("is_public"),
        FieldSpec("parent_id"),
        FieldSpec("inherit_members"),
        FieldSpec("tracker_ids", FieldKind.IDENTIFIER_LIST, item_tag="tracker"),
        FieldSpec("issue_custom_field_ids", FieldKind.IDENTIFIER_LIST, item_tag="issue_custom_field"),
    ),
)

CUSTOM_FIELD_SCHEMA = ResourceSchema(
    root_tag="custom_field",
    fields=(
        FieldSpec("name"),
        FieldSpec("customized_type"),
        FieldSpec("field_format"),
        FieldSpec("regexp"),
        FieldSpec("min_length"),
        FieldSpec("max_length"),
        FieldSpec("is_required"),
        FieldSpec("is_filter"),
        FieldSpec("searchable"),
        FieldSpec("multiple"),
        FieldSpec("default_value"),
        FieldSpec("visible"),
        FieldSpec("possible_values", FieldKind.POSSIBLE_VALUES),
    ),
)


def _quote_id(resource_id: Any) -> str:
    return quote(str(resource_id), safe="")


class ResourceApi:
    """Listing operations shared by every resource type."""

    endpoint: CollectionEndpoint
    schema: ResourceSchema

    def __init__(
        self,
        client: RedmineClient,
        fetcher: Optional[PaginatedCollectionFetcher] = None,
        builder: Optional[PayloadBuilder] = None,
    ):
        """Initialize resource API."""
        self.client = client
        self.fetcher = fetcher or PaginatedCollectionFetcher(client)
        self.builder = builder or PayloadBuilder()

    def all(self, params: Optional[Dict[str, Any]] = None) -> ResourceCollection:
        """Fetch the whole collection (refreshes the cached listing)."""
        return self.fetcher.fetch_all(self.endpoint, params)

    def listing(
        self,
        force_update: bool = False,
        params: Optional[Dict[str, Any]] = None,
        index_by: IndexDirection = IndexDirection.NAME_TO_ID,
    ) -> NameIndex:
        """Name -> id index (or id -> name), cached between calls."""
        return self.fetcher.listing(self.endpoint, force_update, params, index_by)

    def get_id_by_name(self, name: Any, params: Optional[Dict[str, Any]] = None) -> Optional[int]:
        """Id of the record called name, None when there is none."""
        return self.fetcher.get_id_by_name(self.endpoint, name, params)

    def _build(self, params: Dict[str, Any]) -> bytes:
        return self.builder.build_xml(params, self.schema)


class ProjectApi(ResourceApi):
    """
    Listing projects, creating, editing

    See https://www.redmine.org/projects/redmine/wiki/Rest_Projects
    """

    endpoint = CollectionEndpoint("/projects.json", "projects")
    schema = PROJECT_SCHEMA

    SHOW_INCLUDES = "trackers,issue_categories,attachments,relations"

    def show(self, project_id: Any) -> Dict[str, Any]:
        """Project details including trackers, categories, attachments and relations."""
        return self.client.get(
            f"/projects/{_quote_id(project_id)}.json",
            {"include": self.SHOW_INCLUDES},
        )

    def create(self, params: Optional[Dict[str, Any]] = None):
        """
        Create a project.

        Args:
            params: Project fields; name and identifier are mandatory

        Returns:
            The created project as returned by the server

        Raises:
            ValidationError: If name or identifier is missing (nothing is sent)
        """
        fields = merge_params(self.schema.defaults(), params)

        missing = self.schema.missing_required(fields)
        if missing:
            raise ValidationError(list(missing))

        logger.info(f"Creating project '{fields['identifier']}'")
        return self.client.post("/projects.xml", self._build(fields))

    def update(self, project_id: Any, params: Optional[Dict[str, Any]] = None):
        """Update a project's fields."""
        defaults = {"id": project_id, **self.schema.defaults()}
        fields = merge_params(defaults, params)

        logger.info(f"Updating project {project_id}")
        return self.client.put(f"/projects/{_quote_id(project_id)}.xml", self._build(fields))

    def remove(self, project_id: Any) -> None:
        """Delete a project."""
        logger.info(f"Deleting project {project_id}")
        self.client.delete(f"/projects/{_quote_id(project_id)}.xml")


class CustomFieldApi(ResourceApi):
    """
    Listing custom fields, editing their values

    See https://www.redmine.org/projects/redmine/wiki/Rest_CustomFields
    """

    endpoint = CollectionEndpoint("/custom_fields.json", "custom_fields")
    schema = CUSTOM_FIELD_SCHEMA

    def update(self, custom_field_id: Any, params: Optional[Dict[str, Any]] = None):
        """Update a custom field (typically its possible values)."""
        fields = merge_params(self.schema.defaults(), params)

        logger.info(f"Updating custom field {custom_field_id}")
        return self.client.put(
            f"/custom_fields/{_quote_id(custom_field_id)}.xml",
            self._build(fields),
        )


class Redmine:
    """
    Entry point bundling the client and every resource API.

    Usage:
    ```python
    redmine = Redmine(RedmineApiConfig.from_env())
    project_id = redmine.projects.get_id_by_name("Website")
    ```
    """

    def __init__(self, config: RedmineApiConfig, client: Optional[RedmineClient] = None):
        """Initialize resource APIs sharing one client and one collection cache."""
        self.config = config
        self.client = client or RedmineClient(config)
        self.fetcher = PaginatedCollectionFetcher(self.client, page_size=config.page_size)

        self.projects = ProjectApi(self.client, self.fetcher)
        self.custom_fields = CustomFieldApi(self.client, self.fetcher)

    def api(self, name: str) -> ResourceApi:
        """Resource API by attribute name ("projects", "custom_fields")."""
        resource = getattr(self, name, None)
        if not isinstance(resource, ResourceApi):
            raise KeyError(f"Unknown resource: {name}")
        return resource
