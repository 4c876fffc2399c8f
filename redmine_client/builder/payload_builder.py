"""
Payload Builder - Turns flat field maps into Redmine request documents

Integrates:
- ResourceSchema: per-field serialization kind
- Document tree: immutable Element nodes
- Serializer: XML bytes ready for POST/PUT
"""

import logging
from typing import Any, Dict, List, Optional

from .document import Element, array_container, serialize, text_element
from .field_schema import FieldKind, ResourceSchema

logger = logging.getLogger(__name__)

POSSIBLE_VALUES_SEPARATOR = "\r\n"


def is_empty_value(value: Any) -> bool:
    """None, empty strings and empty lists carry nothing to send; 0 and False do"""
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return True
    return False


def merge_params(defaults: Dict[str, Any], params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Overlay caller params on a defaults map and drop empty entries

    Key order: defaults first, then keys only the caller supplied.

    Args:
        defaults: Field name -> default value (usually None)
        params: Caller supplied values

    Returns:
        Merged map without empty values
    """
    merged = dict(defaults)
    merged.update(params or {})
    return {name: value for name, value in merged.items() if not is_empty_value(value)}


def render_scalar(value: Any) -> str:
    """String form of a scalar as the server expects it"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PayloadBuilder:
    """
    Builds Redmine request documents from field maps

    Usage:
    ```python
    schema = ResourceSchema(
        root_tag="project",
        fields=(
            FieldSpec("name", required=True),
            FieldSpec("tracker_ids", FieldKind.IDENTIFIER_LIST, item_tag="tracker"),
        ),
    )

    document = builder.build({"name": "Website", "tracker_ids": [3, 7]}, schema)
    # <project><name>Website</name>
    #   <tracker_ids type="array"><tracker>3</tracker><tracker>7</tracker></tracker_ids>
    # </project>
    ```
    """

    def build(self, fields: Dict[str, Any], schema: ResourceSchema) -> Element:
        """
        Build the document for one resource

        Fields are emitted in the map's insertion order. None values are
        skipped; names the schema does not declare are treated as scalars.

        Args:
            fields: Field name -> value (scalar or list of identifiers)
            schema: Serialization rules of the resource type

        Returns:
            Root Element named after the resource
        """
        children: List[Element] = []

        for name, value in fields.items():
            if value is None:
                continue
            children.append(self.build_field(name, value, schema))

        logger.debug(f"Built <{schema.root_tag}> with {len(children)} field(s)")
        return Element(schema.root_tag, children=tuple(children))

    def build_field(self, name: str, value: Any, schema: ResourceSchema) -> Element:
        """Build the element for a single non-None field"""
        kind = schema.kind_of(name)
        is_list = isinstance(value, (list, tuple))

        if kind is FieldKind.IDENTIFIER_LIST and is_list:
            item_tag = schema.field(name).item_tag
            return array_container(
                name,
                (text_element(item_tag, render_scalar(item)) for item in value),
            )

        elif kind is FieldKind.POSSIBLE_VALUES and is_list:
            joined = POSSIBLE_VALUES_SEPARATOR.join(render_scalar(item) for item in value)
            return text_element(name, joined)

        else:
            return text_element(name, render_scalar(value))

    def build_xml(self, fields: Dict[str, Any], schema: ResourceSchema) -> bytes:
        """Build and serialize in one step"""
        return serialize(self.build(fields, schema))
