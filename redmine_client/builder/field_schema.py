"""
Field Schema - Declares how each field of a resource is serialized

Supports:
- Scalar fields (one element with text content)
- Identifier lists (typed array container with repeated named children)
- Possible values (one element holding CRLF-joined entries)
- Mandatory field declarations
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class FieldKind(str, Enum):
    """How a field value is rendered in the request document"""
    SCALAR = "scalar"
    IDENTIFIER_LIST = "identifier_list"
    POSSIBLE_VALUES = "possible_values"


@dataclass(frozen=True)
class FieldSpec:
    """Serialization rule for one field of a resource"""

    name: str
    kind: FieldKind = FieldKind.SCALAR
    item_tag: Optional[str] = None  # child element name for IDENTIFIER_LIST
    required: bool = False

    def __post_init__(self):
        if self.kind is FieldKind.IDENTIFIER_LIST and not self.item_tag:
            raise ValueError(f"Identifier list field '{self.name}' needs an item_tag")


@dataclass(frozen=True)
class ResourceSchema:
    """
    Static field configuration for one resource type

    Example:
        ResourceSchema(
            root_tag="project",
            fields=(
                FieldSpec("name", required=True),
                FieldSpec("tracker_ids", FieldKind.IDENTIFIER_LIST, item_tag="tracker"),
            ),
        )
    """

    root_tag: str
    fields: Tuple[FieldSpec, ...] = ()

    def field(self, name: str) -> Optional[FieldSpec]:
        """Return the spec for name, or None for undeclared fields"""
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def kind_of(self, name: str) -> FieldKind:
        """Undeclared fields are scalar"""
        spec = self.field(name)
        return spec.kind if spec else FieldKind.SCALAR

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields if spec.required)

    def defaults(self) -> Dict[str, Any]:
        """Every declared field mapped to None, in declaration order"""
        return {spec.name: None for spec in self.fields}

    def missing_required(self, params: Dict[str, Any]) -> Tuple[str, ...]:
        """Required field names without a value in params"""
        return tuple(name for name in self.required_fields if params.get(name) is None)
