"""
Payload Builder Module

Builds Redmine XML request documents from flat field maps with:
- Per-resource field schemas
- Typed array containers for identifier lists
- CRLF-joined possible values
- Immutable document trees serialized on demand
"""

from .document import Element, array_container, serialize, text_element
from .field_schema import FieldKind, FieldSpec, ResourceSchema
from .payload_builder import PayloadBuilder, merge_params

__all__ = [
    "Element",
    "FieldKind",
    "FieldSpec",
    "PayloadBuilder",
    "ResourceSchema",
    "array_container",
    "merge_params",
    "serialize",
    "text_element",
]
