"""Immutable request document tree and its XML serializer."""
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
from xml.etree import ElementTree

ARRAY_TYPE_ATTRIBUTE = ("type", "array")


@dataclass(frozen=True)
class Element:
    """One element of an outgoing document."""

    tag: str
    text: Optional[str] = None
    attributes: Tuple[Tuple[str, str], ...] = ()
    children: Tuple["Element", ...] = ()


def text_element(tag: str, text: str) -> Element:
    return Element(tag, text=text)


def array_container(tag: str, children: Iterable[Element]) -> Element:
    """Container element carrying the type="array" marker."""
    return Element(tag, attributes=(ARRAY_TYPE_ATTRIBUTE,), children=tuple(children))


def to_etree(element: Element) -> ElementTree.Element:
    node = ElementTree.Element(element.tag, dict(element.attributes))
    node.text = element.text
    for child in element.children:
        node.append(to_etree(child))
    return node


def serialize(element: Element) -> bytes:
    """Render the tree as an XML 1.0 document with declaration."""
    return ElementTree.tostring(to_etree(element), encoding="UTF-8", xml_declaration=True)
