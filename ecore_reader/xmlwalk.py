from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator

from lxml import etree

from .exceptions import InvalidEcoreError

LOGGER = logging.getLogger(__name__)

XSI_TYPE = "xsi:type"
UNQUALIFIED_REFERENCE = "#//"
REFERENCE_ATTRIBUTES = frozenset({"eType", "eSuperTypes", "eOpposite", "eExceptions"})

_XML_NS = "http://www.w3.org/XML/1998/namespace"


@dataclass
class ParseContext:
    """State shared by one document's XML walk.

    ``top_package_name`` is set when the root package is visited and is
    used to turn unqualified ``#//Name`` references into document keys.
    """

    uri: str
    top_package_name: str | None = None

    def normalize_reference(self, attribute: str, value: str) -> str:
        if attribute not in REFERENCE_ATTRIBUTES:
            return value
        parts = value.split(" ")
        for idx, part in enumerate(parts):
            if not part.startswith(UNQUALIFIED_REFERENCE):
                continue
            if not self.top_package_name:
                raise InvalidEcoreError(
                    f"Reference {part!r} in {attribute!r} found before the root package name is known"
                )
            parts[idx] = f"{self.top_package_name}.ecore{part}"
        return " ".join(parts)


def local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def qualified_name(element: etree._Element, key: str) -> str:
    """Turn an lxml attribute key (``{uri}local``) back into ``prefix:local``."""
    qname = etree.QName(key)
    if qname.namespace is None:
        return qname.localname
    if qname.namespace == _XML_NS:
        return f"xml:{qname.localname}"
    for prefix, uri in element.nsmap.items():
        if uri == qname.namespace and prefix:
            return f"{prefix}:{qname.localname}"
    return qname.localname


def read_attributes(element: etree._Element, context: ParseContext) -> Dict[str, str]:
    attributes: Dict[str, str] = {}
    for key, value in element.attrib.items():
        name = qualified_name(element, key)
        attributes[name] = context.normalize_reference(name, value)
    return attributes


def iter_child_elements(element: etree._Element) -> Iterator[etree._Element]:
    yield from element.iterchildren(tag=etree.Element)


def xsi_type(element: etree._Element) -> str:
    for key, value in element.attrib.items():
        if qualified_name(element, key) == XSI_TYPE:
            return value
    raise InvalidEcoreError(
        f"Element <{local_name(element)}> on line {element.sourceline} has no {XSI_TYPE} attribute"
    )
