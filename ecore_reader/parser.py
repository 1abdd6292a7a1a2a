from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lxml import etree

from .elements import EPackage
from .exceptions import InvalidEcoreError
from .xmlwalk import ParseContext, local_name

if TYPE_CHECKING:
    from .resource import Resource

LOGGER = logging.getLogger(__name__)


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)


class EcoreParser:
    """Run the XML walk for one resource.

    The walk builds the package tree with every attribute captured as raw
    text and fills the resource cache. References are left unresolved.
    """

    def __init__(self, resource: Resource) -> None:
        if resource is None:
            raise ValueError("resource must not be None")
        self.resource = resource
        self.context = ParseContext(uri=resource.uri)

    def parse(self) -> EPackage:
        try:
            root = etree.parse(self.resource.uri, _xml_parser()).getroot()
        except etree.XMLSyntaxError as exc:
            raise InvalidEcoreError(f"{self.resource.uri} is not well-formed XML: {exc}") from exc
        return self._walk(root)

    def parse_string(self, text: str | bytes) -> EPackage:
        if isinstance(text, str):
            text = text.encode("utf-8")
        try:
            root = etree.fromstring(text, _xml_parser())
        except etree.XMLSyntaxError as exc:
            raise InvalidEcoreError(f"{self.resource.uri} is not well-formed XML: {exc}") from exc
        return self._walk(root)

    def _walk(self, root: etree._Element) -> EPackage:
        if local_name(root) != "EPackage":
            raise InvalidEcoreError(
                f"Root element of {self.resource.uri} is <{local_name(root)}>, expected <EPackage>"
            )
        LOGGER.debug("Walking %s", self.resource.uri)
        package = EPackage(self.resource)
        package.read_xml(root, self.context)
        return package
