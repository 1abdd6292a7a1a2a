"""Second loading phase: turn captured attribute text into typed values.

The XML walk stores every attribute verbatim. Once the whole document
exists, :func:`resolve` visits each node so that booleans and integers are
parsed strictly and reference tokens are looked up, possibly loading
sibling documents through the ``lookup`` callable.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Callable, Iterable, List

from .exceptions import InvalidEcoreError

if TYPE_CHECKING:
    from .elements import EObject

LOGGER = logging.getLogger(__name__)

Lookup = Callable[[str], "EObject"]

# ``ecore:EDataType`` style tokens are type hints preceding a cross-document reference
_TYPE_HINT = re.compile(r"^[A-Za-z_][\w.-]*:E\w+$")


def split_references(value: str) -> List[str]:
    return [token for token in value.split() if not _TYPE_HINT.match(token)]


class PropertyResolver:
    def __init__(self, lookup: Lookup) -> None:
        if lookup is None:
            raise ValueError("lookup must not be None")
        self._lookup = lookup

    def boolean(self, obj: EObject, name: str) -> bool | None:
        raw = obj.attributes.get(name)
        if raw is None:
            return None
        text = raw.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
        raise InvalidEcoreError(
            f"Attribute {name!r} of {obj.identifier} is not a boolean: {raw!r}"
        )

    def integer(self, obj: EObject, name: str) -> int | None:
        raw = obj.attributes.get(name)
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError:
            raise InvalidEcoreError(
                f"Attribute {name!r} of {obj.identifier} is not an integer: {raw!r}"
            ) from None

    def text(self, obj: EObject, name: str) -> str | None:
        return obj.attributes.get(name)

    def reference(self, obj: EObject, name: str, prefix: str = "") -> EObject | None:
        raw = obj.attributes.get(name)
        if raw is None:
            return None
        tokens = split_references(raw)
        if not tokens:
            raise InvalidEcoreError(f"Attribute {name!r} of {obj.identifier} is empty")
        return self.lookup(f"{prefix}{tokens[-1]}")

    def references(self, obj: EObject, name: str) -> List[EObject]:
        raw = obj.attributes.get(name)
        if raw is None:
            return []
        return [self.lookup(token) for token in split_references(raw)]

    def lookup(self, key: str) -> EObject:
        LOGGER.debug("Resolving %s", key)
        return self._lookup(key)

    def resolve(self, objects: Iterable[EObject]) -> None:
        for obj in list(objects):
            obj.set_properties(self)


def resolve(objects: Iterable[EObject], lookup: Lookup) -> None:
    PropertyResolver(lookup).resolve(objects)
