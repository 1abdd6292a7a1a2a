from __future__ import annotations

import enum
import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Dict, Iterator, List

from .bootstrap import BootstrapRegistry
from .elements import EObject, EPackage
from .exceptions import InvalidEcoreError, ResourceStateError, UnresolvedReferenceError
from .parser import EcoreParser
from .resolver import PropertyResolver

LOGGER = logging.getLogger(__name__)

_KIND_TAG = re.compile(r"^E\w+::")


class ResourceState(enum.Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass(frozen=True)
class Diagnostic:
    message: str
    location: str | None = None
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        where = self.location or ""
        if self.line is not None:
            where = f"{where}:{self.line}"
            if self.column is not None:
                where = f"{where}:{self.column}"
        return f"{where}: {self.message}" if where else self.message


def _normalize(uri) -> str:
    return os.path.normcase(os.path.abspath(os.fspath(uri)))


class Resource:
    """One Ecore document: its root package, identifier cache and diagnostics."""

    def __init__(self, uri, resource_set: ResourceSet | None = None) -> None:
        if uri is None:
            raise ValueError("uri must not be None")
        self.uri = os.fspath(uri)
        self.resource_set = resource_set
        self.state = ResourceState.UNLOADED
        self.contents: List[EObject] = []
        self.cache: Dict[str, EObject] = {}
        self.errors: List[Diagnostic] = []
        self.warnings: List[Diagnostic] = []
        self.time_stamp: float | None = None
        self.bootstrap = BootstrapRegistry(self)

    def __repr__(self) -> str:
        return f"<Resource {self.uri!r} {self.state.value}>"

    def is_loaded(self) -> bool:
        return self.state is ResourceState.LOADED

    @property
    def root(self) -> EPackage | None:
        for obj in self.contents:
            if isinstance(obj, EPackage):
                return obj
        return None

    def register(self, obj: EObject) -> None:
        identifier = obj.identifier
        existing = self.cache.get(identifier)
        if existing is not None and existing is not obj:
            raise InvalidEcoreError(f"Duplicate identifier {identifier!r} in {self.uri}")
        self.cache[identifier] = obj

    def add_warning(self, message: str, line: int | None = None, column: int | None = None) -> None:
        LOGGER.warning("%s: %s", self.uri, message)
        self.warnings.append(Diagnostic(message, self.uri, line, column))

    def all_contents(self) -> Iterator[EObject]:
        return iter(list(self.cache.values()))

    def get_uri_fragment(self, obj: EObject) -> str | None:
        if obj is None:
            raise ValueError("obj must not be None")
        return obj.identifier

    def load(self, text: str | bytes | None = None) -> EPackage:
        """Parse the document, resolve its references and return the root package.

        ``text`` parses the given XML instead of reading ``uri``; sibling
        documents are still located relative to ``uri``.
        """
        if self.state is not ResourceState.UNLOADED:
            raise ResourceStateError(f"Resource {self.uri} is already {self.state.value}")
        LOGGER.info("Loading ecore document: %s", self.uri)
        start = time.perf_counter()
        self.state = ResourceState.LOADING
        try:
            parser = EcoreParser(self)
            package = parser.parse() if text is None else parser.parse_string(text)
            self.contents.append(package)
            PropertyResolver(self.get_eobject).resolve(self.cache.values())
        except BaseException as exc:
            self._reset()
            cause = exc.__cause__
            self.errors.append(
                Diagnostic(str(exc), self.uri, getattr(cause, "lineno", None), getattr(cause, "offset", None))
            )
            raise
        self.state = ResourceState.LOADED
        self.time_stamp = time.time()
        LOGGER.info(
            "Package: %r with prefix %s and uri %s loaded in %d [ms]",
            package.name,
            package.ns_prefix,
            package.ns_uri,
            (time.perf_counter() - start) * 1000,
        )
        return package

    def unload(self) -> None:
        if self.state is ResourceState.LOADING:
            raise ResourceStateError(f"Resource {self.uri} cannot be unloaded while loading")
        self._reset()
        self.errors.clear()
        self.warnings.clear()
        self.time_stamp = None

    def _reset(self) -> None:
        self.contents.clear()
        self.cache.clear()
        self.state = ResourceState.UNLOADED

    def get_eobject(self, uri_fragment: str) -> EObject:
        """Resolve a reference key.

        The cache is consulted first, then the bootstrap registry, and
        finally the sibling document named before ``#`` is loaded through
        the resource set.
        """
        if uri_fragment is None or not uri_fragment.strip():
            raise InvalidEcoreError("The uri cannot be null or empty")
        obj = self.cache.get(uri_fragment)
        if obj is not None:
            return obj
        obj = self.bootstrap.lookup(uri_fragment)
        if obj is not None:
            return obj
        return self._get_external_eobject(uri_fragment)

    def _get_external_eobject(self, key: str) -> EObject:
        document = _KIND_TAG.sub("", key).split("#", 1)[0]
        if ".ecore" not in document:
            raise InvalidEcoreError(f"The resource {document} is invalid.")
        sibling = self.sibling_uri(document)
        if sibling == _normalize(self.uri):
            raise UnresolvedReferenceError(key, f"not found in {self.uri}")
        if self.resource_set is None:
            raise UnresolvedReferenceError(key, f"{self.uri} does not belong to a resource set")

        resource = self.resource_set.resource(sibling)
        if resource is None:
            if not os.path.exists(sibling):
                raise UnresolvedReferenceError(key, f"document {sibling} does not exist")
            LOGGER.debug("%s not found in %s, loading %s", key, self.uri, sibling)
            resource = self.resource_set.create_resource(sibling)
            resource.load()
        elif resource.state is ResourceState.UNLOADED:
            resource.load()
        return resource.get_eobject(key)

    def sibling_uri(self, document: str) -> str:
        directory = os.path.dirname(self.uri)
        if not directory:
            raise InvalidEcoreError(f"Invalid path for the current resource: {self.uri}")
        return _normalize(os.path.join(directory, document))


class ResourceSet:
    def __init__(self) -> None:
        self.resources: List[Resource] = []

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)

    def create_resource(self, uri) -> Resource:
        if uri is None:
            raise ValueError("uri must not be None")
        resource = Resource(uri, self)
        self.resources.append(resource)
        LOGGER.debug("Created resource %s", resource.uri)
        return resource

    def resource(self, uri, load_on_demand: bool = False) -> Resource | None:
        """Return the resource registered for ``uri``.

        With ``load_on_demand`` a missing resource is created and an unloaded
        one is loaded; otherwise ``None`` is returned for unknown URIs.
        """
        if uri is None:
            raise ValueError("uri must not be None")
        wanted = _normalize(uri)
        for resource in self.resources:
            if _normalize(resource.uri) == wanted:
                if load_on_demand and resource.state is ResourceState.UNLOADED:
                    resource.load()
                return resource
        if not load_on_demand:
            return None
        resource = self.create_resource(uri)
        resource.load()
        return resource
