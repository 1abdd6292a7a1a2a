"""Meta-level Ecore types that resolve without being parsed.

Ecore documents reference the metamodel's own classes (``#//EClass``) and
primitive data types
(``http://www.eclipse.org/emf/2002/Ecore#//EString``) without declaring
them. Each resource owns a :class:`BootstrapRegistry` holding one node per
such type.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterator, Tuple

from .elements import EClass, EClassifier, EDataType, EPackage

if TYPE_CHECKING:
    from .resource import Resource

LOGGER = logging.getLogger(__name__)

ECORE_NS_URI = "http://www.eclipse.org/emf/2002/Ecore"
ECORE_NS_PREFIX = "ecore"

# (name, abstract, super type); parents always precede their children
META_CLASSES: Tuple[Tuple[str, bool, str | None], ...] = (
    ("EObject", True, None),
    ("EModelElement", True, "EObject"),
    ("ENamedElement", True, "EModelElement"),
    ("EFactory", False, "EModelElement"),
    ("EAnnotation", False, "EModelElement"),
    ("EClassifier", True, "ENamedElement"),
    ("EEnumLiteral", False, "ENamedElement"),
    ("EPackage", False, "ENamedElement"),
    ("ETypedElement", True, "ENamedElement"),
    ("EClass", False, "EClassifier"),
    ("EDataType", False, "EClassifier"),
    ("EEnum", False, "EClassifier"),
    ("EOperation", False, "ETypedElement"),
    ("EParameter", False, "ETypedElement"),
    ("EStructuralFeature", True, "ETypedElement"),
    ("EAttribute", False, "EStructuralFeature"),
    ("EReference", False, "EStructuralFeature"),
    ("EStringToStringMapEntry", False, None),
    ("EGenericType", False, None),
    ("ETypeParameter", False, "ENamedElement"),
)

DATA_TYPES: Tuple[str, ...] = (
    "EBigDecimal",
    "EBigInteger",
    "EBool",
    "EBooleanObject",
    "EByte",
    "EByteArray",
    "EByteObject",
    "EChar",
    "ECharacterObject",
    "EDate",
    "EDiagnosticChain",
    "EDouble",
    "EDoubleObject",
    "EEList",
    "EEnumerator",
    "EFeatureMap",
    "EFeatureMapEntry",
    "EFloat",
    "EFloatObject",
    "EInt",
    "EIntegerObject",
    "EJavaClass",
    "EJavaObject",
    "ELong",
    "ELongObject",
    "EMap",
    "EResource",
    "EResourceSet",
    "EShort",
    "EShortObject",
    "EString",
    "ETreeIterator",
    "EInvocationTargetException",
)


class BootstrapRegistry:
    def __init__(self, resource: Resource) -> None:
        self._resource = resource
        self.package = EPackage(resource)
        self.package.name = ECORE_NS_PREFIX
        self.package.ns_uri = ECORE_NS_URI
        self.package.ns_prefix = ECORE_NS_PREFIX
        self.package.identifier = f"{ECORE_NS_URI}#/"
        self._meta_classes: Dict[str, EClass] = {}
        self._data_types: Dict[str, EDataType] = {}

        for name, abstract, super_name in META_CLASSES:
            eclass = EClass(resource)
            eclass.abstract = abstract
            if super_name is not None:
                eclass.super_types.append(self._meta_classes[super_name])
            self._meta_classes[name] = self._add(eclass, name)

        for name in DATA_TYPES:
            self._data_types[name] = self._add(EDataType(resource), name)

    def _add(self, classifier, name: str):
        classifier.name = name
        classifier.identifier = f"{ECORE_NS_URI}#//{name}"
        self.package.classifiers.add(classifier)
        return classifier

    def __iter__(self) -> Iterator[EClassifier]:
        return iter(self.package.classifiers)

    def __len__(self) -> int:
        return len(self.package.classifiers)

    def meta_class(self, name: str) -> EClass | None:
        return self._meta_classes.get(name)

    def data_type(self, name: str) -> EDataType | None:
        return self._data_types.get(name)

    def lookup(self, key: str) -> EClassifier | None:
        """Return the bootstrap node ``key`` designates, if any.

        Meta classes match any ``<prefix>#//<Name>`` key since documents
        spell them against various Ecore locations. Data types only match
        when the prefix is the Ecore namespace URI or an ``Ecore.ecore``
        file.
        """
        if not key or "#//" not in key:
            return None
        location, _, name = key.partition("#//")
        meta_class = self._meta_classes.get(name)
        if meta_class is not None:
            LOGGER.debug("Resolved %s to meta class %s", key, name)
            return meta_class
        if location == ECORE_NS_URI or location.endswith("Ecore.ecore"):
            data_type = self._data_types.get(name)
            if data_type is not None:
                LOGGER.debug("Resolved %s to data type %s", key, name)
                return data_type
        return None
