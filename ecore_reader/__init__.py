"""Ecore metamodel reader with cross-document reference resolution."""

__version__ = "0.2.0"

from .elements import (
    EAnnotation,
    EAttribute,
    EClass,
    EClassifier,
    EDataType,
    EEnum,
    EEnumLiteral,
    EModelElement,
    ENamedElement,
    EObject,
    EOperation,
    EPackage,
    EParameter,
    EReference,
    EStructuralFeature,
    ETypedElement,
)
from .exceptions import (
    ContainmentError,
    EcoreError,
    InvalidEcoreError,
    ResourceStateError,
    UnresolvedReferenceError,
)
from .loader import (
    load_metamodel,
    count_metamodel_classes,
    metamodel_stats,
    summarize_metamodel,
    metamodel_dump,
)
from .resource import Diagnostic, Resource, ResourceSet, ResourceState

__all__ = [
    "EAnnotation",
    "EAttribute",
    "EClass",
    "EClassifier",
    "EDataType",
    "EEnum",
    "EEnumLiteral",
    "EModelElement",
    "ENamedElement",
    "EObject",
    "EOperation",
    "EPackage",
    "EParameter",
    "EReference",
    "EStructuralFeature",
    "ETypedElement",
    "ContainmentError",
    "EcoreError",
    "InvalidEcoreError",
    "ResourceStateError",
    "UnresolvedReferenceError",
    "Diagnostic",
    "Resource",
    "ResourceSet",
    "ResourceState",
    "load_metamodel",
    "count_metamodel_classes",
    "metamodel_stats",
    "summarize_metamodel",
    "metamodel_dump",
]
