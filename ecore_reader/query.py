"""Navigation helpers over a loaded model.

Every helper that takes a model element raises ``ValueError`` when given
``None`` instead of returning an empty result.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

from .elements import (
    EAttribute,
    EClass,
    EEnum,
    EModelElement,
    EPackage,
    EReference,
    EStructuralFeature,
)

DOCUMENTATION_KEY = "documentation"
DOCUMENTATION_LINE_LENGTH = 100


def _require(value, name: str) -> None:
    if value is None:
        raise ValueError(f"{name} must not be None")


def query_type_hierarchy(eclass: EClass) -> List[EClass]:
    """All direct and indirect super types, nearest first, without repeats."""
    _require(eclass, "eclass")
    result: List[EClass] = []
    pending = list(eclass.super_types)
    while pending:
        super_type = pending.pop(0)
        if super_type is eclass or super_type in result:
            continue
        result.append(super_type)
        pending.extend(super_type.super_types)
    return result


def query_specializations(eclass: EClass, all_classes: Iterable[EClass]) -> List[EClass]:
    _require(eclass, "eclass")
    _require(all_classes, "all_classes")
    return [cls for cls in all_classes if any(sup is eclass for sup in cls.super_types)]


def query_packages(root: EPackage) -> List[EPackage]:
    _require(root, "root")
    result = [root]
    for sub in root.subpackages:
        result.extend(query_packages(sub))
    return result


def iter_classifiers(root: EPackage, kind: type) -> Iterator:
    for package in query_packages(root):
        for classifier in package.classifiers:
            if isinstance(classifier, kind):
                yield classifier


def query_raw_documentation(element: EModelElement) -> str:
    _require(element, "element")
    if not element.annotations:
        return ""
    return element.annotations[0].details.get(DOCUMENTATION_KEY, "")


def query_documentation(element: EModelElement) -> List[str]:
    documentation = query_raw_documentation(element)
    if not documentation.strip():
        return []
    return split_to_lines(documentation, DOCUMENTATION_LINE_LENGTH)


def query_is_enum(feature: EStructuralFeature) -> bool:
    _require(feature, "feature")
    return isinstance(feature, EAttribute) and isinstance(feature.type, EEnum)


def query_class(feature: EStructuralFeature) -> EClass | None:
    _require(feature, "feature")
    if isinstance(feature, EReference) and isinstance(feature.type, EClass):
        return feature.type
    return None


def query_is_enumerable(feature: EStructuralFeature) -> bool:
    _require(feature, "feature")
    return feature.upper_bound == -1 or feature.upper_bound > 1


def query_is_attribute(feature: EStructuralFeature) -> bool:
    _require(feature, "feature")
    return isinstance(feature, EAttribute)


def query_is_reference(feature: EStructuralFeature) -> bool:
    _require(feature, "feature")
    return isinstance(feature, EReference)


def query_is_containment(feature: EStructuralFeature) -> bool:
    _require(feature, "feature")
    return isinstance(feature, EReference) and feature.containment


def query_name_equals_enclosing_type(feature: EStructuralFeature, eclass: EClass) -> bool:
    _require(feature, "feature")
    _require(eclass, "eclass")
    return (feature.name or "").lower() == (eclass.name or "").lower()


def query_has_default_value(feature: EStructuralFeature) -> bool:
    _require(feature, "feature")
    return bool(feature.default_value_literal)


def query_type_name(feature: EStructuralFeature) -> str:
    _require(feature, "feature")
    if feature.type is None:
        return ""
    return feature.type.name or ""


def query_is_nullable(feature: EStructuralFeature) -> bool:
    _require(feature, "feature")
    return feature.lower_bound == 0 and not query_is_enumerable(feature)


def split_to_lines(text: str, maximum_line_length: int) -> List[str]:
    """Greedy word wrap; single words longer than the limit are kept whole."""
    if text is None or not text.strip():
        raise ValueError("text must not be empty")
    if maximum_line_length <= 0:
        raise ValueError("maximum_line_length must be greater than zero")
    words = text.replace("\r\n", " ").strip().split(" ")
    lines: List[str] = []
    line = words[0]
    for word in words[1:]:
        candidate = f"{line} {word}"
        if len(candidate) > maximum_line_length:
            lines.append(line)
            line = word
        else:
            line = candidate
    lines.append(line.strip())
    return lines


def capitalize_first_letter(text: str) -> str:
    if not text:
        raise ValueError("text must not be empty")
    return text[0].upper() + text[1:]


def lower_case_first_letter(text: str) -> str:
    if not text:
        raise ValueError("text must not be empty")
    return text[0].lower() + text[1:]


def prefix(text: str, value: str) -> str:
    return f"{value}{text}"
