from __future__ import annotations

import logging
import os
from typing import Iterable, List, Tuple

from .elements import EAttribute, EClass, EEnum, EPackage, EReference, EStructuralFeature
from .resource import ResourceSet

LOGGER = logging.getLogger(__name__)


def iter_packages(pkgs: Iterable[EPackage]) -> Iterable[EPackage]:
    for pkg in pkgs:
        yield pkg
        for sub in pkg.subpackages:
            yield from iter_packages([sub])


def load_metamodel(ecore_path, rset: ResourceSet | None = None) -> Tuple[ResourceSet, List[EPackage]]:
    if ecore_path is None:
        raise ValueError("ecore_path must not be None")
    if rset is None:
        rset = ResourceSet()
    path = os.path.abspath(os.fspath(ecore_path))
    LOGGER.info("Loading metamodel: %s", path)
    resource = rset.resource(path, load_on_demand=True)
    packages = [obj for obj in resource.contents if isinstance(obj, EPackage)]
    if not packages:
        raise ValueError(f"No EPackage found in metamodel: {path}")
    return rset, packages


def _classes(pkg: EPackage) -> List[EClass]:
    return [cls for cls in pkg.classifiers if isinstance(cls, EClass)]


def _features(cls: EClass, kind: type) -> List[EStructuralFeature]:
    return [feature for feature in cls.all_structural_features if isinstance(feature, kind)]


def _type_name(feature: EStructuralFeature) -> str | None:
    return feature.type.name if feature.type is not None else None


def count_metamodel_classes(packages: Iterable[EPackage]) -> int:
    return sum(len(_classes(pkg)) for pkg in iter_packages(packages))


def metamodel_stats(packages: Iterable[EPackage]) -> dict[str, int]:
    class_count = 0
    enum_count = 0
    attr_count = 0
    ref_count = 0
    pkg_count = 0
    for pkg in iter_packages(packages):
        pkg_count += 1
        enum_count += sum(1 for cls in pkg.classifiers if isinstance(cls, EEnum))
        for cls in _classes(pkg):
            class_count += 1
            attr_count += len(_features(cls, EAttribute))
            ref_count += len(_features(cls, EReference))
    return {
        "packages": pkg_count,
        "classes": class_count,
        "enums": enum_count,
        "attributes": attr_count,
        "references": ref_count,
    }


def summarize_metamodel(packages: Iterable[EPackage]) -> str:
    lines: List[str] = []
    total_classes = 0
    for pkg in iter_packages(packages):
        lines.append(f"Package: {pkg.name} nsURI={pkg.ns_uri}")
        for cls in _classes(pkg):
            total_classes += 1
            attrs = [a.name for a in _features(cls, EAttribute)]
            refs = [r.name for r in _features(cls, EReference)]
            abstract = " (abstract)" if cls.abstract else ""
            lines.append(f"  Class: {cls.name}{abstract} attrs={len(attrs)} refs={len(refs)}")
            if attrs:
                lines.append(f"    Attributes: {', '.join(attrs)}")
            if refs:
                lines.append(f"    References: {', '.join(refs)}")
        for enum in pkg.classifiers:
            if isinstance(enum, EEnum):
                lines.append(f"  Enum: {enum.name} literals={', '.join(lit.name for lit in enum.literals)}")
    lines.append(f"Total classes: {total_classes}")
    return "\n".join(lines)


def metamodel_dump(packages: Iterable[EPackage]) -> dict[str, object]:
    def dump_package(pkg: EPackage) -> dict[str, object]:
        pkg_entry: dict[str, object] = {
            "name": pkg.name,
            "nsURI": pkg.ns_uri,
            "nsPrefix": pkg.ns_prefix,
            "classes": [],
            "enums": [],
            "subpackages": [],
        }
        for cls in _classes(pkg):
            attrs = []
            for attr in _features(cls, EAttribute):
                attrs.append({"name": attr.name, "type": _type_name(attr), "many": attr.many})
            refs = []
            for ref in _features(cls, EReference):
                refs.append(
                    {
                        "name": ref.name,
                        "type": _type_name(ref),
                        "many": ref.many,
                        "containment": ref.containment,
                        "opposite": ref.opposite.name if ref.opposite is not None else None,
                    }
                )
            pkg_entry["classes"].append(
                {
                    "name": cls.name,
                    "abstract": cls.abstract,
                    "superTypes": [sup.name for sup in cls.super_types],
                    "attributes": attrs,
                    "references": refs,
                }
            )
        for enum in pkg.classifiers:
            if isinstance(enum, EEnum):
                pkg_entry["enums"].append(
                    {
                        "name": enum.name,
                        "literals": [{"name": lit.name, "value": lit.value} for lit in enum.literals],
                    }
                )
        for sub in pkg.subpackages:
            pkg_entry["subpackages"].append(dump_package(sub))
        return pkg_entry

    packages = list(packages)
    data: dict[str, object] = {"packages": [dump_package(pkg) for pkg in packages]}
    data["total_classes"] = count_metamodel_classes(packages)
    return data
