"""Plain text inspection of a metamodel.

The inspector looks for the distinct multiplicity combinations a model
uses, which is what a code generator targeting the model has to cover,
and for classes or features that lack documentation.
"""

from __future__ import annotations

import logging
import os
import time
from typing import List, Set, Tuple

from .elements import EAttribute, EClass, EPackage, EReference, EStructuralFeature
from .loader import load_metamodel
from .query import query_is_enum, query_raw_documentation, query_type_name

LOGGER = logging.getLogger(__name__)

REPORT_EXTENSION = ".txt"


def is_valid_report_extension(output_path, extension: str = REPORT_EXTENSION) -> Tuple[bool, str]:
    if output_path is None:
        raise ValueError("output_path must not be None")
    suffix = os.path.splitext(os.fspath(output_path))[1]
    if suffix == extension:
        return True, f"{extension} is a supported report extension"
    return (
        False,
        f"The Extension of the output file '{suffix}' is not supported. Supported extensions is '{extension}'",
    )


def _classes(package: EPackage) -> List[EClass]:
    return sorted(
        (cls for cls in package.classifiers if isinstance(cls, EClass)),
        key=lambda cls: cls.name or "",
    )


def _describe(feature: EStructuralFeature) -> str:
    bounds = f"[{feature.lower_bound}..{feature.upper_bound}]"
    head = f"{feature.name}:{query_type_name(feature)} {bounds}"
    if isinstance(feature, EReference):
        if feature.containment and not feature.derived:
            return f"{head} - CONTAINED REFERENCE TYPE"
        return f"{head} - REFERENCE TYPE"
    if query_is_enum(feature):
        return f"{head} - ENUM TYPE"
    return f"{head} - VALUETYPE"


class ModelInspector:
    def __init__(self) -> None:
        self.interesting_classes: Set[EClass] = set()
        self.reference_types: List[str] = []
        self.value_types: List[str] = []
        self.enums: List[str] = []

    def inspect(self, package: EPackage, recursive: bool = False) -> str:
        if package is None:
            raise ValueError("package must not be None")
        lines = [f"----- PACKAGE {package.name} ANALYSIS ------"]
        self._inspect(package, lines, recursive)
        lines.append("----- MULTIPLICITY RESULTS ------")
        lines.extend(f"reference type: {value}" for value in sorted(self.reference_types))
        lines.extend(f"enum type: {value}" for value in sorted(self.enums))
        lines.extend(f"value type: {value}" for value in sorted(self.value_types))
        lines.append("----- INTERESTING CLASSES ------")
        for eclass in sorted(self.interesting_classes, key=lambda cls: cls.name or ""):
            lines.append(f"class: {package.name}:{eclass.name}")
        return "\n".join(lines) + "\n"

    def _inspect(self, package: EPackage, lines: List[str], recursive: bool) -> None:
        for eclass in _classes(package):
            for feature in eclass.structural_features:
                if feature.derived or feature.transient:
                    continue
                if isinstance(feature, EReference):
                    key = f"{feature.lower_bound}:{feature.upper_bound}"
                    if feature.containment:
                        key = f"{key}:containment"
                    if self._record(self.reference_types, key, eclass):
                        lines.append(f"{package.name}.{eclass.name} -- REF {key}")
                elif isinstance(feature, EAttribute):
                    if query_is_enum(feature):
                        key = f"{feature.lower_bound}:{feature.upper_bound}"
                        if self._record(self.enums, key, eclass):
                            lines.append(f"{eclass.name} -- ENUM {key}")
                    else:
                        key = f"{query_type_name(feature)}:{feature.lower_bound}:{feature.upper_bound}"
                        if self._record(self.value_types, key, eclass):
                            lines.append(f"{eclass.name} -- VAL {key}")
        if recursive:
            for sub in package.subpackages:
                self._inspect(sub, lines, True)

    def _record(self, seen: List[str], key: str, eclass: EClass) -> bool:
        if key in seen:
            return False
        seen.append(key)
        self.interesting_classes.add(eclass)
        return True

    def inspect_class(self, package: EPackage, class_name: str) -> str:
        if package is None:
            raise ValueError("package must not be None")
        if class_name is None:
            raise ValueError("class_name must not be None")
        matches = [cls for cls in _classes(package) if cls.name == class_name]
        if len(matches) != 1:
            raise LookupError(f"Class {class_name!r} not found in package {package.name!r}")
        eclass = matches[0]
        features = eclass.all_structural_features_by_name
        lines = [f"{package.name}.{eclass.name}:", "----------------------------------"]
        lines.extend(_describe(f) for f in features if not (f.derived or f.transient))
        lines.append("-DERIVED--------------------------")
        lines.extend(_describe(f) for f in features if f.derived)
        return "\n".join(lines) + "\n"

    def analyze_documentation(self, package: EPackage, recursive: bool = False) -> str:
        if package is None:
            raise ValueError("package must not be None")
        lines = ["----- DOCUMENTATION ANALYSIS ------"]
        self._analyze_documentation(package, lines, recursive)
        return "\n".join(lines) + "\n"

    def _analyze_documentation(self, package: EPackage, lines: List[str], recursive: bool) -> None:
        for eclass in _classes(package):
            if not query_raw_documentation(eclass):
                lines.append(f"{package.name}.{eclass.name}")
            for feature in eclass.structural_features_by_name:
                if not query_raw_documentation(feature):
                    lines.append(f"{package.name}.{eclass.name}:{feature.name}")
        if recursive:
            for sub in package.subpackages:
                self._analyze_documentation(sub, lines, True)

    def generate_report(self, model_path, output_path, recursive: bool = True) -> None:
        """Load ``model_path`` and write the inspection and documentation analysis."""
        if model_path is None:
            raise ValueError("model_path must not be None")
        if output_path is None:
            raise ValueError("output_path must not be None")
        start = time.perf_counter()
        LOGGER.info("Start generating inspection report")
        _, packages = load_metamodel(model_path)
        root = packages[0]
        with open(output_path, "w", encoding="utf-8") as handle:
            handle.write(self.inspect(root, recursive))
            handle.write(self.analyze_documentation(root, recursive))
        LOGGER.info(
            "Generated inspection report %s in %d [ms]", output_path, (time.perf_counter() - start) * 1000
        )

    def is_valid_report_extension(self, output_path) -> Tuple[bool, str]:
        return is_valid_report_extension(output_path)
