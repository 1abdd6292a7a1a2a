from __future__ import annotations

import csv
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Tuple

import jinja2

from .elements import EClass, EDataType, EEnum, EPackage, EReference
from .inspector import is_valid_report_extension
from .loader import load_metamodel
from .query import (
    iter_classifiers,
    query_documentation,
    query_has_default_value,
    query_is_attribute,
    query_is_containment,
    query_is_enum,
    query_is_enumerable,
    query_is_reference,
    query_raw_documentation,
    query_specializations,
    query_type_hierarchy,
    query_type_name,
)

LOGGER = logging.getLogger(__name__)

NO_DOCUMENTATION = "No Documentation Provided"

TABLE_FIELDS = ["Class", "Feature", "EType", "Multiplicity", "IsContainment", "Documentation"]


@dataclass
class ReportPayload:
    root_package: EPackage
    enums: List[EEnum]
    data_types: List[EDataType]
    classes: List[EClass]


def _by_name(items) -> list:
    return sorted(items, key=lambda item: item.name or "")


def create_payload(root: EPackage) -> ReportPayload:
    if root is None:
        raise ValueError("root must not be None")
    enums = list(iter_classifiers(root, EEnum))
    data_types = [dt for dt in iter_classifiers(root, EDataType) if not isinstance(dt, EEnum)]
    classes = list(iter_classifiers(root, EClass))
    return ReportPayload(root, _by_name(enums), _by_name(data_types), _by_name(classes))


def _multiplicity(feature) -> str:
    upper = "*" if feature.upper_bound == -1 else str(feature.upper_bound)
    return f"{feature.lower_bound}..{upper}"


def _documentation(element) -> str:
    return query_raw_documentation(element) or NO_DOCUMENTATION


class ReportGenerator:
    extension = ""

    def is_valid_report_extension(self, output_path) -> Tuple[bool, str]:
        return is_valid_report_extension(output_path, self.extension)

    def load_root_package(self, model_path) -> EPackage:
        LOGGER.info("Loading Ecore model from %s", model_path)
        _, packages = load_metamodel(model_path)
        return packages[0]

    def write(self, root: EPackage, output_path) -> None:
        raise NotImplementedError

    def generate_report(self, model_path, output_path) -> None:
        if model_path is None:
            raise ValueError("model_path must not be None")
        if output_path is None:
            raise ValueError("output_path must not be None")
        start = time.perf_counter()
        LOGGER.info("Start generating %s report", self.extension)
        root = self.load_root_package(model_path)
        self.write(root, output_path)
        LOGGER.info(
            "Generated %s report %s in %d [ms]",
            self.extension,
            output_path,
            (time.perf_counter() - start) * 1000,
        )


class TemplateReportGenerator(ReportGenerator):
    template_name = ""

    def __init__(self, loader: jinja2.BaseLoader | None = None) -> None:
        if loader is None:
            loader = jinja2.PackageLoader("ecore_reader", "templates")
        self.env = jinja2.Environment(
            loader=loader,
            autoescape=jinja2.select_autoescape(enabled_extensions=("html.jinja",)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(
            {
                "documentation": _documentation,
                "documentation_lines": query_documentation,
                "type_name": query_type_name,
                "multiplicity": _multiplicity,
                "generalizations": query_type_hierarchy,
            }
        )
        self.env.tests.update(
            {
                "enumerable": query_is_enumerable,
                "attribute": query_is_attribute,
                "reference": query_is_reference,
                "containment": query_is_containment,
                "enum_feature": query_is_enum,
                "defaulted": query_has_default_value,
            }
        )
        self.env.globals.update(specializations=query_specializations)

    def render(self, root: EPackage) -> str:
        payload = create_payload(root)
        return self.env.get_template(self.template_name).render(payload=payload)

    def write(self, root: EPackage, output_path) -> None:
        payload = create_payload(root)
        with open(output_path, "w", encoding="utf-8") as handle:
            self.env.get_template(self.template_name).stream(payload=payload).dump(handle)


class HtmlReportGenerator(TemplateReportGenerator):
    extension = ".html"
    template_name = "ecore-to-html-docs.html.jinja"


class MarkdownReportGenerator(TemplateReportGenerator):
    extension = ".md"
    template_name = "ecore-to-markdown-docs.md.jinja"


class TableReportGenerator(ReportGenerator):
    """One CSV row per class, feature, enum, enum literal and data type."""

    extension = ".csv"

    def rows(self, root: EPackage) -> List[Dict[str, str]]:
        payload = create_payload(root)
        rows: List[Dict[str, str]] = []
        for eclass in payload.classes:
            rows.append(
                {
                    "Class": eclass.name,
                    "Feature": "",
                    "EType": "EClass",
                    "Multiplicity": "",
                    "IsContainment": "",
                    "Documentation": query_raw_documentation(eclass),
                }
            )
            for feature in eclass.structural_features_by_name:
                if feature.derived or feature.transient:
                    continue
                rows.append(
                    {
                        "Class": eclass.name,
                        "Feature": feature.name,
                        "EType": query_type_name(feature),
                        "Multiplicity": _multiplicity(feature),
                        "IsContainment": str(isinstance(feature, EReference) and feature.containment),
                        "Documentation": query_raw_documentation(feature),
                    }
                )
        for enum in payload.enums:
            rows.append(
                {
                    "Class": enum.name,
                    "Feature": "",
                    "EType": "EEnum",
                    "Multiplicity": "",
                    "IsContainment": "",
                    "Documentation": query_raw_documentation(enum),
                }
            )
            for literal in enum.literals:
                rows.append(
                    {
                        "Class": enum.name,
                        "Feature": literal.name,
                        "EType": "EEnumLiteral",
                        "Multiplicity": str(literal.value),
                        "IsContainment": "",
                        "Documentation": query_raw_documentation(literal),
                    }
                )
        for data_type in payload.data_types:
            rows.append(
                {
                    "Class": data_type.name,
                    "Feature": "",
                    "EType": "EDataType",
                    "Multiplicity": "",
                    "IsContainment": "",
                    "Documentation": data_type.instance_class_name or "",
                }
            )
        return rows

    def write(self, root: EPackage, output_path) -> None:
        rows = self.rows(root)
        with open(output_path, "w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=TABLE_FIELDS)
            writer.writeheader()
            writer.writerows(rows)


def _mermaid_id(eclass: EClass) -> str:
    return (eclass.name or "unnamed").replace("-", "_")


def export_mermaid(root: EPackage, output_path) -> dict[str, int]:
    """Write a mermaid class diagram of every class below ``root``."""
    if root is None:
        raise ValueError("root must not be None")
    classes = create_payload(root).classes
    known = set(classes)
    lines = ["classDiagram"]
    node_count = 0
    edge_count = 0

    for eclass in classes:
        lines.append(f"  class {_mermaid_id(eclass)}")
        if eclass.abstract:
            lines.append(f"  <<abstract>> {_mermaid_id(eclass)}")
        node_count += 1

    for eclass in classes:
        src = _mermaid_id(eclass)
        for super_type in eclass.super_types:
            if super_type in known:
                lines.append(f"  {_mermaid_id(super_type)} <|-- {src}")
                edge_count += 1
        for feature in eclass.structural_features:
            if not isinstance(feature, EReference) or feature.type not in known:
                continue
            arrow = "*--" if feature.containment else "-->"
            lines.append(f"  {src} {arrow} {_mermaid_id(feature.type)} : {feature.name}")
            edge_count += 1

    with open(output_path, "w", encoding="utf-8") as handle:
        handle.write("\n".join(lines))
        handle.write("\n")

    return {"nodes": node_count, "edges": edge_count}
