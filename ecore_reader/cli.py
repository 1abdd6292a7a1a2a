from __future__ import annotations

import argparse
import json
import logging
import sys

from . import __version__
from .exceptions import EcoreError
from .export import (
    HtmlReportGenerator,
    MarkdownReportGenerator,
    TableReportGenerator,
    export_mermaid,
)
from .inspector import ModelInspector
from .loader import (
    count_metamodel_classes,
    load_metamodel,
    metamodel_dump,
    metamodel_stats,
    summarize_metamodel,
)
from .version_check import is_newer_version, query_latest_release


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read Ecore metamodels and generate reports.")
    parser.add_argument("--ecore", required=True, help="Path to .ecore file")
    parser.add_argument("--dump-metamodel", action="store_true", help="Print metamodel summary")
    parser.add_argument("--dump-metamodel-json", help="Write metamodel summary to JSON")
    parser.add_argument("--inspect", help="Write multiplicity and documentation inspection to a .txt file")
    parser.add_argument("--inspect-class", help="Print the features of the named class of the root package")
    parser.add_argument("--analyze-docs", action="store_true", help="Print classes and features lacking documentation")
    parser.add_argument("--recursive", action="store_true", help="Include sub-packages in inspections")
    parser.add_argument("--html-report", help="Write HTML report")
    parser.add_argument("--markdown-report", help="Write Markdown report")
    parser.add_argument("--table-report", help="Write CSV table report")
    parser.add_argument("--export-mermaid", help="Export class diagram to Mermaid")
    parser.add_argument("--check-version", action="store_true", help="Check GitHub for a newer release")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _check_version() -> None:
    release = query_latest_release()
    if release is None:
        return
    if is_newer_version(__version__, release.tag_name):
        logging.warning("A newer version is available: %s (%s)", release.tag_name, release.html_url)
    else:
        logging.info("Running the latest version %s", __version__)


def _validate_report_paths(args: argparse.Namespace) -> bool:
    checks = [
        (args.inspect, ModelInspector()),
        (args.html_report, HtmlReportGenerator()),
        (args.markdown_report, MarkdownReportGenerator()),
        (args.table_report, TableReportGenerator()),
    ]
    for path, generator in checks:
        if not path:
            continue
        ok, message = generator.is_valid_report_extension(path)
        if not ok:
            logging.error(message)
            return False
    return True


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        _configure_logging(args.verbose)
        logging.debug("Parameters:")
        for name, value in vars(args).items():
            logging.debug("%s: %s", name, value)

        if args.check_version:
            _check_version()

        if not _validate_report_paths(args):
            return 2

        try:
            _, packages = load_metamodel(args.ecore)
        except (EcoreError, OSError, ValueError) as exc:
            logging.error("Failed to load metamodel: %s", exc)
            return 2
        root = packages[0]
        stats = metamodel_stats(packages)
        logging.info(
            "Metamodel stats: packages=%s classes=%s enums=%s attributes=%s references=%s",
            stats["packages"],
            stats["classes"],
            stats["enums"],
            stats["attributes"],
            stats["references"],
        )

        if args.dump_metamodel:
            summary = summarize_metamodel(packages)
            logging.info("Metamodel classes: %s", count_metamodel_classes(packages))
            print(summary)
        if args.dump_metamodel_json:
            payload = metamodel_dump(packages)
            with open(args.dump_metamodel_json, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            logging.info("Wrote metamodel JSON: %s", args.dump_metamodel_json)

        inspector = ModelInspector()
        if args.inspect_class:
            try:
                print(inspector.inspect_class(root, args.inspect_class), end="")
            except LookupError as exc:
                logging.error("%s", exc)
                return 2
        if args.analyze_docs:
            print(inspector.analyze_documentation(root, args.recursive), end="")
        if args.inspect:
            with open(args.inspect, "w", encoding="utf-8") as handle:
                handle.write(inspector.inspect(root, args.recursive))
                handle.write(ModelInspector().analyze_documentation(root, args.recursive))
            logging.info("Wrote inspection report: %s", args.inspect)

        for path, generator in (
            (args.html_report, HtmlReportGenerator),
            (args.markdown_report, MarkdownReportGenerator),
            (args.table_report, TableReportGenerator),
        ):
            if path:
                generator().write(root, path)
                logging.info("Wrote %s report: %s", generator.extension, path)

        if args.export_mermaid:
            result = export_mermaid(root, args.export_mermaid)
            logging.info(
                "Wrote Mermaid: %s (nodes=%s, edges=%s)",
                args.export_mermaid,
                result["nodes"],
                result["edges"],
            )

        return 0
    except KeyboardInterrupt:
        print("Stopped by user.")
        return 130
    except OSError as exc:
        logging.error("Failed to write output: %s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
