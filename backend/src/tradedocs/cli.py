"""
Command line interface - classify text files and cross-check the resulting cases.

Usage:
    tradedocs analyze docs/*.txt
    tradedocs analyze invoice.txt bl.txt --json
    tradedocs requirements 0803.90
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from tradedocs.config import get_settings
from tradedocs.domain.models import CaseFile, DocumentRecord
from tradedocs.infrastructure.tables import RequirementTableError
from tradedocs.services.engine import ComplianceEngine

logger = logging.getLogger(__name__)


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def print_document(record: DocumentRecord) -> None:
    fields = record.fields
    print(f"\n{'=' * 70}")
    print(f"{record.filename}")
    print(f"{'=' * 70}")
    print(f"  Kind:        {record.kind.value} ({record.confidence}%)")
    print(f"  Origin:      {record.origin.value}")
    print(f"  Keywords:    {', '.join(record.keywords) or '-'}")
    print(f"  Number:      {fields.document_number or '-'}")
    print(f"  Importer:    {fields.importer or '-'}")
    print(f"  Exporter:    {fields.exporter or '-'}")
    print(f"  Tariff hint: {fields.tariff_hint or '-'}")
    print(f"  Value:       {fields.declared_value if fields.declared_value is not None else '-'}")
    print(f"  Weight:      {fields.declared_weight if fields.declared_weight is not None else '-'}")
    print(f"  Origin ctry: {fields.country_of_origin or '-'}")


def print_case(case: CaseFile) -> None:
    print(f"\n{'-' * 70}")
    print(f"CASE {case.reference}  [{case.compliance_state.value.upper()}]")
    print(f"{'-' * 70}")
    print(f"  Importer: {case.importer}")
    print(f"  Exporter: {case.exporter}")
    print(f"  Documents: {', '.join(doc.filename for doc in case.documents)}")
    if case.missing_documents:
        print(f"  Missing documents: {', '.join(case.missing_documents)}")
    if case.missing_permits:
        print(f"  Missing permits:   {', '.join(case.missing_permits)}")
    if case.consistency:
        result = case.consistency
        print(f"  Cross-check: {result.verdict.value} (score {result.score}) - {result.summary}")
        for d in result.discrepancies:
            print(f"    [{d.severity.value}] {d.description}")


def run_analyze(engine: ComplianceEngine, files: list[Path], as_json: bool) -> int:
    settings = get_settings()
    records: list[DocumentRecord] = []
    failures = 0

    for file_path in files:
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error reading {file_path}: {e}", file=sys.stderr)
            failures += 1
            continue
        records.append(engine.analyze(file_path.name, text, settings.known_internal_ids))

    cases = engine.build_case_files(records)

    if as_json:
        print(json.dumps(
            {
                "documents": [r.to_dict() for r in records],
                "cases": [c.to_dict() for c in cases],
            },
            indent=2,
            ensure_ascii=False,
        ))
    else:
        for record in records:
            print_document(record)
        for case in cases:
            print_case(case)
        print(f"\n{len(records)} documents, {len(cases)} case files")

    return 1 if failures else 0


def run_requirements(engine: ComplianceEngine, tariff_hint: str | None, as_json: bool) -> int:
    documents = engine.required_documents(tariff_hint)
    if as_json:
        print(json.dumps({"tariff_hint": tariff_hint, "documents": documents}, indent=2, ensure_ascii=False))
    else:
        for name in documents:
            print(f"  - {name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tradedocs",
        description="Classify trade documents and cross-check import case files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Classify and aggregate a batch of extracted texts
  tradedocs analyze samples/*.txt

  # Same, as JSON
  tradedocs analyze invoice.txt bl.txt --json

  # Document checklist for a tariff code
  tradedocs requirements 0803.90.11
        """,
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    analyze = subcommands.add_parser("analyze", help="Classify text files and build case files")
    analyze.add_argument("files", nargs="+", type=Path, help="UTF-8 text files")
    analyze.add_argument("--json", action="store_true", help="Emit JSON instead of a report")

    requirements = subcommands.add_parser("requirements", help="Document checklist for a tariff hint")
    requirements.add_argument("tariff_hint", nargs="?", default=None, help="Tariff code hint")
    requirements.add_argument("--json", action="store_true", help="Emit JSON instead of a list")

    return parser


def main(argv: list[str] | None = None, engine: ComplianceEngine | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if engine is None:
        try:
            engine = ComplianceEngine.from_settings(get_settings())
        except RequirementTableError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return 2

    if args.command == "analyze":
        return run_analyze(engine, args.files, args.json)
    return run_requirements(engine, args.tariff_hint, args.json)


if __name__ == "__main__":
    sys.exit(main())
