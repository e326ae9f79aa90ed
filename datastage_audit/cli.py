"""Command-line entrypoint for Data Stage inspection and invoice audits."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from datastage_audit.application.use_cases import (
    AuditContext,
    AuditDeclarationUseCase,
    ProcessArchiveUseCase,
)
from datastage_audit.config import SETTINGS
from datastage_audit.domain.errors import DataStageError
from datastage_audit.domain.record_types import describe
from datastage_audit.domain.repositories import DeclarationRepository
from datastage_audit.domain.services import ReconciliationEngine
from datastage_audit.infrastructure.repositories.datastage_repositories import (
    DataStageDeclarationRepository,
    JsonDeclarationRepository,
    raw_file_to_dataframe,
)
from datastage_audit.infrastructure.repositories.invoice_repositories import (
    ExcelCommercialInvoiceRepository,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Audit Data Stage customs declarations against commercial invoices")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    inspect = sub.add_parser("inspect", help="Decode an archive and list its declarations and record files")
    inspect.add_argument("archive", type=Path, help="Path to Data Stage ZIP")
    inspect.add_argument("--code", type=str, help="Print the raw rows of this record code")

    audit = sub.add_parser("audit", help="Reconcile one declaration against a commercial invoice feed")
    audit.add_argument("declarations", type=Path, help="Data Stage ZIP or extracted declaration JSON")
    audit.add_argument("invoices", type=Path, help="Commercial invoice CSV/XLSX/XLS")
    audit.add_argument("--declaration", type=str, help="Declaration id patente-pedimento-seccion (default: first)")
    return parser.parse_args(argv)


def _print_progress(done: int, total: int) -> None:
    logger.debug("Processed %d/%d archive entries", done, total)


def _declaration_repository(path: Path) -> DeclarationRepository:
    if path.suffix.lower() == ".json":
        return JsonDeclarationRepository(path)
    return DataStageDeclarationRepository(path, progress=_print_progress)


def run_inspect(args: argparse.Namespace) -> int:
    repository = DataStageDeclarationRepository(args.archive, progress=_print_progress)
    result = ProcessArchiveUseCase(repository).execute()
    stats = result.stats

    print("Archive Summary")
    print("===============")
    print(f"Files processed: {stats.files_processed}")
    print(f"Declarations: {stats.pedimentos_count}")
    print(f"Invoices: {stats.invoices_count}")
    print(f"Items: {stats.items_count}")
    if stats.orphan_invoices or stats.orphan_items:
        print(f"Dropped without header: {stats.orphan_invoices} invoices, {stats.orphan_items} items")

    print("\nDeclarations:")
    for record in result.records:
        general = record.general
        print(
            f"- {record.id} {general.clave_documento} paid {general.fecha_pago or '-'}: "
            f"{len(record.items)} items, {len(record.invoices)} invoices, "
            f"USD {record.total_value_usd:.2f}, incrementables {general.incrementables:.2f}"
        )

    print("\nRecord files:")
    for raw in result.raw_files:
        print(f"- {raw.record_code} {describe(raw.record_code)}: {raw.file_name} ({len(raw.rows)} rows)")

    if args.code:
        for raw in result.raw_files:
            if raw.record_code == args.code:
                print(f"\n{raw.file_name}")
                print(raw_file_to_dataframe(raw).to_string(index=False))
    return 0


def run_audit(args: argparse.Namespace) -> int:
    context = AuditContext(
        declaration_repository=_declaration_repository(args.declarations),
        invoice_repository=ExcelCommercialInvoiceRepository(args.invoices),
        engine=ReconciliationEngine(SETTINGS.value_tolerance),
    )
    response = AuditDeclarationUseCase(context).execute(args.declaration)
    report = response.report
    stats = report.total_value_stats

    print("Audit Summary")
    print("=============")
    print(f"Declaration: {report.pedimento_id}")
    print(f"Declared items: {len(response.declaration.items)}")
    print(f"Invoice lines: {len(response.invoice_items)}")
    print(f"Declared USD: {stats.pedimento_total:.2f}")
    print(f"Invoiced total: {stats.invoice_total:.2f}")
    print(f"Difference: {stats.difference:.2f}")

    if report.has_issues():
        print(f"\n{report.total_discrepancies} discrepancies detected:")
        for discrepancy in report.discrepancies:
            print(
                f"- [{discrepancy.severity.value}] {discrepancy.type.value} "
                f"(seq {discrepancy.item_secuencia}): {discrepancy.description}"
            )
    else:
        print("\nNo discrepancies detected.")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "inspect":
            return run_inspect(args)
        return run_audit(args)
    except DataStageError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
