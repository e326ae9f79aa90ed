import json
from decimal import Decimal
from pathlib import Path

import pytest

from datastage_audit import (
    AuditContext,
    AuditDeclarationUseCase,
    DataStageDeclarationRepository,
    ExcelCommercialInvoiceRepository,
    JsonDeclarationRepository,
    ProcessArchiveUseCase,
    ReconciliationEngine,
)
from datastage_audit.cli import main
from datastage_audit.domain.errors import DataStageError
from datastage_audit.domain.results import DiscrepancyType

INVOICE_CSV = (
    "INVOICE NO,PART NO,QTY,TOTAL AMOUNT\n"
    "CF-001,0010080013 0010,10,500\n"
    "CF-001,ABC-9,2,120\n"
)

DECLARATION = {
    "patente": "3420",
    "pedimento": "5005524",
    "seccion": "430",
    "items": [
        {"secuencia": "1", "valorDolares": 500, "cantidadComercial": 10, "invoiceNo": "CF-001", "partNumber": "0010-080013-0010"},
        {"secuencia": "2", "valorDolares": 300, "cantidadComercial": 2, "invoiceNo": "CF-001", "partNumber": "ABC9"},
        {"secuencia": "3", "valorDolares": 40, "cantidadComercial": 1, "invoiceNo": "CF-404", "partNumber": "Z"},
    ],
}


def test_process_archive_use_case(datastage_zip: bytes) -> None:
    result = ProcessArchiveUseCase(DataStageDeclarationRepository(datastage_zip)).execute()

    assert result.stats.pedimentos_count == 2


def test_audit_use_case_with_extracted_declaration() -> None:
    context = AuditContext(
        declaration_repository=JsonDeclarationRepository(json.dumps(DECLARATION).encode("utf-8")),
        invoice_repository=ExcelCommercialInvoiceRepository(INVOICE_CSV.encode("utf-8"), file_name="ci.csv"),
        engine=ReconciliationEngine(),
    )

    response = AuditDeclarationUseCase(context).execute("3420-5005524-430")

    report = response.report
    assert report.pedimento_id == "3420-5005524-430"
    assert [(d.item_secuencia, d.type) for d in report.discrepancies] == [
        ("2", DiscrepancyType.VALUE_USD),
        ("3", DiscrepancyType.MISSING_IN_INVOICE),
    ]
    assert report.total_value_stats.pedimento_total == Decimal("840")
    assert report.total_value_stats.invoice_total == Decimal("620")
    assert len(response.invoice_items) == 2


def test_audit_use_case_on_archive_items_without_references(datastage_zip: bytes) -> None:
    context = AuditContext(
        declaration_repository=DataStageDeclarationRepository(datastage_zip),
        invoice_repository=ExcelCommercialInvoiceRepository(INVOICE_CSV.encode("utf-8"), file_name="ci.csv"),
        engine=ReconciliationEngine(),
    )

    report = AuditDeclarationUseCase(context).execute().report

    assert report.pedimento_id == "3420-4001234-430"
    assert report.total_discrepancies == 2
    assert all(d.type is DiscrepancyType.MISSING_IN_INVOICE for d in report.discrepancies)


def test_audit_use_case_unknown_declaration(datastage_zip: bytes) -> None:
    context = AuditContext(
        declaration_repository=DataStageDeclarationRepository(datastage_zip),
        invoice_repository=ExcelCommercialInvoiceRepository(INVOICE_CSV.encode("utf-8"), file_name="ci.csv"),
        engine=ReconciliationEngine(),
    )

    with pytest.raises(DataStageError):
        AuditDeclarationUseCase(context).execute("0000-0000000-000")


def test_cli_inspect(tmp_path: Path, datastage_zip: bytes, capsys: pytest.CaptureFixture[str]) -> None:
    archive = tmp_path / "export.zip"
    archive.write_bytes(datastage_zip)

    assert main(["inspect", str(archive), "--code", "510"]) == 0

    out = capsys.readouterr().out
    assert "Declarations: 2" in out
    assert "Dropped without header: 1 invoices, 1 items" in out
    assert "3420-4001234-430" in out
    assert "510 Contribuciones Globales" in out
    assert "Importe" in out


def test_cli_audit(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    declaration = tmp_path / "pedimento.json"
    declaration.write_text(json.dumps(DECLARATION), encoding="utf-8")
    invoices = tmp_path / "ci.csv"
    invoices.write_text(INVOICE_CSV, encoding="utf-8")

    assert main(["audit", str(declaration), str(invoices)]) == 0

    out = capsys.readouterr().out
    assert "2 discrepancies detected" in out
    assert "[CRITICAL] MISSING_IN_INVOICE (seq 3)" in out


def test_cli_reports_bad_archive(tmp_path: Path) -> None:
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"definitely not a zip")

    assert main(["inspect", str(archive)]) == 2


def test_audit_matches_numeric_references() -> None:
    declaration = {**DECLARATION, "items": [{"secuencia": "1", "valorDolares": 500, "cantidadComercial": 10, "invoiceNo": 12345, "partNumber": 880012}]}
    context = AuditContext(
        declaration_repository=JsonDeclarationRepository(json.dumps(declaration).encode("utf-8")),
        invoice_repository=ExcelCommercialInvoiceRepository(
            b"INVOICE NO,PART NO,QTY,TOTAL AMOUNT\n12345,880012,10,500\n", file_name="ci.csv"
        ),
        engine=ReconciliationEngine(),
    )

    report = AuditDeclarationUseCase(context).execute().report

    assert report.total_discrepancies == 0


def test_cli_reports_malformed_declaration_json(tmp_path: Path) -> None:
    declaration = tmp_path / "pedimento.json"
    declaration.write_text("[1, 2]", encoding="utf-8")
    invoices = tmp_path / "ci.csv"
    invoices.write_text(INVOICE_CSV, encoding="utf-8")

    assert main(["audit", str(declaration), str(invoices)]) == 2
