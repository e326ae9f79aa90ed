import json
from decimal import Decimal
from pathlib import Path

import pytest

from datastage_audit.domain.errors import DataStageError
from datastage_audit.domain.models import RawRecordFile
from datastage_audit.infrastructure.repositories.datastage_repositories import (
    DataStageDeclarationRepository,
    JsonDeclarationRepository,
    raw_file_to_dataframe,
)

DECLARATION = {
    "patente": "3420",
    "pedimento": "5005524",
    "seccion": "430",
    "claveDocumento": "A1",
    "tipoCambio": 17.25,
    "fechaPago": "2025-12-02",
    "invoices": [{"numeroFactura": "CF-001", "valorDolares": 800}],
    "items": [
        {
            "secuencia": "1",
            "descripcion": "Tornillo",
            "valorDolares": 500,
            "cantidadComercial": 10,
            "invoiceNo": "CF-001",
            "partNumber": "0010-080013-0010",
        },
        {"secuencia": "2", "valorDolares": "300.5", "cantidadComercial": "3"},
    ],
}


def test_archive_repository_loads_once(datastage_zip: bytes) -> None:
    calls: list[tuple[int, int]] = []
    repo = DataStageDeclarationRepository(datastage_zip, progress=lambda done, total: calls.append((done, total)))

    declarations = repo.list_declarations()
    raw_files = repo.list_raw_files()

    assert len(declarations) == 2
    assert len(raw_files) == 5
    assert calls == [(5, 5)]


def test_json_repository_reads_cross_references(tmp_path: Path) -> None:
    path = tmp_path / "pedimento.json"
    path.write_text(json.dumps(DECLARATION), encoding="utf-8")

    (record,) = JsonDeclarationRepository(path).list_declarations()

    assert record.id == "3420-5005524-430"
    assert record.general.tipo_cambio == Decimal("17.25")
    assert record.general.fletes == Decimal("0")
    assert [invoice.numero_factura for invoice in record.invoices] == ["CF-001"]
    first, second = record.items
    assert first.invoice_no == "CF-001"
    assert first.part_number == "0010-080013-0010"
    assert first.pedimento == "5005524"
    assert second.invoice_no is None
    assert second.valor_dolares == Decimal("300.5")
    assert record.total_value_usd == Decimal("800.5")


def test_json_repository_accepts_lists() -> None:
    payload = json.dumps([DECLARATION, {**DECLARATION, "seccion": "431", "items": []}]).encode("utf-8")

    records = JsonDeclarationRepository(payload).list_declarations()

    assert [record.id for record in records] == ["3420-5005524-430", "3420-5005524-431"]


def test_json_repository_rejects_garbage() -> None:
    with pytest.raises(DataStageError):
        JsonDeclarationRepository(b"{not json").list_declarations()


def test_raw_file_to_dataframe_uses_schema_labels() -> None:
    raw = RawRecordFile(
        file_name="M3420_510.txt",
        record_code="510",
        rows=(("3420", "4001234", "430", "6", "0", "250", "extra"), ("3420", "4001234", "430")),
    )

    frame = raw_file_to_dataframe(raw)

    assert list(frame.columns) == ["Patente", "Pedimento", "Sección", "Contribución", "Forma Pago", "Importe", "col_6"]
    assert frame.iloc[1].tolist() == ["3420", "4001234", "430", "", "", "", ""]


def test_raw_file_to_dataframe_unknown_code() -> None:
    raw = RawRecordFile(file_name="leeme.txt", record_code="leeme", rows=(("a", "b"),))

    assert list(raw_file_to_dataframe(raw).columns) == ["col_0", "col_1"]


def test_json_repository_stringifies_numeric_references() -> None:
    payload = json.dumps(
        {**DECLARATION, "items": [{"secuencia": "1", "invoiceNo": 12345, "partNumber": 880012, "valorDolares": 500}]}
    ).encode("utf-8")

    (record,) = JsonDeclarationRepository(payload).list_declarations()

    assert record.items[0].invoice_no == "12345"
    assert record.items[0].part_number == "880012"


def test_json_repository_rejects_non_object_documents() -> None:
    with pytest.raises(DataStageError):
        JsonDeclarationRepository(b"[1, 2]").list_declarations()
