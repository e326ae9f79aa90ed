"""Declaration repositories backed by Data Stage archives or extracted JSON."""
from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from datastage_audit.domain.errors import DataStageError
from datastage_audit.domain.models import (
    DeclarationKey,
    DeclarationRecord,
    GeneralData,
    InvoiceData,
    ItemData,
    RawRecordFile,
)
from datastage_audit.domain.record_types import COLUMN_TABLES, NUMERIC_FIELDS, RecordCode, column_names
from datastage_audit.domain.repositories import DeclarationRepository
from datastage_audit.domain.results import ArchiveProcessingResult
from datastage_audit.infrastructure.parsing.pipeline import ProgressCallback, process_archive
from datastage_audit.infrastructure.parsing.utils import ensure_bytes, parse_decimal


class DataStageDeclarationRepository(DeclarationRepository):
    """Processes the archive once and serves the linked declarations."""

    def __init__(self, source: BytesIO | Path | bytes, progress: ProgressCallback | None = None) -> None:
        self._source = ensure_bytes(source)
        self._progress = progress
        self._result: ArchiveProcessingResult | None = None

    def load(self) -> ArchiveProcessingResult:
        if self._result is None:
            self._result = process_archive(self._source, progress=self._progress)
        return self._result

    def list_declarations(self) -> Sequence[DeclarationRecord]:
        return self.load().records

    def list_raw_files(self) -> Sequence[RawRecordFile]:
        return self.load().raw_files


def raw_file_to_dataframe(raw: RawRecordFile) -> pd.DataFrame:
    """Tabulate raw rows under the schema labels of their record code."""
    width = max((len(row) for row in raw.rows), default=0)
    rows = [list(row) + [""] * (width - len(row)) for row in raw.rows]
    return pd.DataFrame(rows, columns=column_names(raw.record_code, width))


def _camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


def _from_json(payload: dict[str, Any], code: RecordCode) -> dict[str, object]:
    values: dict[str, object] = {}
    for name in COLUMN_TABLES[code]:
        raw = payload.get(_camel(name), "")
        values[name] = parse_decimal(raw) if name in NUMERIC_FIELDS else ("" if raw is None else str(raw))
    return values


class JsonDeclarationRepository(DeclarationRepository):
    """Reads a declaration document written by the richer extraction path.

    The document is a single object (or list of objects) with camelCase
    header fields plus ``items`` and ``invoices`` arrays; items may carry
    ``invoiceNo`` and ``partNumber`` cross-references.
    """

    def __init__(self, source: BytesIO | Path | bytes) -> None:
        self._source = ensure_bytes(source)

    def list_declarations(self) -> Sequence[DeclarationRecord]:
        try:
            payload = json.loads(self._source.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DataStageError(f"Declaration JSON is unreadable: {exc}") from exc
        documents = payload if isinstance(payload, list) else [payload]
        for document in documents:
            if not isinstance(document, dict):
                raise DataStageError(f"Declaration JSON must hold objects, got {type(document).__name__}")
        return [self._to_record(document) for document in documents]

    @staticmethod
    def _to_record(document: dict[str, Any]) -> DeclarationRecord:
        record = DeclarationRecord(general=GeneralData(**_from_json(document, RecordCode.GENERAL)))
        header = record.key
        for invoice in document.get("invoices") or []:
            values = _from_json({**_key_fields(header), **invoice}, RecordCode.INVOICE)
            record.add_invoice(InvoiceData(**values))
        for item in document.get("items") or []:
            values = _from_json({**_key_fields(header), **item}, RecordCode.ITEM)
            record.add_item(
                ItemData(
                    **values,
                    invoice_no=_reference(item.get("invoiceNo")),
                    part_number=_reference(item.get("partNumber")),
                )
            )
        return record


def _reference(value: Any) -> str | None:
    # Extraction may emit invoice and part numbers as JSON numbers.
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _key_fields(key: DeclarationKey) -> dict[str, str]:
    return {"patente": key.patente, "pedimento": key.pedimento, "seccion": key.seccion}
