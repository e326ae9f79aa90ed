"""Spreadsheet-backed repository for the commercial invoice line feed."""
from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd
import xlrd

from datastage_audit.domain.errors import InvoiceFeedError
from datastage_audit.domain.models import CommercialInvoiceItem
from datastage_audit.domain.repositories import CommercialInvoiceRepository
from datastage_audit.infrastructure.parsing.utils import ensure_bytes, parse_decimal

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Commercial Invoice"
REQUIRED_COLUMNS = ("INVOICE NO", "PART NO", "QTY", "TOTAL AMOUNT")
HEADER_SCAN_ROWS = 30


def _detect_format(source: BytesIO | Path | bytes, file_name: str | None) -> str:
    name = file_name or (source.name if isinstance(source, Path) else "")
    suffix = Path(name).suffix.lower()
    if suffix in {".csv", ".txt"}:
        return "csv"
    if suffix == ".xls":
        return "xls"
    return "xlsx"


def _pick_sheet(source: BytesIO, preferred: str, engine: str) -> str:
    sheets = pd.ExcelFile(source, engine=engine).sheet_names
    if not sheets:
        raise InvoiceFeedError("Invoice workbook has no sheets")
    lower_map = {name.lower(): name for name in sheets}
    if preferred.lower() in lower_map:
        return lower_map[preferred.lower()]
    for name in sheets:
        if preferred.lower() in name.lower():
            return name
    return sheets[0]


def read_invoice_raw(source: BytesIO | Path | bytes, file_name: str | None = None) -> pd.DataFrame:
    """Read the sheet without a header; the header row is located afterwards."""
    fmt = _detect_format(source, file_name)
    data = ensure_bytes(source)
    try:
        if fmt == "csv":
            return pd.read_csv(BytesIO(data), dtype=str, header=None, keep_default_na=False, encoding="utf-8-sig")
        engine = "xlrd" if fmt == "xls" else "openpyxl"
        sheet_name = _pick_sheet(BytesIO(data), DEFAULT_SHEET_NAME, engine)
        return pd.read_excel(
            BytesIO(data),
            sheet_name=sheet_name,
            engine=engine,
            dtype=str,
            header=None,
            keep_default_na=False,
        )
    except (ValueError, OSError, zipfile.BadZipFile, xlrd.XLRDError) as exc:
        raise InvoiceFeedError(f"Invoice feed is unreadable: {exc}") from exc


def normalize_invoice_sheet(df: pd.DataFrame) -> pd.DataFrame:
    """Promote the first row carrying the required labels to the header."""
    for idx in range(min(len(df), HEADER_SCAN_ROWS)):
        labels = [str(value).strip().upper() for value in df.iloc[idx].tolist()]
        if all(column in labels for column in REQUIRED_COLUMNS):
            work = df.iloc[idx + 1 :].copy()
            work.columns = labels
            work = work.loc[:, [label != "" for label in labels]]
            return work.reset_index(drop=True)
    raise InvoiceFeedError(f"Invoice sheet is missing required columns: {', '.join(REQUIRED_COLUMNS)}")


def invoice_sheet_to_items(df: pd.DataFrame) -> list[CommercialInvoiceItem]:
    items: list[CommercialInvoiceItem] = []

    def cell(row: pd.Series, column: str) -> str:
        value = row.get(column, "")
        if isinstance(value, str):
            return value.strip()
        return "" if pd.isna(value) else str(value).strip()

    for _, row in df.iterrows():
        part_no = cell(row, "PART NO")
        item_code = cell(row, "ITEM")
        if not part_no and not item_code:
            continue
        if "TOTAL" in item_code.upper():
            continue
        items.append(
            CommercialInvoiceItem(
                invoice_no=cell(row, "INVOICE NO") or "UNKNOWN",
                part_no=part_no,
                qty=parse_decimal(cell(row, "QTY")),
                total_amount=parse_decimal(cell(row, "TOTAL AMOUNT")),
                unit_price=parse_decimal(cell(row, "UNIT PRICE")),
                date=cell(row, "DATE"),
                item=item_code,
                model=cell(row, "MODEL"),
                english_name=cell(row, "ENGLISH NAME"),
                spanish_description=cell(row, "SPANISH DESCRIPTION"),
                hts=cell(row, "HTS"),
                um=cell(row, "UM"),
                net_weight=parse_decimal(cell(row, "NETWEIGHT")),
                regimen=cell(row, "REGIMEN").upper(),
                currency=cell(row, "CURRENCY") or None,
            )
        )
    return items


class ExcelCommercialInvoiceRepository(CommercialInvoiceRepository):
    def __init__(self, source: BytesIO | Path | bytes, file_name: str | None = None) -> None:
        self._file_name = file_name or (source.name if isinstance(source, Path) else None)
        self._source = ensure_bytes(source)

    def list_invoice_items(self) -> Sequence[CommercialInvoiceItem]:
        dataframe = read_invoice_raw(self._source, self._file_name)
        items = invoice_sheet_to_items(normalize_invoice_sheet(dataframe))
        logger.info("Loaded %d commercial invoice lines", len(items))
        return items
