"""Data Stage record parsers producing typed 501/505/551 entities."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence, Union

from datastage_audit.config import SETTINGS, Settings
from datastage_audit.domain.models import GeneralData, InvoiceData, ItemData, RawRecordFile
from datastage_audit.domain.record_types import COLUMN_TABLES, NUMERIC_FIELDS, RecordCode
from datastage_audit.infrastructure.parsing.classifier import extract_record_code
from datastage_audit.infrastructure.parsing.utils import decode_lines, parse_decimal, split_fields

Entity = Union[GeneralData, InvoiceData, ItemData]


@dataclass
class EntryParseResult:
    """Output of one archive entry; merged into the run accumulators later."""

    raw: RawRecordFile | None
    general: list[GeneralData] = field(default_factory=list)
    invoices: list[InvoiceData] = field(default_factory=list)
    items: list[ItemData] = field(default_factory=list)


def _map_columns(fields: Sequence[str], columns: Mapping[str, int]) -> dict[str, object]:
    values: dict[str, object] = {}
    for name, idx in columns.items():
        raw = fields[idx] if idx < len(fields) else ""
        values[name] = parse_decimal(raw) if name in NUMERIC_FIELDS else raw
    return values


def parse_general(fields: Sequence[str]) -> GeneralData:
    return GeneralData(**_map_columns(fields, COLUMN_TABLES[RecordCode.GENERAL]))


def parse_invoice(fields: Sequence[str]) -> InvoiceData:
    return InvoiceData(**_map_columns(fields, COLUMN_TABLES[RecordCode.INVOICE]))


def parse_item(fields: Sequence[str]) -> ItemData:
    return ItemData(**_map_columns(fields, COLUMN_TABLES[RecordCode.ITEM]))


PARSERS: Mapping[RecordCode, Callable[[Sequence[str]], Entity]] = {
    RecordCode.GENERAL: parse_general,
    RecordCode.INVOICE: parse_invoice,
    RecordCode.ITEM: parse_item,
}


def parse_lines(code: RecordCode, lines: Sequence[str], settings: Settings = SETTINGS) -> list[Entity]:
    """Parse data lines, skipping label rows and rows that are too short."""
    parser = PARSERS[code]
    entities: list[Entity] = []
    for line in lines:
        if line.startswith(settings.label_prefixes):
            continue
        fields = split_fields(line, settings.delimiter)
        if len(fields) < settings.min_columns:
            continue
        entities.append(parser(fields))
    return entities


def parse_entry(file_name: str, content: bytes, settings: Settings = SETTINGS) -> EntryParseResult:
    lines = decode_lines(content, settings.encoding)
    record_code = extract_record_code(file_name)
    rows = tuple(tuple(split_fields(line, settings.delimiter)) for line in lines)
    result = EntryParseResult(
        raw=RawRecordFile(file_name=file_name, record_code=record_code, rows=rows) if rows else None
    )

    code = RecordCode.lookup(record_code)
    if code is RecordCode.GENERAL:
        result.general.extend(parse_lines(code, lines, settings))
    elif code is RecordCode.INVOICE:
        result.invoices.extend(parse_lines(code, lines, settings))
    elif code is RecordCode.ITEM:
        result.items.extend(parse_lines(code, lines, settings))
    return result
