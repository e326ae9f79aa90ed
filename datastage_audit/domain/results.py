"""Domain-level results for archive processing and invoice audits."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence, Union

from .models import DeclarationRecord, RawRecordFile

AuditValue = Union[Decimal, str]

NOT_AVAILABLE = "N/A"


class DiscrepancyType(str, Enum):
    MISSING_IN_INVOICE = "MISSING_IN_INVOICE"
    PART_NUMBER = "PART_NUMBER"
    QUANTITY = "QUANTITY"
    VALUE_USD = "VALUE_USD"


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"


class DiscrepancyStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"
    IGNORED = "IGNORED"


@dataclass
class AuditDiscrepancy:
    """One mismatch between a declared item and the commercial invoices.

    ``status`` is the only field collaborators are expected to change.
    """

    id: str
    pedimento_id: str
    item_secuencia: str
    invoice_no: str
    part_number: str
    description: str
    type: DiscrepancyType
    severity: Severity
    pedimento_value: AuditValue
    invoice_value: AuditValue
    difference: Decimal
    status: DiscrepancyStatus = DiscrepancyStatus.OPEN


@dataclass(frozen=True)
class TotalValueStats:
    pedimento_total: Decimal
    invoice_total: Decimal
    difference: Decimal


@dataclass(frozen=True)
class AuditReport:
    id: str
    date: str
    pedimento_id: str
    total_discrepancies: int
    total_value_stats: TotalValueStats
    discrepancies: Sequence[AuditDiscrepancy] = field(default_factory=tuple)

    def has_issues(self) -> bool:
        return self.total_discrepancies > 0

    def iter_by_type(self, kind: DiscrepancyType) -> Iterable[AuditDiscrepancy]:
        return (d for d in self.discrepancies if d.type is kind)


@dataclass(frozen=True)
class ProcessingStats:
    files_processed: int
    pedimentos_count: int
    invoices_count: int
    items_count: int
    orphan_invoices: int = 0
    orphan_items: int = 0


@dataclass(frozen=True)
class ArchiveProcessingResult:
    records: Sequence[DeclarationRecord]
    raw_files: Sequence[RawRecordFile]
    stats: ProcessingStats

    def find(self, declaration_id: str) -> DeclarationRecord | None:
        for record in self.records:
            if record.id == declaration_id:
                return record
        return None
