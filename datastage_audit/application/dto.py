"""Application-level DTOs for declaration audits."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from datastage_audit.domain.models import CommercialInvoiceItem, DeclarationRecord
from datastage_audit.domain.results import AuditReport


@dataclass(slots=True, frozen=True)
class AuditResponse:
    report: AuditReport
    declaration: DeclarationRecord
    invoice_items: Sequence[CommercialInvoiceItem]
