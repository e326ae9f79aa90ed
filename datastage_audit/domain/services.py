"""Domain services implementing the declaration-versus-invoice audit rules."""
from __future__ import annotations

import logging
import re
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Mapping, Sequence

from datastage_audit.config import SETTINGS

from .models import CommercialInvoiceItem, ItemData
from .results import (
    NOT_AVAILABLE,
    AuditDiscrepancy,
    AuditReport,
    AuditValue,
    DiscrepancyType,
    Severity,
    TotalValueStats,
)

logger = logging.getLogger(__name__)

_PART_NUMBER_NOISE = re.compile(r"[ \-/]")

InvoiceIndex = Mapping[str, Mapping[str, list[CommercialInvoiceItem]]]


def normalize_part_number(part_number: str | None) -> str:
    """Strip spaces, hyphens and slashes, then uppercase."""
    if not part_number:
        return ""
    return _PART_NUMBER_NOISE.sub("", part_number).upper()


class ReconciliationEngine:
    """Matches declared items to commercial invoice lines by invoice and part number.

    Quantities must match exactly; USD values may differ by at most the
    tolerance (a difference strictly greater than the tolerance is reported).
    """

    def __init__(self, value_tolerance: Decimal | None = None) -> None:
        if value_tolerance is None:
            value_tolerance = SETTINGS.value_tolerance
        self._tolerance = value_tolerance

    def run_audit(
        self,
        declaration_id: str,
        items: Sequence[ItemData],
        invoices: Sequence[CommercialInvoiceItem],
    ) -> AuditReport:
        index, invoice_total = self._index_invoices(invoices)

        discrepancies: list[AuditDiscrepancy] = []
        pedimento_total = Decimal("0")

        for item in items:
            pedimento_total += item.valor_dolares
            invoice_no = item.invoice_no or ""

            parts = index.get(invoice_no)
            if parts is None:
                discrepancies.append(
                    self._discrepancy(
                        item,
                        DiscrepancyType.MISSING_IN_INVOICE,
                        f"Invoice {invoice_no} not found in imported invoices.",
                        Severity.CRITICAL,
                        item.valor_dolares,
                        Decimal("0"),
                    )
                )
                continue

            matched = parts.get(normalize_part_number(item.part_number))
            if not matched:
                discrepancies.append(
                    self._discrepancy(
                        item,
                        DiscrepancyType.PART_NUMBER,
                        f"Part Number {item.part_number} not found in Invoice {invoice_no}.",
                        Severity.HIGH,
                        item.part_number or NOT_AVAILABLE,
                        NOT_AVAILABLE,
                    )
                )
                continue

            # One declared item may consolidate several invoice lines.
            inv_qty = sum((line.qty for line in matched), Decimal("0"))
            inv_total = sum((line.total_amount for line in matched), Decimal("0"))

            if item.cantidad_comercial != inv_qty:
                discrepancies.append(
                    self._discrepancy(
                        item,
                        DiscrepancyType.QUANTITY,
                        f"Quantity mismatch: Pedimento={item.cantidad_comercial}, Invoice={inv_qty}",
                        Severity.CRITICAL,
                        item.cantidad_comercial,
                        inv_qty,
                    )
                )

            if abs(item.valor_dolares - inv_total) > self._tolerance:
                discrepancies.append(
                    self._discrepancy(
                        item,
                        DiscrepancyType.VALUE_USD,
                        f"Value mismatch: Pedimento=${item.valor_dolares:.2f}, Invoice=${inv_total:.2f}",
                        Severity.HIGH,
                        item.valor_dolares,
                        inv_total,
                    )
                )

        logger.info(
            "Audit of %s: %d items, %d invoice lines, %d discrepancies",
            declaration_id,
            len(items),
            len(invoices),
            len(discrepancies),
        )

        return AuditReport(
            id=str(uuid.uuid4()),
            date=datetime.now(timezone.utc).isoformat(),
            pedimento_id=declaration_id,
            total_discrepancies=len(discrepancies),
            total_value_stats=TotalValueStats(
                pedimento_total=pedimento_total,
                invoice_total=invoice_total,
                difference=pedimento_total - invoice_total,
            ),
            discrepancies=tuple(discrepancies),
        )

    @staticmethod
    def _index_invoices(invoices: Sequence[CommercialInvoiceItem]) -> tuple[InvoiceIndex, Decimal]:
        index: dict[str, dict[str, list[CommercialInvoiceItem]]] = defaultdict(lambda: defaultdict(list))
        total = Decimal("0")
        for line in invoices:
            index[line.invoice_no][normalize_part_number(line.part_no)].append(line)
            total += line.total_amount
        # Plain dicts so lookups of unknown keys do not create buckets.
        return {invoice_no: dict(parts) for invoice_no, parts in index.items()}, total

    @staticmethod
    def _discrepancy(
        item: ItemData,
        kind: DiscrepancyType,
        description: str,
        severity: Severity,
        pedimento_value: AuditValue,
        invoice_value: AuditValue,
    ) -> AuditDiscrepancy:
        if isinstance(pedimento_value, Decimal) and isinstance(invoice_value, Decimal):
            difference = pedimento_value - invoice_value
        else:
            difference = Decimal("0")
        return AuditDiscrepancy(
            id=str(uuid.uuid4()),
            pedimento_id=str(item.key),
            item_secuencia=item.secuencia,
            invoice_no=item.invoice_no or NOT_AVAILABLE,
            part_number=item.part_number or NOT_AVAILABLE,
            description=description,
            type=kind,
            severity=severity,
            pedimento_value=pedimento_value,
            invoice_value=invoice_value,
            difference=difference,
        )
