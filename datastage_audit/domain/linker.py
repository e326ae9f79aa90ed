"""Link parsed 501/505/551 rows into declaration aggregates."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .models import DeclarationKey, DeclarationRecord, GeneralData, InvoiceData, ItemData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkResult:
    records: Sequence[DeclarationRecord]
    orphan_invoices: int
    orphan_items: int


def link_declarations(
    general: Sequence[GeneralData],
    invoices: Sequence[InvoiceData],
    items: Sequence[ItemData],
) -> LinkResult:
    """Group rows by (patente, pedimento, seccion).

    Headers are seeded first, then invoices, then items. Rows whose key has
    no header are dropped; they are only counted. A repeated header key
    replaces the earlier record.
    """
    declarations: dict[DeclarationKey, DeclarationRecord] = {}
    for header in general:
        declarations[header.key] = DeclarationRecord(general=header)

    orphan_invoices = 0
    for invoice in invoices:
        record = declarations.get(invoice.key)
        if record is None:
            orphan_invoices += 1
            continue
        record.add_invoice(invoice)

    orphan_items = 0
    for item in items:
        record = declarations.get(item.key)
        if record is None:
            orphan_items += 1
            continue
        record.add_item(item)

    if orphan_invoices or orphan_items:
        logger.warning(
            "Dropped rows without a 501 header: %d invoices, %d items",
            orphan_invoices,
            orphan_items,
        )

    return LinkResult(
        records=list(declarations.values()),
        orphan_invoices=orphan_invoices,
        orphan_items=orphan_items,
    )
