"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import CommercialInvoiceItem, DeclarationRecord


class DeclarationRepository(Protocol):
    """Provides linked declarations."""

    def list_declarations(self) -> Sequence[DeclarationRecord]:
        ...


class CommercialInvoiceRepository(Protocol):
    """Provides the flat commercial invoice line feed."""

    def list_invoice_items(self) -> Sequence[CommercialInvoiceItem]:
        ...
