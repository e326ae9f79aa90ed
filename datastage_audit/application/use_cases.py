"""Application services orchestrating archive processing and declaration audits."""
from __future__ import annotations

from dataclasses import dataclass

from datastage_audit.application.dto import AuditResponse
from datastage_audit.domain.errors import DataStageError
from datastage_audit.domain.repositories import CommercialInvoiceRepository, DeclarationRepository
from datastage_audit.domain.results import ArchiveProcessingResult
from datastage_audit.domain.services import ReconciliationEngine
from datastage_audit.infrastructure.repositories.datastage_repositories import (
    DataStageDeclarationRepository,
)


@dataclass(slots=True)
class ProcessArchiveUseCase:
    repository: DataStageDeclarationRepository

    def execute(self) -> ArchiveProcessingResult:
        return self.repository.load()


@dataclass(slots=True)
class AuditContext:
    declaration_repository: DeclarationRepository
    invoice_repository: CommercialInvoiceRepository
    engine: ReconciliationEngine


class AuditDeclarationUseCase:
    def __init__(self, context: AuditContext) -> None:
        self._context = context

    def execute(self, declaration_id: str | None = None) -> AuditResponse:
        declarations = self._context.declaration_repository.list_declarations()
        if not declarations:
            raise DataStageError("No declarations available to audit")
        if declaration_id is None:
            declaration = declarations[0]
        else:
            matches = [record for record in declarations if record.id == declaration_id]
            if not matches:
                raise DataStageError(f"Declaration {declaration_id} not found")
            declaration = matches[0]

        invoices = self._context.invoice_repository.list_invoice_items()
        report = self._context.engine.run_audit(declaration.id, declaration.items, invoices)
        return AuditResponse(report=report, declaration=declaration, invoice_items=invoices)
