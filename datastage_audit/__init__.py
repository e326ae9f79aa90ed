"""Data Stage customs declaration ingestion and commercial invoice audit toolkit."""
from datastage_audit.application.use_cases import (
    AuditContext,
    AuditDeclarationUseCase,
    ProcessArchiveUseCase,
)
from datastage_audit.domain.services import ReconciliationEngine, normalize_part_number
from datastage_audit.infrastructure.parsing.pipeline import process_archive
from datastage_audit.infrastructure.repositories.datastage_repositories import (
    DataStageDeclarationRepository,
    JsonDeclarationRepository,
)
from datastage_audit.infrastructure.repositories.invoice_repositories import (
    ExcelCommercialInvoiceRepository,
)

__all__ = [
    "AuditContext",
    "AuditDeclarationUseCase",
    "ProcessArchiveUseCase",
    "ReconciliationEngine",
    "normalize_part_number",
    "process_archive",
    "DataStageDeclarationRepository",
    "JsonDeclarationRepository",
    "ExcelCommercialInvoiceRepository",
]
