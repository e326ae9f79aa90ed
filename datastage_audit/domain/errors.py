"""Exceptions raised while ingesting Data Stage archives and invoice feeds."""
from __future__ import annotations


class DataStageError(Exception):
    """Base class for ingestion failures surfaced to callers."""


class ArchiveFormatError(DataStageError):
    """The container could not be opened as a ZIP archive."""


class ArchiveEntryError(DataStageError):
    """Decoding or parsing one archive entry failed; aborts the whole archive."""

    def __init__(self, file_name: str, cause: BaseException) -> None:
        self.file_name = file_name
        self.cause = cause
        super().__init__(f"Failed to process archive entry {file_name!r}: {cause}")


class InvoiceFeedError(DataStageError):
    """The commercial invoice spreadsheet is unreadable or lacks required columns."""
