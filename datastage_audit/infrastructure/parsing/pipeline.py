"""Chunked archive processing: decode and parse entries, then link declarations."""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from io import BytesIO
from pathlib import Path
from typing import Callable, Sequence

from datastage_audit.config import SETTINGS, Settings
from datastage_audit.domain.errors import ArchiveEntryError
from datastage_audit.domain.linker import link_declarations
from datastage_audit.domain.models import GeneralData, InvoiceData, ItemData, RawRecordFile
from datastage_audit.domain.results import ArchiveProcessingResult, ProcessingStats
from datastage_audit.infrastructure.archive.zip_reader import ArchiveEntry, ZipArchiveReader
from datastage_audit.infrastructure.parsing.datastage import EntryParseResult, parse_entry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _parse_archive_entry(entry: ArchiveEntry, settings: Settings) -> EntryParseResult:
    try:
        return parse_entry(entry.name, entry.content, settings)
    except Exception as exc:
        raise ArchiveEntryError(entry.name, exc) from exc


def _chunks(entries: Sequence[ArchiveEntry], size: int) -> list[Sequence[ArchiveEntry]]:
    size = max(size, 1)
    return [entries[start : start + size] for start in range(0, len(entries), size)]


def process_archive(
    source: BytesIO | Path | bytes,
    progress: ProgressCallback | None = None,
    settings: Settings = SETTINGS,
) -> ArchiveProcessingResult:
    """Decode every entry of a Data Stage ZIP and link the typed rows.

    Entries are parsed concurrently within fixed-size chunks; each task
    returns its own result and the accumulators are only extended once the
    whole chunk has settled. Any entry failure aborts the run.
    """
    reader = ZipArchiveReader(source)
    entries = reader.files()
    total = len(entries)
    logger.info("Processing Data Stage archive %s (%d files)", reader.digest[:12], total)

    general: list[GeneralData] = []
    invoices: list[InvoiceData] = []
    items: list[ItemData] = []
    raw_files: list[RawRecordFile] = []

    processed = 0
    with ThreadPoolExecutor(max_workers=max(settings.max_workers, 1)) as executor:
        for chunk in _chunks(entries, settings.chunk_size):
            futures = [executor.submit(_parse_archive_entry, entry, settings) for entry in chunk]
            wait(futures)
            results = [future.result() for future in futures]

            for result in results:
                if result.raw is not None:
                    raw_files.append(result.raw)
                general.extend(result.general)
                invoices.extend(result.invoices)
                items.extend(result.items)

            processed += len(chunk)
            if progress is not None:
                progress(processed, total)
            if settings.chunk_pause > 0:
                time.sleep(settings.chunk_pause)

    linked = link_declarations(general, invoices, items)
    raw_files.sort(key=lambda raw: raw.record_code)

    stats = ProcessingStats(
        files_processed=processed,
        pedimentos_count=len(general),
        invoices_count=len(invoices),
        items_count=len(items),
        orphan_invoices=linked.orphan_invoices,
        orphan_items=linked.orphan_items,
    )
    logger.info(
        "Linked %d declarations from %d headers, %d invoices, %d items",
        len(linked.records),
        stats.pedimentos_count,
        stats.invoices_count,
        stats.items_count,
    )
    return ArchiveProcessingResult(records=linked.records, raw_files=raw_files, stats=stats)
