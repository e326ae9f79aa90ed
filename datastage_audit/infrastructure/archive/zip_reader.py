"""In-memory ZIP reader for Data Stage exports."""
from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Iterator

from datastage_audit.domain.errors import ArchiveEntryError, ArchiveFormatError
from datastage_audit.infrastructure.parsing.utils import compute_file_hash, ensure_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    name: str
    is_dir: bool
    content: bytes = b""


class ZipArchiveReader:
    def __init__(self, source: BytesIO | Path | bytes) -> None:
        self._data = ensure_bytes(source)
        if not zipfile.is_zipfile(BytesIO(self._data)):
            raise ArchiveFormatError("Source is not a ZIP archive")
        self.digest = compute_file_hash(self._data)

    def entries(self) -> Iterator[ArchiveEntry]:
        with zipfile.ZipFile(BytesIO(self._data)) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    yield ArchiveEntry(name=info.filename, is_dir=True)
                    continue
                try:
                    content = archive.read(info)
                except Exception as exc:
                    raise ArchiveEntryError(info.filename, exc) from exc
                yield ArchiveEntry(name=info.filename, is_dir=False, content=content)

    def files(self) -> list[ArchiveEntry]:
        """Non-directory entries in archive order."""
        files = [entry for entry in self.entries() if not entry.is_dir]
        logger.debug("Archive %s holds %d files", self.digest[:12], len(files))
        return files
