"""Central configuration for the Data Stage audit package."""
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Context, Decimal

# Label rows that some exporters leave at the top of each record file.
LABEL_PREFIXES = ("Patente|", "NUM_PED|")


@dataclass(slots=True, frozen=True)
class Settings:
    decimal_context: Context
    value_tolerance: Decimal
    encoding: str
    delimiter: str
    min_columns: int
    label_prefixes: tuple[str, ...]
    chunk_size: int
    max_workers: int
    chunk_pause: float


SETTINGS = Settings(
    decimal_context=Context(prec=28),
    value_tolerance=Decimal(os.environ.get("DATASTAGE_VALUE_TOLERANCE", "1.00")),
    encoding=os.environ.get("DATASTAGE_ENCODING", "cp1252"),
    delimiter="|",
    min_columns=10,
    label_prefixes=LABEL_PREFIXES,
    chunk_size=int(os.environ.get("DATASTAGE_CHUNK_SIZE", "5")),
    max_workers=5,
    chunk_pause=0.0,
)
