"""Shared parsing utilities for Data Stage ingestion."""
from __future__ import annotations

import hashlib
from decimal import Decimal, InvalidOperation
from io import BytesIO
from pathlib import Path

from datastage_audit.config import SETTINGS


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def compute_file_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def parse_decimal(value: object) -> Decimal:
    """Permissive numeric parse: empty or non-numeric input yields zero."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    s = str(value).strip()
    if not s:
        return Decimal("0")
    if s.upper() == "NAN":
        return Decimal("0")
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    for ch in [",", "$", " "]:
        s = s.replace(ch, "")
    try:
        result = SETTINGS.decimal_context.create_decimal(s)
    except InvalidOperation:
        return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    if negative:
        result = -result
    return result


def decode_lines(data: bytes, encoding: str | None = None) -> list[str]:
    """Decode a single-byte legacy export and drop blank lines.

    Bytes the code page leaves undefined become U+FFFD instead of failing
    the whole entry.
    """
    text = data.decode(encoding or SETTINGS.encoding, errors="replace")
    return [line for line in text.replace("\r\n", "\n").split("\n") if line.strip()]


def split_fields(line: str, delimiter: str | None = None) -> list[str]:
    return line.split(delimiter or SETTINGS.delimiter)
