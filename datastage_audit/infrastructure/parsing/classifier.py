"""Derive record codes from Data Stage entry names (e.g. ``M3123456.551`` -> ``551``)."""
from __future__ import annotations

import re
from pathlib import PurePosixPath

_TEXT_SUFFIX = re.compile(r"\.txt$", re.IGNORECASE)
_SUFFIX_CODE = re.compile(r"[_.](\d{3})$")
_BARE_CODE = re.compile(r"^(\d{3})$")


def extract_record_code(file_name: str) -> str:
    """Return the 3-digit record code, or the cleaned name when there is none."""
    clean = _TEXT_SUFFIX.sub("", PurePosixPath(file_name).name)
    match = _SUFFIX_CODE.search(clean) or _BARE_CODE.match(clean)
    if match:
        return match.group(1)
    return clean
