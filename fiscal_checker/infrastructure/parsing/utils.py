"""Shared parsing utilities for spreadsheet and ledger ingestion."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path

LEDGER_ENCODING = "latin-1"


def ensure_bytes(source: BytesIO | Path | bytes | str) -> bytes:
    """Raw content of an upload: a path, raw bytes or an in-memory buffer."""
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    getvalue = getattr(source, "getvalue", None)
    if callable(getvalue):
        return getvalue()
    raise TypeError(f"Cannot read spreadsheet or ledger content from {type(source).__name__}")


def source_name(source: BytesIO | Path | bytes | str) -> str:
    if isinstance(source, (Path, str)):
        return Path(source).name
    return getattr(source, "name", "") or ""


def read_ledger_text(source: BytesIO | Path | bytes | str) -> str:
    """Decode a SPED file; the layout mandates ISO-8859-1."""
    return ensure_bytes(source).decode(LEDGER_ENCODING)
