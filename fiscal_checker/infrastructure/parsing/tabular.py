"""Spreadsheet ingestion producing ``DocumentRecord`` collections."""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd

from fiscal_checker.config import SETTINGS
from fiscal_checker.domain.models import DocumentKind, DocumentRecord, UploadOrigin
from fiscal_checker.domain.values import clean_text
from fiscal_checker.infrastructure.parsing.utils import ensure_bytes, source_name

logger = logging.getLogger(__name__)

KEY_COLUMNS = (SETTINGS.key_column, "Chave", "Chave Acesso", "chave_acesso")
ISSUER_COLUMNS = (SETTINGS.issuer_column, "CNPJ do Emitente", "CPF/CNPJ", "CNPJ")

# Listings exported by NF-Stock end with summary lines.
SUMMARY_PHRASES = ("TOTAL", "VALOR TOTAL DAS NOTAS", "VALOR TOTAL DA PRESTAÇÃO")

EXCEL_ENGINES = ("openpyxl", "xlrd")


def read_table(source: BytesIO | Path | bytes | str) -> pd.DataFrame:
    """Read the first sheet of a workbook (or a CSV file) with every cell as text."""
    name = source_name(source).lower()
    raw = ensure_bytes(source)
    if name.endswith(".csv"):
        return pd.read_csv(BytesIO(raw), dtype=str, keep_default_na=False, sep=None, engine="python")

    last_error: Exception | None = None
    for engine in EXCEL_ENGINES:
        try:
            return pd.read_excel(BytesIO(raw), sheet_name=0, engine=engine, dtype=str, keep_default_na=False)
        except Exception as exc:  # each engine raises its own format errors
            last_error = exc
            continue
    raise ValueError(f"Could not read spreadsheet {name or '<bytes>'}: {last_error}")


def _pick_column(df: pd.DataFrame, candidates: Sequence[str]) -> str | None:
    lower_map = {str(column).strip().lower(): column for column in df.columns}
    for candidate in candidates:
        column = lower_map.get(candidate.lower())
        if column is not None:
            return column
    return None


def is_summary_or_blank(row: dict[str, object], key_column: str | None = None) -> bool:
    """Blank rows, and keyless rows opening with a totals phrase."""
    values = [clean_text(value) for value in row.values()]
    if not any(values):
        return True
    if key_column is not None and clean_text(row.get(key_column)):
        return False
    return any(value.upper().startswith(SUMMARY_PHRASES) for value in values)


def dataframe_to_records(
    df: pd.DataFrame,
    kind: DocumentKind = DocumentKind.NFE,
    origin: UploadOrigin = UploadOrigin.INBOUND,
) -> list[DocumentRecord]:
    key_column = _pick_column(df, KEY_COLUMNS)
    issuer_column = _pick_column(df, ISSUER_COLUMNS)
    if key_column is None:
        logger.warning("No access-key column among %s", list(df.columns))
    else:
        key_column = str(key_column)

    records: list[DocumentRecord] = []
    dropped = 0
    for row in df.to_dict(orient="records"):
        row = {str(column): value for column, value in row.items()}
        if is_summary_or_blank(row, key_column):
            dropped += 1
            continue
        records.append(
            DocumentRecord(
                access_key=clean_text(row.get(key_column)) if key_column is not None else "",
                kind=kind,
                issuer_cnpj=clean_text(row.get(str(issuer_column))) if issuer_column is not None else "",
                origin=origin,
                fields=row,
            )
        )
    if dropped:
        logger.debug("Dropped %d blank or summary rows", dropped)
    return records


def read_key_column(source: BytesIO | Path | bytes | str) -> list[str]:
    """Raw access keys of an exception sheet; falls back to the first column."""
    df = read_table(source)
    column = _pick_column(df, KEY_COLUMNS)
    if column is None:
        if df.columns.empty:
            return []
        column = df.columns[0]
    return [value for value in (clean_text(v) for v in df[column].tolist()) if value]
