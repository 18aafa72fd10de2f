"""Tabular exports of classification partitions and ledger key checks."""
from __future__ import annotations

import re
from io import BytesIO
from typing import Mapping, Sequence

import pandas as pd

from fiscal_checker.config import SETTINGS
from fiscal_checker.domain.keys import invoice_model, invoice_number
from fiscal_checker.domain.models import DocumentRecord
from fiscal_checker.domain.results import ClassificationResult, KeyCheckResult

# Excel caps sheet names at 31 characters.
SHEET_NAMES: Mapping[str, str] = {
    "valid": "Notas Válidas",
    "inbound_items": "Itens Válidos",
    "valid_keys": "Chaves Válidas",
    "fixed_assets": "Imobilizados",
    "canceled": "Notas Canceladas",
    "self_issued": "Emissão Própria",
    "outbound_items": "Itens de Saída",
    "operation_not_performed": "Operação Não Realizada",
    "recipient_unaware": "Desconhecimento Destinatário",
    "service_disagreement": "Desacordo de Serviço",
}

KEY_CHECK_COLUMNS = ("issue_type", "key", "invoice_number", "model")


def format_cnpj(cnpj: str) -> str:
    """Render 14 digits as ``00.000.000/0000-00``; anything else is returned unchanged."""
    if not cnpj:
        return ""
    digits = re.sub(r"\D", "", cnpj)
    if len(digits) != 14:
        return cnpj
    return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}"


def records_to_dataframe(records: Sequence[DocumentRecord]) -> pd.DataFrame:
    rows = []
    for record in records:
        row = dict(record.fields)
        if not row:
            row = {SETTINGS.key_column: record.access_key}
        rows.append(row)
    return pd.DataFrame(rows)


def classification_to_frames(result: ClassificationResult) -> dict[str, pd.DataFrame]:
    frames: dict[str, pd.DataFrame] = {}
    for attribute, sheet in SHEET_NAMES.items():
        if attribute == "valid_keys":
            frames[sheet] = pd.DataFrame({SETTINGS.key_column: list(result.valid_keys)})
        else:
            frames[sheet] = records_to_dataframe(getattr(result, attribute))
    return frames


def key_check_to_rows(key_check: KeyCheckResult) -> list[dict[str, str]]:
    """One row per reported key, with the invoice number and model read from the key."""
    rows: list[dict[str, str]] = []
    sections = (
        ("only_in_tabular", key_check.only_in_tabular),
        ("only_in_ledger", key_check.only_in_ledger),
        ("duplicate_in_tabular", key_check.duplicates_in_tabular),
        ("duplicate_in_ledger", key_check.duplicates_in_ledger),
    )
    for issue_type, keys in sections:
        rows.extend(
            {"issue_type": issue_type, "key": key, "invoice_number": invoice_number(key), "model": invoice_model(key)}
            for key in keys
        )
    return rows


def key_check_to_frame(key_check: KeyCheckResult) -> pd.DataFrame:
    return pd.DataFrame(key_check_to_rows(key_check), columns=list(KEY_CHECK_COLUMNS))


def build_workbook_bytes(frames: Mapping[str, pd.DataFrame]) -> bytes:
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, sheet_name=sheet_name[:31], index=False)
    buf.seek(0)
    return buf.getvalue()


def render_key_check_csv(key_check: KeyCheckResult) -> bytes:
    """CSV of the key check; the header row is written even when nothing was reported."""
    return key_check_to_frame(key_check).to_csv(index=False).encode("utf-8")
