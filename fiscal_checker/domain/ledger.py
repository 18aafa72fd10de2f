"""SPED ledger helpers: header record parsing and key harvesting."""
from __future__ import annotations

from typing import Iterator

from .keys import harvest_keys
from .models import LedgerHeaderInfo

HEADER_MARKER = "|0000|"
MIN_HEADER_FIELDS = 10

# Field positions after splitting on "|" (index 0 is the empty text before
# the leading pipe): |0000|COD_VER|COD_FIN|DT_INI|DT_FIN|NOME|CNPJ|...
DATE_FIELD = 4
NAME_FIELD = 6
CNPJ_FIELD = 7


def first_line(text: str | None) -> str:
    if not text:
        return ""
    for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        if line.strip():
            return line
    return ""


def parse_header(line: str | None) -> LedgerHeaderInfo | None:
    """Parse the ``|0000|`` opening record; ``None`` when it does not qualify."""
    if not line:
        return None
    stripped = line.strip().lstrip("\ufeff")
    if not stripped.startswith(HEADER_MARKER):
        return None
    parts = stripped.split("|")
    if len(parts) < MIN_HEADER_FIELDS:
        return None
    start_date = parts[DATE_FIELD].strip()
    if len(start_date) != 8:
        return None
    return LedgerHeaderInfo(
        cnpj=parts[CNPJ_FIELD].strip(),
        company_name=parts[NAME_FIELD].strip(),
        competence=f"{start_date[2:4]}/{start_date[4:8]}",
        start_date=start_date,
    )


def parse_ledger_header(text: str | None) -> LedgerHeaderInfo | None:
    return parse_header(first_line(text))


def ledger_keys(text: str | None) -> Iterator[str]:
    return harvest_keys(text)
