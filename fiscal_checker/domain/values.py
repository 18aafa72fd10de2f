"""Value coercion helpers shared by the domain services."""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

_TRAILING_ZERO_FRACTION = re.compile(r"^(-?\d+)\.0+$")


def clean_text(value: object) -> str:
    """Stringify a cell value, trimming it and dropping a spurious ``.0``.

    Spreadsheet readers hand integer-looking columns back as floats, so a
    CFOP of ``1202`` can arrive as ``1202.0``.
    """
    if value is None:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    text = str(value).strip()
    if text.upper() in ("NAN", "NONE"):
        return ""
    match = _TRAILING_ZERO_FRACTION.match(text)
    if match:
        return match.group(1)
    return text


def digits_only(value: object) -> str:
    return re.sub(r"\D", "", clean_text(value))


def parse_br_decimal(value: object) -> Decimal | None:
    """Parse a pt-BR formatted number ("1.500,00", "1500,00", "1500.00").

    Returns ``None`` when the value is blank or not numeric.
    """
    s = clean_text(value)
    if not s:
        return None
    for ch in ("R$", " ", "\xa0"):
        s = s.replace(ch, "")
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return None
    if not result.is_finite():
        return None
    return result


def parse_int(value: object) -> int | None:
    s = clean_text(value)
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None
