"""Access-key normalization and harvesting.

An access key (chave de acesso) is the 44-digit national identifier of an
NF-e or CT-e. Sources disagree on its shape: XML-derived listings prefix it
with the document type (``NFe3524...``), spreadsheets may keep dots or
spaces, and SPED ledgers carry it bare inside pipe-delimited lines. Every
comparison in the package goes through :func:`normalize_key`.
"""
from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Iterator

from fiscal_checker.config import KEY_PREFIXES

from .values import clean_text

KEY_LENGTH = 44
KEY_PATTERN = re.compile(r"\b\d{44}\b")
_NON_DIGIT = re.compile(r"\D")


def normalize_key(raw: object, prefixes: Iterable[str] = KEY_PREFIXES) -> str:
    """Return the canonical digit string for ``raw``; never raises.

    The document-type prefix is detected on the original text, before the
    non-digit cleanup would erase its letters.
    """
    text = clean_text(raw)
    if not text:
        return ""
    head = text[:3].upper()
    if any(head == prefix.upper() for prefix in prefixes):
        text = text[3:]
    return _NON_DIGIT.sub("", text).strip()


def is_canonical(key: str) -> bool:
    return len(key) == KEY_LENGTH and key.isdigit()


def harvest_keys(text: str | None) -> Iterator[str]:
    """Yield every 44-digit run found in ``text``, line by line, duplicates included."""
    if not text:
        return
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    for line in normalized.split("\n"):
        yield from KEY_PATTERN.findall(line)


def find_duplicates(keys: Iterable[str]) -> tuple[str, ...]:
    """Keys that occur more than once, in order of first appearance."""
    counts = Counter(keys)
    return tuple(key for key, count in counts.items() if count > 1)


def unique_in_order(keys: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(keys))


# Positions inside a 44-digit key: model (mod) and invoice number (nNF).
MODEL_SLICE = slice(20, 22)
NUMBER_SLICE = slice(25, 34)
MODEL_NAMES = {"55": "NFE", "57": "CTE"}
UNKNOWN_NUMBER = "N/A"
UNKNOWN_MODEL = "?"


def invoice_number(key: str) -> str:
    """Invoice number embedded in a key, without leading zeros; ``"N/A"`` when unreadable."""
    digits = key[NUMBER_SLICE] if len(key) == KEY_LENGTH else ""
    if not digits.isdigit():
        return UNKNOWN_NUMBER
    return str(int(digits))


def invoice_model(key: str) -> str:
    if len(key) != KEY_LENGTH:
        return UNKNOWN_MODEL
    return MODEL_NAMES.get(key[MODEL_SLICE], UNKNOWN_MODEL)
