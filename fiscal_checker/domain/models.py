"""Domain models for fiscal-document reconciliation.

These dataclasses capture the canonical schema for documents, item lines and
persisted verification snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from .keys import normalize_key
from .values import digits_only


class DocumentKind(str, Enum):
    NFE = "NFe"
    CTE = "CTe"


class UploadOrigin(str, Enum):
    INBOUND = "entrada"
    OUTBOUND = "saida"


class KeyOrigin(str, Enum):
    TABULAR = "planilha"
    LEDGER_ONLY = "sped"


@dataclass(frozen=True)
class DocumentRecord:
    """A fiscal document (or one item line of it) as handed over by ingestion.

    ``fields`` keeps every source column in its original order; consumers
    render it as-is, so enrichment inserts columns at a position instead of
    appending.
    """

    access_key: str
    kind: DocumentKind = DocumentKind.NFE
    issuer_cnpj: str = ""
    origin: UploadOrigin = UploadOrigin.INBOUND
    fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def normalized_key(self) -> str:
        return normalize_key(self.access_key)

    @property
    def issuer_digits(self) -> str:
        return digits_only(self.issuer_cnpj)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def with_field_after(self, anchor: str, name: str, value: Any) -> "DocumentRecord":
        """Return a copy with ``name`` inserted right after ``anchor``.

        Falls back to appending when ``anchor`` is absent.
        """
        items = [(key, val) for key, val in self.fields.items() if key != name]
        position = next((idx + 1 for idx, (key, _) in enumerate(items) if key == anchor), len(items))
        items.insert(position, (name, value))
        return replace(self, fields=dict(items))


@dataclass(frozen=True)
class ExceptionKeySets:
    """Normalized keys of the three exception sheets (manifestações)."""

    operation_not_performed: frozenset[str] = frozenset()
    recipient_unaware: frozenset[str] = frozenset()
    service_disagreement: frozenset[str] = frozenset()

    @classmethod
    def from_raw(
        cls,
        operation_not_performed: Iterable[object] = (),
        recipient_unaware: Iterable[object] = (),
        service_disagreement: Iterable[object] = (),
    ) -> "ExceptionKeySets":
        return cls(
            operation_not_performed=_key_set(operation_not_performed),
            recipient_unaware=_key_set(recipient_unaware),
            service_disagreement=_key_set(service_disagreement),
        )

    def buckets(self) -> tuple[tuple[str, frozenset[str]], ...]:
        # Fixed precedence: a key present in several sheets lands in the first.
        return (
            ("operation_not_performed", self.operation_not_performed),
            ("recipient_unaware", self.recipient_unaware),
            ("service_disagreement", self.service_disagreement),
        )


def _key_set(raw_keys: Iterable[object]) -> frozenset[str]:
    return frozenset(key for key in (normalize_key(raw) for raw in raw_keys) if key)


@dataclass(frozen=True)
class LedgerHeaderInfo:
    """Identity and period taken from the ``|0000|`` record of a SPED file."""

    cnpj: str
    company_name: str
    competence: str
    start_date: str


@dataclass(frozen=True)
class KeyEntry:
    key: str
    origin: KeyOrigin
    found_in_ledger: bool
    comment: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "origin": self.origin.value,
            "foundInSped": self.found_in_ledger,
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KeyEntry":
        return cls(
            key=str(data.get("key", "")),
            origin=KeyOrigin(data.get("origin", KeyOrigin.TABULAR.value)),
            found_in_ledger=bool(data.get("foundInSped", False)),
            comment=str(data.get("comment") or ""),
        )


@dataclass(frozen=True)
class VerificationStats:
    total_tabular: int = 0
    total_ledger: int = 0
    found_in_both: int = 0
    only_in_tabular: int = 0
    only_in_ledger: int = 0

    @property
    def match_rate(self) -> float:
        if not self.total_tabular:
            return 0.0
        return self.found_in_both / self.total_tabular

    def to_dict(self) -> dict[str, int]:
        return {
            "totalSheetKeys": self.total_tabular,
            "totalSpedKeys": self.total_ledger,
            "foundInBoth": self.found_in_both,
            "onlyInSheet": self.only_in_tabular,
            "onlyInSped": self.only_in_ledger,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VerificationStats":
        return cls(
            total_tabular=int(data.get("totalSheetKeys", 0)),
            total_ledger=int(data.get("totalSpedKeys", 0)),
            found_in_both=int(data.get("foundInBoth", 0)),
            only_in_tabular=int(data.get("onlyInSheet", 0)),
            only_in_ledger=int(data.get("onlyInSped", 0)),
        )


@dataclass(frozen=True)
class VerificationRecord:
    """Persisted snapshot of one ledger validation, keyed by issuer CNPJ."""

    cnpj: str
    company_name: str
    competence: str
    keys: tuple[KeyEntry, ...]
    stats: VerificationStats
    verified_at: datetime

    def find_entry(self, key: object) -> int | None:
        target = normalize_key(key)
        if not target:
            return None
        for idx, entry in enumerate(self.keys):
            if normalize_key(entry.key) == target:
                return idx
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "cnpj": self.cnpj,
            "companyName": self.company_name,
            "competence": self.competence,
            "keys": [entry.to_dict() for entry in self.keys],
            "stats": self.stats.to_dict(),
            "verifiedAt": self.verified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VerificationRecord":
        return cls(
            cnpj=str(data["cnpj"]),
            company_name=str(data.get("companyName", "")),
            competence=str(data.get("competence", "")),
            keys=tuple(KeyEntry.from_dict(item) for item in data.get("keys", ())),
            stats=VerificationStats.from_dict(data.get("stats", {})),
            verified_at=datetime.fromisoformat(data["verifiedAt"]),
        )
