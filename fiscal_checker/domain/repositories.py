"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import DocumentRecord, KeyEntry, VerificationRecord


class StoreError(RuntimeError):
    """Raised by a verification store when a read or write fails."""


class DocumentRepository(Protocol):
    """Provides document or item records produced by tabular ingestion."""

    def list_records(self) -> Sequence[DocumentRecord]:
        ...


class VerificationStore(Protocol):
    """Document store holding one verification snapshot per issuer CNPJ.

    Implementations raise :class:`StoreError` on I/O failures and never
    retry internally.
    """

    def get(self, cnpj: str) -> VerificationRecord | None:
        ...

    def upsert(self, record: VerificationRecord) -> None:
        ...

    def write_keys(self, cnpj: str, keys: Sequence[KeyEntry]) -> None:
        ...

    def list_records(self) -> Sequence[VerificationRecord]:
        ...
