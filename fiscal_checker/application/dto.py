"""Application-level DTOs for the fiscal validation workflow."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from fiscal_checker.domain.models import DocumentRecord, ExceptionKeySets, LedgerHeaderInfo
from fiscal_checker.domain.results import ClassificationResult, KeyCheckResult, OperationResult


@dataclass(slots=True, frozen=True)
class ClassificationRequest:
    documents: Sequence[DocumentRecord]
    exceptions: ExceptionKeySets = field(default_factory=ExceptionKeySets)
    canceled: Sequence[DocumentRecord] = ()
    own_cnpj: str | None = None
    inbound_items: Sequence[DocumentRecord] = ()
    outbound_items: Sequence[DocumentRecord] = ()


@dataclass(slots=True, frozen=True)
class ValidationRequest:
    classification: ClassificationRequest
    ledger_text: str = ""


@dataclass(slots=True, frozen=True)
class ValidationResponse:
    classification: ClassificationResult
    key_check: KeyCheckResult | None
    header: LedgerHeaderInfo | None
    saved: OperationResult
